import json
import logging
from typing import Iterable, List, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import StorageError, StorageTimeoutError, ValidationError

logger = logging.getLogger(__name__)


def _storage_error(exc: SQLAlchemyError, message: str) -> StorageError:
    if isinstance(exc, OperationalError) and "locked" in str(exc.orig).lower():
        return StorageTimeoutError("Database busy, try again later")
    return StorageError(message)


def _find_user(db: Session, username: str) -> models.User | None:
    try:
        return db.query(models.User).filter(models.User.username == username).first()
    except SQLAlchemyError as e:
        logger.exception("Database error looking up user %r", username)
        raise _storage_error(e, "Database error") from e


def login_or_register(db: Session, username: str | None, password: str | None) -> Tuple[models.User, bool]:
    """Return the user for ``username``, creating it on first sight.

    The password is never checked; knowing a username is enough to log in.
    The second element of the result tells whether the account was created.
    """
    if not username or not password:
        raise ValidationError("Username and password are required")

    user = _find_user(db, username)
    if user:
        return user, False

    user = models.User(username=username, password=password)
    db.add(user)
    try:
        db.commit()
        db.refresh(user)
    except IntegrityError as e:
        db.rollback()
        # A concurrent request registered the same username first
        existing = _find_user(db, username)
        if existing:
            logger.info("User %r was registered concurrently; treating as login", username)
            return existing, False
        logger.exception("User creation error for %r", username)
        raise StorageError("Failed to create user") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("User creation error for %r", username)
        raise _storage_error(e, "Failed to create user") from e
    logger.info("Created user %r", username)
    return user, True


def serialize_items(items: Iterable[schemas.LineItem]) -> str:
    # Extra client fields are kept; the blob is stored as the client sent it
    return json.dumps([item.model_dump() for item in items], separators=(",", ":"))


def place_order(db: Session, username: str | None, items: List[schemas.LineItem] | None, total: float | None) -> models.Order:
    """Persist an order and one cart-history row per line item.

    Both writes share one transaction: either the order and all of its
    history rows are stored, or nothing is.
    """
    if not username or not items or total is None:
        raise ValidationError("Missing required fields")
    if total <= 0:
        raise ValidationError("Total must be positive")

    placed_at = models.utcnow()
    order = models.Order(
        username=username,
        items=serialize_items(items),
        total=total,
        order_date=placed_at,
    )
    try:
        db.add(order)
        db.flush()
        db.add_all(
            models.CartHistoryEntry(
                username=username,
                item_id=item.id,
                item_name=item.name,
                quantity=item.quantity,
                price=item.price,
                added_date=placed_at,
            )
            for item in items
        )
        db.commit()
        db.refresh(order)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Order error for %r", username)
        raise _storage_error(e, "Failed to place order") from e
    logger.info("Order %s placed by %r with %d item(s)", order.id, username, len(items))
    return order


def list_orders(db: Session, username: str) -> List[models.Order]:
    try:
        return (
            db.query(models.Order)
            .filter(models.Order.username == username)
            .order_by(models.Order.order_date.desc(), models.Order.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception("Orders fetch error for %r", username)
        raise _storage_error(e, "Database error") from e


def list_cart_history(db: Session, username: str) -> List[models.CartHistoryEntry]:
    try:
        return (
            db.query(models.CartHistoryEntry)
            .filter(models.CartHistoryEntry.username == username)
            .order_by(models.CartHistoryEntry.added_date.desc(), models.CartHistoryEntry.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception("Cart history fetch error for %r", username)
        raise _storage_error(e, "Database error") from e


# -------------------- Reporting --------------------

REPORTED_MODELS = (models.User, models.Order, models.CartHistoryEntry)


def table_counts(db: Session) -> List[Tuple[str, int]]:
    try:
        return [
            (model.__tablename__, db.query(func.count(model.id)).scalar())
            for model in REPORTED_MODELS
        ]
    except SQLAlchemyError as e:
        logger.exception("Admin stats error")
        raise _storage_error(e, "Database error") from e


def dump_tables(db: Session) -> dict:
    """Every row of every table, keyed by table name, in insertion order."""
    try:
        return {
            model.__tablename__: db.query(model).order_by(model.id).all()
            for model in REPORTED_MODELS
        }
    except SQLAlchemyError as e:
        logger.exception("Admin details fetch error")
        raise _storage_error(e, "Database error") from e
