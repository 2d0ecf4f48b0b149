import json
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, text
from .db import Base


def utcnow() -> datetime:
    # Naive UTC, same convention as SQLite's CURRENT_TIMESTAMP
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    username = Column(String, unique=True, nullable=False)
    # stored verbatim; logins never compare it
    password = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP"))


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    # declared for layout compatibility; SQLite does not enforce it here
    username = Column(String, ForeignKey("users.username"), nullable=False)
    # JSON list of {id, name, quantity, price}
    items = Column(Text, nullable=False)
    total = Column(Float, nullable=False)
    order_date = Column(DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP"))

    @property
    def line_items(self) -> list:
        # rows written by other clients may hold anything
        try:
            decoded = json.loads(self.items) if self.items else []
        except ValueError:
            return []
        return decoded if isinstance(decoded, list) else []


class CartHistoryEntry(Base):
    __tablename__ = "cart_history"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    username = Column(String, ForeignKey("users.username"), nullable=False)
    item_id = Column(Integer, nullable=False)
    item_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    added_date = Column(DateTime, default=utcnow, server_default=text("CURRENT_TIMESTAMP"))
