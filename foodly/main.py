import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import get_settings
from .db import SessionLocal, engine, init_db
from .errors import FoodlyError, StorageError
from . import crud, schemas

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s [%(name)s] %(levelname)s: %(message)s'
)
logger = logging.getLogger("foodly.main")

PACKAGE_DIR = Path(__file__).resolve().parent
STATIC_DIR = PACKAGE_DIR / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Environment: %s", settings.environment)
    logger.info("Using database path: %s", settings.database_path)
    try:
        init_db(engine)
    except SQLAlchemyError:
        # Keep serving; every data request will fail on its own with a 5xx
        logger.exception("Error opening database at %s", settings.database_path)
    yield
    logger.info("Shutting down, closing database connections")
    engine.dispose()


app = FastAPI(title="Foodly", lifespan=lifespan)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Dependency to get DB session per request

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@app.exception_handler(FoodlyError)
async def foodly_error_handler(request: Request, exc: FoodlyError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.get("/health", response_model=schemas.Health)
async def health():
    return {
        "status": "OK",
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": settings.database_path,
    }


@app.post("/api/login", response_model=schemas.LoginResponse)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user, created = crud.login_or_register(db, payload.username, payload.password)
    message = "User created and login successful" if created else "Login successful"
    return {"message": message, "username": user.username}


@app.post("/api/order", response_model=schemas.OrderPlaced)
def place_order(payload: schemas.OrderRequest, db: Session = Depends(get_db)):
    order = crud.place_order(db, payload.username, payload.items, payload.total)
    return {"message": "Order placed successfully", "orderId": order.id, "total": payload.total}


@app.get("/api/orders/{username}", response_model=List[schemas.OrderRead])
def get_orders(username: str, db: Session = Depends(get_db)):
    return crud.list_orders(db, username)


@app.get("/api/cart-history/{username}", response_model=List[schemas.CartHistoryRead])
def get_cart_history(username: str, db: Session = Depends(get_db)):
    return crud.list_cart_history(db, username)

# -------------------- Admin Views --------------------
@app.get("/admin", response_class=HTMLResponse)
def admin_summary(request: Request, db: Session = Depends(get_db)):
    try:
        counts = crud.table_counts(db)
    except StorageError as e:
        return HTMLResponse(f"Database error: {e.message}", status_code=e.status_code)
    return templates.TemplateResponse(
        request,
        "admin.html",
        {
            "counts": counts,
            "environment": settings.environment,
            "database_path": settings.database_path,
        },
    )


@app.get("/admin/details", response_class=HTMLResponse)
def admin_details(request: Request, db: Session = Depends(get_db)):
    try:
        tables = crud.dump_tables(db)
    except StorageError as e:
        return HTMLResponse(f"Database error: {e.message}", status_code=e.status_code)
    return templates.TemplateResponse(
        request,
        "admin_details.html",
        {
            "users": tables["users"],
            "orders": tables["orders"],
            "cart_history": tables["cart_history"],
        },
    )


@app.get("/", include_in_schema=False)
async def index():
    return FileResponse(STATIC_DIR / "index.html")
