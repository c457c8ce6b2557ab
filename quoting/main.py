from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os

from .database import engine, Base
from .exceptions import QuotationError, QuotationValidationError, Unauthorized
from .routers import auth, users, customers, materials, products, quotations, dashboard, pdf

logger = logging.getLogger("quoting")

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)


def _run_migrations():
    """Run pending Alembic migrations on startup.

    Databases created by Base.metadata.create_all() before Alembic was set up
    get the initial revision stamped first, then upgraded to head.
    """
    try:
        from alembic.config import Config
        from alembic import command
        from sqlalchemy import inspect

        alembic_ini = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")
        if not os.path.exists(alembic_ini):
            logger.info("alembic.ini not found, skipping migrations")
            return

        alembic_cfg = Config(alembic_ini)

        database_url = os.environ.get("DATABASE_URL")
        if database_url:
            alembic_cfg.set_main_option("sqlalchemy.url", database_url)

        insp = inspect(engine)
        tables = insp.get_table_names()
        if "alembic_version" not in tables and "quotations" in tables:
            logger.info("Stamping initial migration 3f2a9c1d7b10 (tables already exist)")
            command.stamp(alembic_cfg, "3f2a9c1d7b10")

        logger.info("Running pending Alembic migrations...")
        command.upgrade(alembic_cfg, "head")
        logger.info("Migrations complete")

    except Exception as e:
        # Never let migration errors prevent app startup
        logger.warning(f"Alembic migration warning: {e}")


app = FastAPI(
    title="Quotation Console",
    description="Custom furniture quotation pricing and approval",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QuotationError)
def quotation_error_handler(request: Request, exc: QuotationError):
    """Validation -> 422, role mismatch -> 403, other workflow refusals -> 409."""
    if isinstance(exc, QuotationValidationError):
        status_code = 422
    elif isinstance(exc, Unauthorized):
        status_code = 403
    else:
        status_code = 409
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": exc.code})


# API routes
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(customers.router, prefix="/api")
app.include_router(materials.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(quotations.router, prefix="/api")
app.include_router(pdf.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "quotation-console"}


@app.on_event("startup")
def auto_migrate():
    _run_migrations()


@app.on_event("startup")
def auto_seed_admin():
    """Create the bootstrap admin account if ADMIN_USERNAME/ADMIN_PASSWORD are set."""
    from .auth import ensure_admin_user
    from .database import SessionLocal
    db = SessionLocal()
    try:
        ensure_admin_user(db)
    finally:
        db.close()
