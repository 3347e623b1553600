from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.common.error_handlers import register_error_handlers
from app.core.config import settings
from app.core.database import Base, engine
from app.api.v1 import auth, category, transaction, invoice, receipt, report
from app.logger_config import logger
from app import models  # noqa: F401  registers every table on Base.metadata


@asynccontextmanager
async def lifespan(_: FastAPI):
    # PostgreSQL schemas come from alembic; a local sqlite file is created on the fly
    if engine.dialect.name == "sqlite":
        Base.metadata.create_all(bind=engine)
    logger.info(f"Ledgerly API started ({settings.APP_ENV}, {engine.dialect.name})")
    yield


app = FastAPI(title="Ledgerly", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["authentication"])
app.include_router(
    category.router, prefix="/api/v1/categories", tags=["categories"])
app.include_router(
    transaction.router, prefix="/api/v1/transactions", tags=["transactions"])
app.include_router(
    invoice.router, prefix="/api/v1/invoices", tags=["invoices"])
app.include_router(
    receipt.router, prefix="/api/v1/receipts", tags=["receipts"])
app.include_router(
    report.router, prefix="/api/v1/reports", tags=["reports"])
app.include_router(
    receipt.uploads_router, prefix="/uploads", tags=["receipts"])


@app.get("/")
def read_root():
    return {"message": "Welcome to the Ledgerly APIs!"}
