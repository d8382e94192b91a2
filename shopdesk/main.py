"""
Shopdesk - Backend API
Order, inventory and discount backend for the admin dashboard
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from shopdesk.api import audit, discounts, inventory, orders, products
from shopdesk.core.config import settings
from shopdesk.core.database import get_db_connection_dict_with_retry
from shopdesk.core.errors import ShopdeskError, ValidationError
from shopdesk.core.logging_config import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

# Crear aplicación FastAPI
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


@app.exception_handler(ShopdeskError)
async def shopdesk_error_handler(request: Request, exc: ShopdeskError):
    """Every domain error becomes {"status": "error", "error": {"type": ..., ...}}"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.kind}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "error": exc.to_dict()}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters get the same tagged body as ValidationError"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")

    logger.info(f"{request.method} {request.url.path} rejected: ValidationError: {message}")

    error = ValidationError(message).to_dict()
    error["details"] = jsonable_encoder(errors)
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"status": "error", "error": error}
    )


# Include API routers
app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])
app.include_router(discounts.router, prefix="/api/v1/discounts", tags=["Discounts"])
app.include_router(inventory.router, prefix="/api/v1/inventory", tags=["Inventory"])
app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
app.include_router(audit.router, prefix="/api/v1/audit", tags=["Audit"])


@app.get("/")
async def root():
    """Endpoint raíz - Verificación de estado de la API"""
    return {
        "message": "Shopdesk API",
        "status": "online",
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION
    }


@app.get("/health")
async def health():
    """Liveness plus a single-attempt database ping"""
    try:
        conn = get_db_connection_dict_with_retry(max_retries=1)
        try:
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
        finally:
            conn.close()
        database = {"status": "connected"}
    except Exception as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database = {"status": "disconnected", "error": str(e)}

    return {
        "status": "healthy" if database["status"] == "connected" else "degraded",
        "version": settings.API_VERSION,
        "database": database
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("shopdesk.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.API_DEBUG)
