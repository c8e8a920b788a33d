import logging
import os
from fastapi import FastAPI
from dotenv import load_dotenv

from core.config import settings, get_gateway_config
from core.db import init_db
from core.celery import celery_app
from core.logging import configure_logging
from routes.payments import router as payments_router
from routes.orders import router as orders_router

load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Ensure tables exist (for dev/test; in prod use Alembic)
init_db()

_gateway = get_gateway_config()
if not _gateway.events_secret:
    if _gateway.verification_disabled:
        logger.warning("WEBHOOK_VERIFICATION_DISABLED is set: webhook events will be accepted unverified")
    else:
        logger.warning("WOMPI_EVENTS_SECRET is not set: all webhook events will be rejected")

app.include_router(payments_router)
app.include_router(orders_router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
    }


@app.get("/celery-health")
async def celery_health_check():
    """Check Celery worker status"""
    try:
        inspect = celery_app.control.inspect(timeout=1.0)
        stats = inspect.stats()
        if stats:
            return {"status": "healthy", "workers": len(stats)}
        else:
            return {"status": "no_workers", "message": "No Celery workers running"}
    except Exception as e:
        logger.warning("Celery health check failed", exc_info=True)
        return {"status": "unhealthy", "error": str(e)}


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=settings.DEBUG,
        log_config=None,
    )
