# app/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api import letter, user, verify
from app.models import init_db
from app.models.base import engine
from app.utils.logger import setup_logger
from app.utils.validation_code import is_default_secret
from app.config import settings
import uvicorn

logger = setup_logger()

app = FastAPI(
    title="Permission Letter Service",
    description="Permission letters with approval, PDF issuing and HMAC document verification",
    version="1.0.0",
    debug=settings.debug
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # restrict to the school domain in deployment
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def startup_event():
    """Initialise on startup."""
    logger.info(" Permission Letter Service starting")
    logger.info(f" Debug mode: {settings.debug}")

    if is_default_secret(settings.hmac_secret):
        logger.warning(" HMAC_SECRET is unset or equal to the public default key, issued documents can be forged")

    await init_db()

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info(" Permission Letter Service stopping")
    await engine.dispose()

# Routers
app.include_router(letter.router, prefix="/api")
app.include_router(verify.router, prefix="/api")
app.include_router(user.router, prefix="/api")

@app.get("/")
async def root():
    return {
        "service": "Permission Letter Service",
        "version": "1.0.0",
        "status": "running",
        "features": [
            "permission letter management",
            "approval workflow",
            "PDF issuing with QR validation",
            "public document verification",
            "user management"
        ]
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "hmac_secret_configured": not is_default_secret(settings.hmac_secret)
    }

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
