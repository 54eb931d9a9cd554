import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sixloans import __version__
from sixloans.api.admin_routes import router as admin_router
from sixloans.api.application_routes import router as application_router
from sixloans.api.auth_routes import router as auth_router
from sixloans.api.catalog_routes import router as catalog_router
from sixloans.api.email_verification_routes import router as email_verification_router
from sixloans.api.user_routes import router as user_router
from sixloans.core.config import settings
from sixloans.core.errors import register_exception_handlers
from sixloans.core.middleware import SecurityHeadersMiddleware
from sixloans.database.connection import close_db, init_db
from sixloans.services.otp_managers import all_otp_managers, revoked_token_store
from sixloans.workers.otp_sweeper import ExpirySweeper

logging.basicConfig(
    level=getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("sixloans")

sweeper = ExpirySweeper(
    all_otp_managers(),
    stores=[revoked_token_store],
    interval_seconds=settings.OTP_SWEEP_INTERVAL_SECONDS,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    sweeper.start()
    logger.info("%s %s started (%s)", settings.PROJECT_NAME, __version__, settings.APP_ENV)
    yield
    await sweeper.stop()
    close_db()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Loans, credit cards and insurance marketplace API",
    version=__version__,
    lifespan=lifespan,
)

register_exception_handlers(app)

origins = settings.cors_origins
if settings.is_development and "http://localhost:3000" not in origins:
    origins.append("http://localhost:3000")

# Added last so it wraps everything and answers preflights first
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

for router in (
    auth_router,
    email_verification_router,
    application_router,
    user_router,
    catalog_router,
    admin_router,
):
    app.include_router(router)


@app.get("/health")
async def health_check():
    return {"ok": True, "status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.is_development)
