"""Main FastAPI application for the Discord interactions endpoint."""
from contextlib import asynccontextmanager
import logging
from typing import Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hookbot.auth import SignatureVerificationMiddleware
from hookbot.commands import register_commands
from hookbot.config import Settings, configure_logging
from hookbot.crypto import Verifier
from hookbot.discord_router import router as discord_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: register commands on startup."""
    settings: Settings = app.state.settings
    if settings.can_register_commands:
        await register_commands(settings)
    else:
        logger.info("DISCORD_APP_ID or DISCORD_BOT_TOKEN not set, skipping command registration")
    yield


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error while serving %s", request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Raises InvalidKeyError before anything is served if the configured public
    key is not a valid Ed25519 key.
    """
    if settings is None:
        settings = Settings.from_env()

    verifier = Verifier.from_hex(settings.public_key)

    app = FastAPI(
        title="hookbot",
        description="Verified Discord interactions endpoint",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(SignatureVerificationMiddleware, verifier=verifier, paths=["/interactions"])
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(discord_router)

    # Unsigned liveness checks for the load balancer; never gated
    @app.get("/")
    async def service_info() -> Dict[str, str]:
        return {"status": "ok", "service": "hookbot"}

    @app.get("/health")
    async def readiness() -> Dict[str, str]:
        """Reachable only once the public key has been validated."""
        return {"status": "healthy"}

    return app


def run() -> None:
    """Console entry point: load settings and serve with uvicorn."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("listening on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
