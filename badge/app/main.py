"""
FastAPI entrypoint for the pairing badge service.

Serves SVG pairing badges (setup code plus QR symbol) for the setup
payload currently announced by the pairing subsystem.
"""

import logging
import sys
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from badge.app.api.routes import router as pairing_router
from badge.app.core.config import Settings, get_settings
from badge.app.services.composer import BadgeComposer
from badge.app.services.setup_display import SetupDisplay

logger = logging.getLogger("badge.main")


def get_app_version() -> str:
    """
    Resolve application version deterministically.

    Falls back to the source version when running uninstalled.
    """
    try:
        return version("setup-badge")
    except PackageNotFoundError:
        return "0.1.0"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Guarantees:
    - Fail-fast startup if configuration is invalid
    - One composer and one setup display per process
    """
    # ------------------------------------------------------------------
    # Load and validate configuration (FAIL FAST)
    # ------------------------------------------------------------------
    if getattr(app.state, "settings", None) is None:
        try:
            app.state.settings = get_settings()
        except Exception:
            logger.exception("invalid_badge_configuration")
            raise

    settings: Settings = app.state.settings
    configure_logging(settings)

    logger.info(
        "badge_service_startup_begin",
        extra={
            "service": "setup-badge",
            "version": get_app_version(),
            "default_style": settings.default_style,
        },
    )

    app.state.composer = BadgeComposer.from_settings(settings)
    app.state.setup_display = SetupDisplay()

    try:
        yield
    finally:
        logger.info("badge_service_shutdown_begin")
        app.state.setup_display.clear()


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Application factory for the pairing badge service.

    ``settings`` overrides environment-derived configuration.
    """
    app = FastAPI(
        title="Setup Badge",
        description=(
            "Renders accessory pairing badges: the 8 digit setup code and "
            "a QR symbol of the setup payload, as SVG."
        ),
        version=get_app_version(),
        docs_url="/docs",
        redoc_url=None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.include_router(pairing_router)

    @app.get(
        "/healthz",
        tags=["Monitoring"],
        summary="Liveness and readiness probe",
    )
    async def health_check():
        """
        Verifies that the runtime is alive and correctly initialized.

        NOTE:
        - Does NOT render a badge
        """
        return ORJSONResponse(
            content={
                "status": "ok",
                "service": "setup-badge",
                "version": app.version,
                "runtime": f"python {sys.version.split()[0]}",
            }
        )

    return app


app = create_app()
