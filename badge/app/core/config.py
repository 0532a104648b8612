"""
Centralized configuration management for the badge service.

Pydantic v2 settings management to enforce strict validation and
fast-failure on invalid configuration.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from qrcode.exceptions import DataOverflowError

from badge.app.registry.registry import BADGE_REGISTRY
from badge.app.services.qr_path import build_qr_matrix

PACKAGE_TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "templates"

# Widest payload the setup display accepts: lowercase flags force byte mode.
LARGEST_SETUP_PAYLOAD = "X-HM://" + "Z" * 9 + "zzzz"


# -------------------------------------------------------------------------
# Settings Model
# -------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Application settings parsed from the environment.

    Fails fast at startup if the template directory is missing, the
    default style is not registered, or the QR symbol is too small for a
    setup payload.
    """

    # ---------------------------------------------------------------------
    # Badge artwork
    # ---------------------------------------------------------------------

    template_dir: Annotated[
        Path,
        Field(
            default=PACKAGE_TEMPLATE_DIR,
            description="Directory holding the Jinja2 badge templates",
        ),
    ]

    default_style: Annotated[
        str,
        Field(
            default="homekit",
            min_length=1,
            description="Badge style used when a request names none",
        ),
    ]

    # ---------------------------------------------------------------------
    # QR symbol
    # ---------------------------------------------------------------------

    qr_version: Annotated[
        int,
        Field(
            default=3,
            ge=1,
            le=40,
            description="QR symbol version (3 = 29x29 modules)",
        ),
    ]

    qr_error_correction: Annotated[
        Literal["L", "M", "Q", "H"],
        Field(
            default="Q",
            description="QR error correction level",
        ),
    ]

    merge_qr_runs: Annotated[
        bool,
        Field(
            default=False,
            description=(
                "Draw horizontal runs of set modules as one rectangle "
                "instead of one square per module"
            ),
        ),
    ]

    # ---------------------------------------------------------------------
    # Operational
    # ---------------------------------------------------------------------

    log_level: Annotated[
        str,
        Field(default="INFO", description="Root log level"),
    ]

    model_config = SettingsConfigDict(
        env_prefix="BADGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    @field_validator("template_dir")
    @classmethod
    def template_dir_must_exist(cls, v: Path) -> Path:
        v = v.expanduser().resolve()
        if not v.is_dir():
            raise ValueError(f"template_dir does not exist: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.upper()
        if level not in allowed:
            raise ValueError(
                f"Unsupported log_level '{v}'. "
                f"Allowed values: {sorted(allowed)}"
            )
        return level

    @field_validator("default_style")
    @classmethod
    def default_style_must_be_registered(cls, v: str) -> str:
        if v not in BADGE_REGISTRY:
            raise ValueError(
                f"Unknown default_style '{v}'. "
                f"Registered styles: {sorted(BADGE_REGISTRY)}"
            )
        return v

    @model_validator(mode="after")
    def qr_symbol_must_hold_a_setup_payload(self) -> "Settings":
        try:
            build_qr_matrix(
                LARGEST_SETUP_PAYLOAD,
                version=self.qr_version,
                error_correction=self.qr_error_correction,
            )
        except DataOverflowError as exc:
            raise ValueError(
                f"QR version {self.qr_version} with error correction "
                f"'{self.qr_error_correction}' cannot hold a setup payload."
            ) from exc
        return self


# -------------------------------------------------------------------------
# Settings Dependency Provider
# -------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Dependency injection provider for application settings.

    Uses an explicit singleton pattern within the FastAPI lifecycle.
    """
    return Settings()  # singleton within process
