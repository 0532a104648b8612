from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SetupDisplayUpdate(BaseModel):
    """
    Announcement of the values the setup display should show.

    A null value withdraws the corresponding item, e.g. once the
    accessory has been paired.
    """

    model_config = ConfigDict(extra="forbid")

    setup_code: Optional[str] = Field(
        None,
        description="Setup code in its display form, e.g. '101-48-005'.",
        pattern=r"^\d{3}-\d{2}-\d{3}$",
    )

    setup_payload: Optional[str] = Field(
        None,
        description=(
            "Setup payload URI: 'X-HM://', 9 base-36 digits, 4 flag "
            "characters."
        ),
        pattern=r"^X-HM://[0-9A-Z]{9}[0-9A-Za-z]{4}$",
    )


class SetupDisplayState(BaseModel):
    setup_code_is_set: bool
    setup_payload_is_set: bool
    setup_code: Optional[str] = None
    setup_payload: Optional[str] = None


class RenderBadgeRequest(BaseModel):
    """Explicit badge render request for a caller-supplied payload."""

    model_config = ConfigDict(extra="forbid")

    setup_payload: str = Field(
        ...,
        description="Setup payload URI to encode.",
    )

    style: Optional[str] = Field(
        None,
        description="Registered badge style. Defaults to the configured style.",
    )
