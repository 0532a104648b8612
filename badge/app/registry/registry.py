"""
Badge template registry.

This module defines the badge styles that may be rendered by the
service. Each entry explicitly binds together:

- a public style identifier (slug)
- a Jinja2 SVG template holding the static artwork
- the square region of that artwork reserved for the QR symbol
- a human-readable description

Styles must be registered here to be addressable via the API.
"""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class BadgeTemplateEntry(BaseModel):
    """
    Declarative description of a badge style.

    The QR region is given in the template's own user units. The
    template is expected to paint the region background itself.
    """

    model_config = ConfigDict(frozen=True)

    slug: str
    template_path: str
    description: str
    qr_x: float
    qr_y: float
    qr_width: float = Field(gt=0)


BADGE_REGISTRY: Dict[str, BadgeTemplateEntry] = {
    "homekit": BadgeTemplateEntry(
        slug="homekit",
        template_path="homekit/badge.svg.jinja",
        description=(
            "Accessory pairing badge. Rounded card with the house emblem, "
            "the setup code in two 4 digit groups, and the setup payload "
            "as a version 3 QR symbol."
        ),
        qr_x=10.0,
        qr_y=74.0,
        qr_width=165.0,
    ),
}


def get_badge_template(slug: str) -> BadgeTemplateEntry:
    """
    Resolve a registered badge style.

    Raises:
        KeyError: no style is registered under ``slug``.
    """
    try:
        return BADGE_REGISTRY[slug]
    except KeyError:
        raise KeyError(f"Badge style '{slug}' not found.") from None
