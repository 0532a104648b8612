"""
Pairing badge endpoints.

The setup display is fed by the pairing subsystem through
PUT/DELETE /homekit/setup-display. GET /homekit/pairing serves the badge
for whatever payload is currently displayed, mirroring what an
accessory shows on its own screen or label.

Badges are streamed. All validation happens before the response is
started, so a client never receives a partial document.
"""

import json
import logging
from typing import Annotated, Iterator

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from badge.app.core.config import Settings
from badge.app.schemas.setup import (
    RenderBadgeRequest,
    SetupDisplayState,
    SetupDisplayUpdate,
)
from badge.app.services.base36 import InvalidDigitCharacterError
from badge.app.services.composer import BadgeComposer
from badge.app.services.setup_display import SetupDisplay, SetupDisplaySnapshot
from badge.app.services.setup_payload import EncodingRangeError
from badge.app.utils.hashing import compute_badge_etag

logger = logging.getLogger("badge.api")

router = APIRouter(prefix="/homekit", tags=["Pairing"])

SVG_MEDIA_TYPE = "image/svg+xml"
NO_PAYLOAD_MESSAGE = "No setup payload is set. Already paired?\r\n"

# =============================================================================
# Dependency providers
# =============================================================================


def get_settings_state(request: Request) -> Settings:
    settings = request.app.state.settings
    if settings is None:
        raise RuntimeError("settings not initialized")
    return settings


def get_composer(request: Request) -> BadgeComposer:
    return request.app.state.composer


def get_setup_display(request: Request) -> SetupDisplay:
    return request.app.state.setup_display


# =============================================================================
# Helpers
# =============================================================================


def _canonical_render_inputs(
    setup_payload: str, style: str, composer: BadgeComposer
) -> bytes:
    return json.dumps(
        {
            "setup_payload": setup_payload,
            "style": style,
            "qr_version": composer.qr_version,
            "qr_error_correction": composer.qr_error_correction,
            "merge_qr_runs": composer.merge_qr_runs,
        },
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")


def _badge_response(
    chunks: Iterator[str],
    *,
    setup_payload: str,
    style: str,
    composer: BadgeComposer,
) -> StreamingResponse:
    etag = compute_badge_etag(
        _canonical_render_inputs(setup_payload, style, composer)
    )
    return StreamingResponse(
        chunks,
        media_type=SVG_MEDIA_TYPE,
        headers={
            "Cache-Control": "no-store",
            "Content-Disposition": f'inline; filename="{style}-badge.svg"',
            "ETag": etag,
        },
    )


def _snapshot_state(snapshot: SetupDisplaySnapshot) -> SetupDisplayState:
    return SetupDisplayState(
        setup_code_is_set=snapshot.setup_code_is_set,
        setup_payload_is_set=snapshot.setup_payload_is_set,
        setup_code=snapshot.setup_code,
        setup_payload=snapshot.setup_payload,
    )


# =============================================================================
# GET /homekit/pairing
# =============================================================================


@router.get(
    "/pairing",
    summary="Pairing badge for the currently displayed setup payload",
    responses={
        200: {
            "content": {SVG_MEDIA_TYPE: {}, "text/plain": {}},
            "description": "SVG badge, or a notice if no payload is set",
        },
        500: {"description": "Displayed payload cannot be rendered"},
    },
)
def get_pairing_badge(
    settings: Annotated[Settings, Depends(get_settings_state)],
    composer: Annotated[BadgeComposer, Depends(get_composer)],
    display: Annotated[SetupDisplay, Depends(get_setup_display)],
):
    snapshot = display.snapshot()
    if not snapshot.setup_payload_is_set:
        return PlainTextResponse(NO_PAYLOAD_MESSAGE)

    setup_payload = snapshot.setup_payload
    style = settings.default_style

    try:
        chunks = composer.render_chunks(setup_payload, style=style)
    except EncodingRangeError as exc:
        logger.error(
            "Code exceeds the limits of a valid setup code.",
            extra={"code": exc.code},
        )
        raise HTTPException(
            status_code=500,
            detail="Setup badge could not be rendered.",
        ) from exc
    except InvalidDigitCharacterError as exc:
        logger.error(
            "Setup payload contains an invalid base-36 digit.",
            extra={"character": exc.character, "position": exc.position},
        )
        raise HTTPException(
            status_code=500,
            detail="Setup badge could not be rendered.",
        ) from exc
    except Exception as exc:
        logger.exception("Badge rendering failed for style='%s'", style)
        raise HTTPException(
            status_code=500,
            detail="Setup badge could not be rendered. See logs for details.",
        ) from exc

    if chunks is None:
        logger.error("Displayed setup payload is malformed.")
        raise HTTPException(
            status_code=500,
            detail="Setup badge could not be rendered.",
        )

    return _badge_response(
        chunks,
        setup_payload=setup_payload,
        style=style,
        composer=composer,
    )


# =============================================================================
# POST /homekit/pairing/render
# =============================================================================


@router.post(
    "/pairing/render",
    summary="Render a pairing badge for an explicit setup payload",
    responses={
        200: {"content": {SVG_MEDIA_TYPE: {}}, "description": "SVG badge"},
        404: {"description": "Unknown badge style"},
        422: {"description": "Payload cannot be encoded as a badge"},
    },
)
def render_pairing_badge(
    body: RenderBadgeRequest,
    settings: Annotated[Settings, Depends(get_settings_state)],
    composer: Annotated[BadgeComposer, Depends(get_composer)],
):
    style = body.style or settings.default_style

    try:
        chunks = composer.render_chunks(body.setup_payload, style=style)
    except KeyError as exc:
        raise HTTPException(
            status_code=404,
            detail=f"Badge style '{style}' not found.",
        ) from exc
    except (EncodingRangeError, InvalidDigitCharacterError) as exc:
        logger.warning(
            "Badge render rejected: %s",
            exc,
            extra={"style": style},
        )
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Badge rendering failed for style='%s'", style)
        raise HTTPException(
            status_code=500,
            detail="Badge rendering failed. See logs for details.",
        ) from exc

    if chunks is None:
        raise HTTPException(
            status_code=422,
            detail=(
                "Not a setup payload: expected 20 characters starting "
                "with 'X-HM://'."
            ),
        )

    return _badge_response(
        chunks,
        setup_payload=body.setup_payload,
        style=style,
        composer=composer,
    )


# =============================================================================
# /homekit/setup-display
# =============================================================================


@router.get(
    "/setup-display",
    response_model=SetupDisplayState,
    summary="Current setup display contents",
)
def get_setup_display_state(
    display: Annotated[SetupDisplay, Depends(get_setup_display)],
) -> SetupDisplayState:
    return _snapshot_state(display.snapshot())


@router.put(
    "/setup-display",
    response_model=SetupDisplayState,
    summary="Update the setup code and setup payload on display",
)
def update_setup_display(
    body: SetupDisplayUpdate,
    display: Annotated[SetupDisplay, Depends(get_setup_display)],
) -> SetupDisplayState:
    snapshot = display.update(
        setup_code=body.setup_code,
        setup_payload=body.setup_payload,
    )
    return _snapshot_state(snapshot)


@router.delete(
    "/setup-display",
    response_model=SetupDisplayState,
    summary="Invalidate the setup code and setup payload on display",
)
def clear_setup_display(
    display: Annotated[SetupDisplay, Depends(get_setup_display)],
) -> SetupDisplayState:
    return _snapshot_state(display.clear())
