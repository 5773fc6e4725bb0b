"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import PlainTextResponse

from app.schemas import DeviceStatus, UploadResponse
from services.dispatcher import Dispatcher, build_default_dispatcher

router = APIRouter()

_CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


def get_dispatcher() -> Dispatcher:
    return build_default_dispatcher()


def format_utc_offset(now: datetime | None = None) -> str:
    """Render the local UTC offset the way the hub expects, e.g. ``-05.00``."""
    current = now or datetime.now().astimezone()
    offset = current.utcoffset()
    hours = offset.total_seconds() / 3600 if offset is not None else 0.0
    sign = "-" if hours < 0 else ""
    return f"{sign}{abs(hours):05.2f}"


@router.get(
    "/",
    response_model=DeviceStatus,
    summary="Devices seen so far and the last ten raw requests.",
)
async def device_status(
    response: Response,
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> DeviceStatus:
    response.headers.update(_CORS_HEADERS)
    return DeviceStatus.model_validate(dispatcher.cache.snapshot())


@router.get("/favicon.ico", include_in_schema=False)
async def favicon() -> PlainTextResponse:
    return PlainTextResponse("404", status_code=status.HTTP_404_NOT_FOUND)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/{upload_path:path}",
    response_model=UploadResponse,
    summary="Accept a weather upload from a hub.",
)
async def receive_upload(
    upload_path: str,
    request: Request,
    response: Response,
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> UploadResponse:
    raw_path = request.url.path
    if request.url.query:
        raw_path = f"{raw_path}?{request.url.query}"

    dispatcher.handle_upload(
        raw_path,
        dict(request.query_params),
        dict(request.headers),
    )
    response.headers.update(_CORS_HEADERS)
    return UploadResponse(timezone=format_utc_offset())
