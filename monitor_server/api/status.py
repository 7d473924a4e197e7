import asyncio
import logging

from fastapi import APIRouter, HTTPException, Path, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from jinja2 import TemplateError

from monitor_server.models.errors import SourceError
from monitor_server.models.status import ServiceStatus, Snapshot
from monitor_server.services import service_checker, status_aggregator

logger = logging.getLogger(__name__)

router = APIRouter()

# systemd unit names; a leading "-" would be read as a systemctl option
_SERVICE_NAME_PATTERN = r"^[A-Za-z0-9_.@:\\][A-Za-z0-9_.@:\\-]*$"


def _wants_json(request: Request) -> bool:
    return "application/json" in request.headers.get("accept", "")


@router.get(
    "",
    response_class=HTMLResponse,
    responses={200: {"model": Snapshot, "content": {"application/json": {}}}},
    summary="Host status",
)
async def get_status(request: Request) -> Response:
    """
    Return the current host status.

    The snapshot is rendered as an HTML page, or returned as JSON when the
    client sends `Accept: application/json`. Failing sources never fail the
    request; only a rendering error results in HTTP 500.
    """
    client_ip = request.headers.get("X-Forwarded-For", "Unknown")
    logger.info("Client IP (X-Forwarded-For): %s", client_ip)

    settings = request.app.state.settings
    snapshot = await status_aggregator.collect_snapshot(settings, client_ip=client_ip)

    if _wants_json(request):
        return JSONResponse(snapshot.model_dump(mode="json"))

    templates = request.app.state.templates
    try:
        response = templates.TemplateResponse(
            request, "status.html", {"snapshot": snapshot}
        )
    except TemplateError as exc:
        logger.error("Failed to render template: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to render status page") from exc

    logger.info("Status page rendered successfully")
    return response


@router.get(
    "/{service}",
    response_model=ServiceStatus,
    summary="Status of a single service",
)
async def get_service_status(
    request: Request,
    service: str = Path(..., pattern=_SERVICE_NAME_PATTERN, max_length=256),
) -> ServiceStatus:
    """
    Return whether a single systemd service is active.

    If the service manager cannot be queried at all (systemctl missing or
    hanging), a HTTP 500 is returned.
    """
    timeout = request.app.state.settings.source_timeout
    try:
        state = await asyncio.to_thread(service_checker.query_service_state, service, timeout)
    except SourceError as exc:
        logger.error("Service status for %s unavailable: %s", service, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return ServiceStatus(service=service, is_active=state == "active", state=state)
