import base64
import binascii
import logging
from enum import Enum
from typing import Optional, Tuple

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from monitor_server.security.htpasswd import CredentialStore

logger = logging.getLogger(__name__)

REALM = "Restricted"
CHALLENGE_HEADER = {"WWW-Authenticate": f'Basic realm="{REALM}"'}


class AuthOutcome(str, Enum):
    """Terminal result of checking one request's credentials."""

    NO_HEADER = "no_header"
    MALFORMED = "malformed"
    BAD_CREDENTIALS = "bad_credentials"
    AUTHORIZED = "authorized"


def decode_basic_credentials(header: str) -> Optional[Tuple[str, str]]:
    """
    Decode an `Authorization: Basic <base64>` value into (username, password).

    Returns None when the header is not a well-formed Basic header. A payload
    without ':' is treated as a username with an empty password.
    """
    parts = header.split()
    if len(parts) != 2 or parts[0] != "Basic":
        return None
    try:
        decoded = base64.b64decode(parts[1], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, _, password = decoded.partition(":")
    return username, password


def authenticate(header: Optional[str], store: CredentialStore) -> AuthOutcome:
    if header is None:
        return AuthOutcome.NO_HEADER

    credentials = decode_basic_credentials(header)
    if credentials is None:
        return AuthOutcome.MALFORMED

    username, password = credentials
    if not store.verify(username, password):
        return AuthOutcome.BAD_CREDENTIALS
    return AuthOutcome.AUTHORIZED


def unauthorized_response() -> Response:
    """The one and only rejection response, whatever the reason was."""
    return Response(status_code=401, headers=CHALLENGE_HEADER)


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """
    Reject every request without valid Basic-Auth credentials before it
    reaches a route handler.

    Authorized requests are passed on untouched. Verification runs in the
    threadpool; bcrypt checks must not block the event loop.
    """

    def __init__(self, app: ASGIApp, store: CredentialStore) -> None:
        super().__init__(app)
        self.store = store

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client = request.client.host if request.client else "unknown"
        header = request.headers.get("Authorization")

        outcome = await run_in_threadpool(authenticate, header, self.store)
        if outcome is not AuthOutcome.AUTHORIZED:
            logger.warning(
                "Rejected %s %s from %s: %s",
                request.method,
                request.url.path,
                client,
                outcome.value,
            )
            return unauthorized_response()

        logger.debug("Authorized %s %s from %s", request.method, request.url.path, client)
        return await call_next(request)
