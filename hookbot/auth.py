"""Signature verification gate for Discord interaction requests."""
import logging
from typing import Iterable, Optional

from fastapi.responses import JSONResponse
from starlette.requests import ClientDisconnect, Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from hookbot.crypto import Verifier

logger = logging.getLogger(__name__)

TIMESTAMP_HEADER = "X-Signature-Timestamp"
SIGNATURE_HEADER = "X-Signature-Ed25519"


def read_header(request: Request, name: str) -> Optional[str]:
    """Return a header value as UTF-8 text, or None if it is missing or not valid UTF-8."""
    value = request.headers.get(name)
    if value is None:
        return None
    # Starlette decodes raw header bytes as latin-1
    try:
        return value.encode("latin-1").decode("utf-8")
    except UnicodeError:
        return None


def route_path(scope: Scope) -> str:
    """Path the router matches on: `scope["path"]` without the app's `root_path`."""
    path: str = scope["path"]
    root_path: str = scope.get("root_path", "")
    if root_path and path.startswith(root_path) and path[len(root_path):len(root_path) + 1] in ("", "/"):
        path = path[len(root_path):]
    return path.rstrip("/") or "/"


def unauthorized(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=401)


class SignatureVerificationMiddleware:
    """
    ASGI middleware that only lets correctly signed requests through.

    The whole body is buffered, checked against the signature headers and then
    handed to the downstream app through a fresh `receive` that replays the
    same bytes. Requests are matched on their path below `root_path`; paths
    outside `paths` are passed through untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        verifier: Verifier,
        paths: Iterable[str] = ("/interactions",),
    ) -> None:
        self.app = app
        self.verifier = verifier
        self.paths = frozenset(path.rstrip("/") or "/" for path in paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or route_path(scope) not in self.paths:
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)

        values = {}
        for header in (TIMESTAMP_HEADER, SIGNATURE_HEADER):
            value = read_header(request, header)
            if value is None:
                logger.warning("rejecting request: %s missing or invalid", header)
                response = unauthorized(f"{header} header is not present or is invalid")
                await response(scope, receive, send)
                return
            values[header] = value

        timestamp = values[TIMESTAMP_HEADER]
        signature = values[SIGNATURE_HEADER]

        try:
            body = await request.body()
        except ClientDisconnect:
            logger.info("client disconnected before the body was received")
            return

        logger.debug("validating body %r, timestamp=%r, signature=%r", body, timestamp, signature)

        if not self.verifier.verify(signature, timestamp, body):
            logger.warning("body failed signature verification")
            response = unauthorized("Body failed signature verification")
            await response(scope, receive, send)
            return

        await self.app(scope, replay_body(body, receive), send)


def replay_body(body: bytes, receive: Receive) -> Receive:
    """Build a `receive` callable that yields `body` once, then defers to `receive`."""
    pending = True

    async def replay() -> Message:
        nonlocal pending
        if pending:
            pending = False
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay
