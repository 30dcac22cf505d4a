"""
HTTP front-end: JSON-RPC 2.0 over POST /mcp with SSE-framed responses.

Serves the same tools as the stdio server for clients that speak the
streamable-HTTP style of MCP.
"""

import asyncio
import contextlib
import json
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

import uvicorn
from apscheduler.schedulers.background import BackgroundScheduler
from sse_starlette.sse import EventSourceResponse
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from . import __version__
from .client import PlankaClient
from .config import DEFAULT_SESSION_TTL, build_parser, load_config
from .logging_config import configure_logging
from .tools import TOOLS, ToolExecutor
from .utils import format_timestamp, utc_now

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "planka-mcp"
SESSION_HEADER = "Mcp-Session-Id"
SWEEP_INTERVAL_SECONDS = 60
KEEPALIVE_SECONDS = 30.0

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603
TOOL_ERROR = -32000


@dataclass
class Session:
    id: str
    initialized: bool = False
    created_at: datetime = field(default_factory=utc_now)


class SessionStore:
    """Thread-safe session table; the expiry sweep runs on a scheduler thread."""

    def __init__(self, ttl_seconds: int = DEFAULT_SESSION_TTL):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = Session(id=session_id)
                self._sessions[session_id] = session
            return session

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def expire(self, now: datetime | None = None) -> int:
        """Drop sessions older than the TTL. Returns how many were dropped."""
        cutoff = (now or utc_now()) - self.ttl
        with self._lock:
            expired = [sid for sid, session in self._sessions.items() if session.created_at < cutoff]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info(f"Expired {len(expired)} session(s)")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions


def _result(request_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def _sse_response(payload: dict[str, Any], session_id: str) -> Response:
    """Write one JSON-RPC message as a single SSE data event."""
    return Response(
        f"data: {json.dumps(payload)}\n\n",
        media_type="text/event-stream",
        headers={SESSION_HEADER: session_id, "Cache-Control": "no-cache"},
    )


async def endpoint_events(session_id: str, sessions: SessionStore, keepalive: float = KEEPALIVE_SECONDS):
    """Announce the POST endpoint, then send keepalive comments until the client goes away."""
    sessions.get_or_create(session_id)
    try:
        yield {"event": "endpoint", "data": f"/mcp?sessionId={session_id}"}
        while True:
            await asyncio.sleep(keepalive)
            yield {"comment": "keepalive"}
    finally:
        sessions.remove(session_id)
        logger.debug(f"[{session_id}] SSE stream closed")


class PlankaHTTPServer:
    def __init__(
        self,
        executor: ToolExecutor,
        session_ttl: int = DEFAULT_SESSION_TTL,
        keepalive: float = KEEPALIVE_SECONDS,
    ):
        self.executor = executor
        self.sessions = SessionStore(ttl_seconds=session_ttl)
        self.keepalive = keepalive
        self._tool_names = {tool["name"] for tool in TOOLS}
        self.scheduler = BackgroundScheduler(
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
            },
        )
        self.app = Starlette(
            routes=[
                Route("/health", self.health, methods=["GET"]),
                Route("/mcp", self.mcp_post, methods=["POST"]),
                Route("/mcp", self.mcp_stream, methods=["GET"]),
            ],
            lifespan=self._lifespan,
        )

    @contextlib.asynccontextmanager
    async def _lifespan(self, app: Starlette):
        self.scheduler.add_job(
            func=self.sessions.expire,
            trigger="interval",
            seconds=SWEEP_INTERVAL_SECONDS,
            id="session_cleanup",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(f"Session cleanup scheduled every {SWEEP_INTERVAL_SECONDS}s (ttl {self.sessions.ttl})")
        try:
            yield
        finally:
            self.scheduler.shutdown(wait=False)

    async def handle_jsonrpc(self, message: dict[str, Any], session_id: str) -> dict[str, Any] | None:
        """
        Answer one JSON-RPC request.

        Returns:
            The response message, or None for notifications
        """
        method = message.get("method")
        params = message.get("params") or {}
        request_id = message.get("id")
        session = self.sessions.get_or_create(session_id)

        try:
            match method:
                case "initialize":
                    session.initialized = True
                    return _result(
                        request_id,
                        {
                            "protocolVersion": PROTOCOL_VERSION,
                            "capabilities": {"tools": {}},
                            "serverInfo": {"name": SERVER_NAME, "version": __version__},
                        },
                    )

                case "notifications/initialized":
                    return None

                case "tools/list":
                    return _result(
                        request_id,
                        {
                            "tools": [
                                {"name": t["name"], "description": t["description"], "inputSchema": t["input_schema"]}
                                for t in TOOLS
                            ]
                        },
                    )

                case "tools/call":
                    name = params.get("name")
                    if name not in self._tool_names:
                        return _error(request_id, METHOD_NOT_FOUND, f"Tool not found: {name}")
                    try:
                        result = await run_in_threadpool(self.executor.execute, name, params.get("arguments") or {})
                    except Exception as e:
                        logger.warning(f"[{session_id}] Tool {name} failed: {e}")
                        return _error(request_id, TOOL_ERROR, str(e))
                    return _result(request_id, {"content": [{"type": "text", "text": json.dumps(result)}]})

                case _:
                    return _error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")
        except Exception as e:
            logger.exception(f"[{session_id}] Internal error handling {method}")
            return _error(request_id, INTERNAL_ERROR, str(e))

    async def health(self, request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "success": True,
                "status": "healthy",
                "service": SERVER_NAME,
                "version": __version__,
                "tools": len(TOOLS),
                "timestamp": format_timestamp(utc_now()),
            }
        )

    async def mcp_post(self, request: Request) -> Response:
        session_id = request.headers.get(SESSION_HEADER) or str(uuid.uuid4())

        try:
            message = await request.json()
        except ValueError:
            return _sse_response(_error(None, PARSE_ERROR, "Parse error"), session_id)
        if not isinstance(message, dict):
            return _sse_response(_error(None, INVALID_REQUEST, "Invalid Request"), session_id)

        logger.info(f"[{session_id}] Request: {message.get('method')}")
        response = await self.handle_jsonrpc(message, session_id)

        # Notifications are acknowledged without a JSON-RPC body
        if response is None:
            return JSONResponse({"success": True}, status_code=202, headers={SESSION_HEADER: session_id})
        return _sse_response(response, session_id)

    async def mcp_stream(self, request: Request) -> EventSourceResponse:
        session_id = str(uuid.uuid4())
        return EventSourceResponse(
            endpoint_events(session_id, self.sessions, self.keepalive),
            headers={SESSION_HEADER: session_id, "Cache-Control": "no-cache"},
        )


def main():
    parser = build_parser("Planka MCP Server (HTTP)", http=True)
    args = parser.parse_args()
    config = load_config(parser, args)

    configure_logging(verbose=args.verbose)
    client = PlankaClient(base_url=config.api_url, token=config.token, timeout=config.timeout)
    server = PlankaHTTPServer(ToolExecutor(client), session_ttl=config.session_ttl)

    logger.info(f"Planka MCP HTTP server on http://{config.host}:{config.port} ({len(TOOLS)} tools)")
    try:
        uvicorn.run(server.app, host=config.host, port=config.port, log_config=None)
    finally:
        client.close()


if __name__ == "__main__":
    main()
