"""
HTTP and HTTPS transport.

Serves MCP Streamable HTTP in stateless mode (no session ID, every request is
independent) from a Starlette application run by uvicorn:

- GET  /health  liveness check with mode and timestamp
- POST /mcp     MCP JSON-RPC messages
"""

import asyncio
import contextlib
import errno
import socket
from datetime import datetime, timezone

import structlog
import uvicorn
from mcp.server import Server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.types import Message, Receive, Scope, Send

from ..errors import ConfigurationError
from ..models import HttpConfig, HttpsConfig, TransportMode
from .base import Transport

logger = structlog.get_logger(__name__)

BIND_HOST = "0.0.0.0"
STARTUP_POLL_INTERVAL = 0.01
# /health only answers GET; other methods fall through to the JSON 404
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class McpEndpoint:
    """ASGI endpoint for /mcp: POST goes to the session manager, anything else is 405."""

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        method = scope["method"]
        if method != "POST":
            response = JSONResponse({"error": f"Method {method} not allowed"}, status_code=405)
            await response(scope, receive, send)
            return

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.session_manager.handle_request(scope, receive, tracking_send)
        except Exception:
            logger.exception("mcp_request_failed")
            if not response_started:
                response = JSONResponse({"error": "Internal server error"}, status_code=500)
                await response(scope, receive, send)


class EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the process lifecycle."""

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def not_found_response() -> JSONResponse:
    return JSONResponse({"error": "Not found"}, status_code=404)


async def not_found(request: Request, exc: Exception) -> JSONResponse:
    return not_found_response()


async def server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("http_request_failed", path=request.url.path, exc_info=exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


class HttpTransport(Transport):
    """Serves MCP over HTTP, or HTTPS when configured with a certificate and key."""

    def __init__(self, server: Server, config: HttpConfig | HttpsConfig):
        super().__init__(server)
        self.config = config
        self.session_manager = StreamableHTTPSessionManager(app=server, stateless=True)
        self.app = Starlette(
            routes=[
                Route("/health", self.health, methods=ALL_METHODS),
                Route("/mcp", McpEndpoint(self.session_manager)),
            ],
            exception_handlers={404: not_found, 500: server_error},
        )
        self._exit_stack: contextlib.AsyncExitStack | None = None
        self._socket: socket.socket | None = None
        self._uvicorn: EmbeddedServer | None = None
        self._serve_task: asyncio.Task | None = None

    @property
    def mode(self) -> TransportMode:
        return self.config.mode

    @property
    def is_tls(self) -> bool:
        return isinstance(self.config, HttpsConfig)

    async def health(self, request: Request) -> JSONResponse:
        if request.method not in ("GET", "HEAD"):
            return not_found_response()
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return JSONResponse({"status": "ok", "mode": self.mode, "timestamp": timestamp})

    def _uvicorn_config(self) -> uvicorn.Config:
        options = {}
        if isinstance(self.config, HttpsConfig):
            options = {"ssl_certfile": str(self.config.cert_path), "ssl_keyfile": str(self.config.key_path)}

        uv_config = uvicorn.Config(
            self.app,
            host=BIND_HOST,
            port=self.config.port,
            lifespan="off",
            log_config=None,
            access_log=False,
            **options,
        )

        if not self.is_tls:
            uv_config.load()
            return uv_config

        try:
            self.config.cert_path.read_bytes()
            self.config.key_path.read_bytes()
            # Builds the SSL context, which parses the certificate and key
            uv_config.load()
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read SSL certificate files: {e}",
                "Ensure certificate and key files exist and are readable",
            ) from e
        return uv_config

    def _bind_socket(self) -> socket.socket:
        port = self.config.port
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((BIND_HOST, port))
        except OSError as e:
            sock.close()
            if e.errno == errno.EADDRINUSE:
                raise ConfigurationError(
                    f"Port {port} is already in use",
                    f"Choose a different port using MCP_{self.mode.upper()}_PORT",
                ) from e
            raise
        return sock

    async def _start(self) -> None:
        uv_config = self._uvicorn_config()

        self._exit_stack = contextlib.AsyncExitStack()
        try:
            await self._exit_stack.enter_async_context(self.session_manager.run())
            self._socket = self._bind_socket()

            self._uvicorn = EmbeddedServer(uv_config)
            self._serve_task = asyncio.create_task(
                self._uvicorn.serve(sockets=[self._socket]), name=f"mcp-{self.mode}"
            )
            while not self._uvicorn.started:
                if self._serve_task.done():
                    self._serve_task.result()
                    raise RuntimeError(f"{self.mode.upper()} server exited during startup")
                await asyncio.sleep(STARTUP_POLL_INTERVAL)
        except BaseException:
            await self._release()
            raise

        base_url = f"{self.mode}://localhost:{self.config.port}"
        logger.info(
            "transport_started",
            mode=self.mode,
            url=base_url,
            health=f"{base_url}/health",
            mcp=f"{base_url}/mcp",
        )

    async def _release(self) -> None:
        if self._uvicorn is not None and self._serve_task is not None:
            self._uvicorn.should_exit = True
            await asyncio.wait({self._serve_task})
        self._uvicorn = None
        self._serve_task = None

        if self._socket is not None:
            self._socket.close()
            self._socket = None

        # Falls through to here when the listener was never opened
        if self._exit_stack is not None:
            await self._exit_stack.aclose()
            self._exit_stack = None

    async def _stop(self) -> None:
        await self._release()
        logger.info("transport_stopped", mode=self.mode)

    async def wait_closed(self) -> None:
        task = self._serve_task
        if task is None:
            return
        await asyncio.wait({task})
        if not task.cancelled():
            task.result()
