from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import Callable, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ui_protocol import EVENT_ERROR, EVENT_HELLO, EVENT_TIMER

from .config import HEALTHZ_PATH, MAX_MESSAGE_BYTES, STATE_PATH, UIServerConfig
from .events import StickyEventStore, UICommand, make_event, parse_command

CommandHandler = Callable[[UICommand], None]

_TEXT_PLAIN = "text/plain; charset=utf-8"
_APPLICATION_JSON = "application/json; charset=utf-8"


class UIServer:
    """Threaded asyncio server broadcasting timer events over a websocket.

    Incoming commands are handed to ``on_command`` on the server thread; the
    handler is expected to enqueue them for the timer's own loop. ``GET /state``
    returns the most recent timer event for clients that only poll.
    """

    def __init__(
        self,
        config: UIServerConfig,
        logger: Optional[logging.Logger] = None,
        *,
        on_command: Optional[CommandHandler] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("ui_server")
        self._on_command = on_command
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._clients: set[ServerConnection] = set()
        self._sticky_events = StickyEventStore()

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def websocket_path(self) -> str:
        return self._config.websocket_path

    @property
    def client_count(self) -> int:
        return len(self._clients)

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="ui-server",
        )
        self._thread.start()

        if not self._started.wait(timeout_seconds):
            raise RuntimeError(f"UI server did not start within {timeout_seconds:.1f}s")
        if self._startup_error is not None:
            raise RuntimeError(f"UI server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        if self._loop and self._stop_async:
            self._loop.call_soon_threadsafe(self._stop_async.set)

        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error("UI server thread did not stop within %.1fs", timeout_seconds)

        self._thread = None
        self._loop = None
        self._stop_async = None

    def publish(self, event_type: str, **payload) -> None:
        """Remember sticky events and fan the message out to every client.

        Safe to call from any thread, including before :meth:`start`; events
        published early are replayed to the first clients that connect.
        """
        message = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, message)

        loop = self._loop
        if not self.is_running or loop is None:
            return
        try:
            future = asyncio.run_coroutine_threadsafe(self._broadcast(message), loop)
        except RuntimeError:
            # Loop already closed during shutdown.
            return
        future.add_done_callback(self._log_broadcast_failure)

    def _log_broadcast_failure(self, future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self._logger.warning("Broadcast failed: %s", error)

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._stop_async = asyncio.Event()

        try:
            self._loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - exercised manually
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
            self._started.set()
        finally:
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            with contextlib.suppress(Exception):
                self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self._loop.close()

    async def _serve(self) -> None:
        async with websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            max_size=MAX_MESSAGE_BYTES,
            logger=self._logger,
        ):
            self._logger.info(
                "UI server running at ws://%s:%d%s",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._started.set()
            await self._stop_async.wait()
            await self._disconnect_all()

    async def _handler(self, websocket: ServerConnection) -> None:
        self._clients.add(websocket)
        self._logger.info(
            "Client connected: %s (%d total)",
            websocket.remote_address,
            len(self._clients),
        )
        try:
            await websocket.send(make_event(EVENT_HELLO, message="Timer websocket connected"))
            for message in self._sticky_events.snapshot():
                await websocket.send(message)
            async for message in websocket:
                await self._dispatch_message(websocket, message)
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            self._clients.discard(websocket)
            self._logger.info("Client disconnected: %s", websocket.remote_address)

    async def _dispatch_message(self, websocket: ServerConnection, message) -> None:
        command = parse_command(message)
        if command is None:
            self._logger.debug("Ignoring UI message: %s", message)
            await websocket.send(make_event(EVENT_ERROR, message="Unrecognized message"))
            return
        if self._on_command is None:
            self._logger.warning("Command received without handler: %s", command.name)
            return
        try:
            self._on_command(command)
        except Exception as error:
            self._logger.error("Command handler failed: %s", error, exc_info=True)
            await websocket.send(
                make_event(EVENT_ERROR, message=f"Command {command.name} could not be queued")
            )

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection
        path = urlsplit(request.path).path

        if path == self._config.websocket_path:
            return None
        if path == HEALTHZ_PATH:
            return self._response(200, "OK", b"ok\n", _TEXT_PLAIN)
        if path == STATE_PATH:
            latest = self._sticky_events.latest(EVENT_TIMER)
            if latest is None:
                return self._response(503, "Service Unavailable", b"no timer state yet\n", _TEXT_PLAIN)
            return self._response(200, "OK", latest.encode("utf-8"), _APPLICATION_JSON)
        return self._response(404, "Not Found", b"not found\n", _TEXT_PLAIN)

    @staticmethod
    def _response(
        status_code: int,
        reason_phrase: str,
        body: bytes,
        content_type: str,
    ) -> Response:
        headers = Headers()
        headers["Content-Type"] = content_type
        headers["Content-Length"] = str(len(body))
        headers["Cache-Control"] = "no-store"
        return Response(status_code, reason_phrase, headers, body)

    async def _disconnect_all(self) -> None:
        clients = tuple(self._clients)
        if clients:
            await asyncio.gather(
                *(client.close(code=1001, reason="Server shutting down") for client in clients),
                return_exceptions=True,
            )
        self._clients.clear()

    async def _broadcast(self, message: str) -> None:
        clients = tuple(self._clients)
        if not clients:
            return

        results = await asyncio.gather(
            *(client.send(message) for client in clients),
            return_exceptions=True,
        )
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                self._clients.discard(client)
                self._logger.warning(
                    "Dropping client %s after failed send: %s",
                    client.remote_address,
                    result,
                )
