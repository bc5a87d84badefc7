"""rbee: remote humanized input server, main entry point.

Listens for input commands over HTTP(S) and replays them on the local
mouse and keyboard with human-like timing.

Endpoint:
  POST /v1/rb - execute one command
      {"action": "moveMouse"|"click"|"right_click"|"type"|"keyTap",
       "x": int, "y": int, "value": str}

Every request passes through, in order: security headers, the shared
token-bucket rate limiter (429), the POST-only check (405), JSON decoding
(400) and finally dispatch (500 on failure, 200 "Command executed").
Command execution blocks, so it runs in the default thread pool; the GUI
lock inside the dispatcher keeps commands from overlapping on the desktop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import ssl
from collections.abc import Sequence

from aiohttp import web

from rbee.commands import Command, CommandDispatcher
from rbee.config import (
    KEEPALIVE_TIMEOUT,
    MAX_BODY_BYTES,
    SHUTDOWN_TIMEOUT,
    Config,
)
from rbee.errors import ConfigError, RbeeError
from rbee.ratelimit import TokenBucket

log = logging.getLogger(__name__)

COMMAND_PATH = "/v1/rb"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Content-Security-Policy": "default-src 'self'",
}

dispatcher_key = web.AppKey("dispatcher", CommandDispatcher)
limiter_key = web.AppKey("limiter", TokenBucket)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

async def _add_security_headers(
    request: web.Request, response: web.StreamResponse,
) -> None:
    """Stamp the fixed security headers on every response, errors included."""
    response.headers.update(SECURITY_HEADERS)


@web.middleware
async def rate_limit_middleware(request: web.Request, handler):
    """Reject with 429 once the shared token bucket is empty."""
    # Unrouted requests (404) fall through without spending a token
    if request.match_info.http_exception is not None:
        return await handler(request)

    if not request.app[limiter_key].allow():
        log.debug("Rate limit exceeded")
        return web.Response(status=429, text="Too Many Requests")
    return await handler(request)


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------

async def handle_command(request: web.Request) -> web.Response:
    """POST /v1/rb

    Body: {"action": str, "x": int, "y": int, "value": str}
    """
    if request.method != "POST":
        return web.Response(
            status=405,
            text="Only POST method is accepted",
            headers={"Allow": "POST"},
        )

    try:
        body = await request.text()
        command = Command.from_dict(json.loads(body))
    except ValueError as exc:
        # JSONDecodeError, UnicodeDecodeError and CommandDecodeError
        log.warning("Rejected command body: %s", exc)
        return web.Response(status=400, text=str(exc))

    dispatcher = request.app[dispatcher_key]
    try:
        await asyncio.get_running_loop().run_in_executor(
            None, dispatcher.dispatch, command,
        )
    except RbeeError as exc:
        log.warning("Command %r failed: %s", command.action, exc)
        return web.Response(status=500, text=str(exc))

    return web.Response(status=200, text="Command executed")


def create_app(dispatcher: CommandDispatcher, limiter: TokenBucket) -> web.Application:
    """Build the aiohttp application around an explicit dispatcher and limiter."""
    app = web.Application(
        middlewares=[rate_limit_middleware],
        client_max_size=MAX_BODY_BYTES,
    )
    app[dispatcher_key] = dispatcher
    app[limiter_key] = limiter
    app.on_response_prepare.append(_add_security_headers)
    app.router.add_route("*", COMMAND_PATH, handle_command)
    return app


def build_ssl_context(cert_file: str, key_file: str) -> ssl.SSLContext:
    """Server-side TLS context from a PEM certificate chain and key."""
    context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    try:
        context.load_cert_chain(cert_file, key_file)
    except (OSError, ssl.SSLError) as exc:
        raise ConfigError(f"Cannot load TLS certificate/key: {exc}") from exc
    return context


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

class RbeeServer:
    """HTTP(S) server that receives input commands and executes them."""

    def __init__(
        self,
        config: Config,
        dispatcher: CommandDispatcher,
        limiter: TokenBucket | None = None,
    ) -> None:
        self._config = config
        if limiter is None:
            limiter = TokenBucket(rate=config.rate, burst=config.burst)
        self._app = create_app(dispatcher, limiter)
        self._runner: web.AppRunner | None = None

    @property
    def app(self) -> web.Application:
        return self._app

    async def start(self) -> None:
        """Start listening."""
        ssl_context = None
        if self._config.ssl_enabled:
            ssl_context = build_ssl_context(
                self._config.cert_file, self._config.key_file,
            )

        self._runner = web.AppRunner(
            self._app,
            keepalive_timeout=KEEPALIVE_TIMEOUT,
            shutdown_timeout=SHUTDOWN_TIMEOUT,
        )
        await self._runner.setup()
        site = web.TCPSite(
            self._runner,
            self._config.host,
            self._config.port,
            ssl_context=ssl_context,
        )
        await site.start()
        log.info(
            "Listening on %s://%s:%d%s (ratelimit=%d/s burst=%d)",
            "https" if ssl_context else "http",
            self._config.host, self._config.port, COMMAND_PATH,
            self._config.rate, self._config.burst,
        )

    async def stop(self) -> None:
        """Stop the HTTP server and release resources."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        log.info("Server stopped")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

async def run(config: Config) -> None:
    """Start the server against the real desktop, run until shutdown."""
    # Imported here so the HTTP layer stays importable without a display
    from rbee.input.desktop import Desktop

    server = RbeeServer(config, CommandDispatcher(Desktop()))
    await server.start()

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _signal_handler() -> None:
        log.info("Shutdown signal received")
        shutdown.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    await shutdown.wait()
    log.info("Shutting down...")
    await server.stop()
    log.info("Shutdown complete")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point: parse config, configure logging, run the server."""
    try:
        config = Config.load(argv)
    except ConfigError as exc:
        raise SystemExit(f"rbee: {exc}") from None

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        pass
    except ConfigError as exc:
        log.error("%s", exc)
        raise SystemExit(1) from None


if __name__ == "__main__":
    main()
