"""goclone proxy server using aiohttp."""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass
from typing import Any, List, Optional

from aiohttp import web

from constants import Constants
from common.logging_utils import extra_context
from rewrite.errors import RewriteError

from .errors import NotFound, ProxyError
from .orchestrator import ProxyOrchestrator
from .request_parser import RequestParser
from .upstream import UpstreamClient

logger = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<body>
<h1>goclone</h1>
<p>See <a href="{url}">{url}</a> for usage instructions.</p>
</body>
</html>"""


@dataclass(frozen=True)
class ProxyConfig:
    """Configuration for the proxy server. Read-only once built."""

    host: str = Constants.DEFAULT_PUBLIC_HOST
    upstream: str = Constants.DEFAULT_UPSTREAM
    listen_host: str = Constants.DEFAULT_LISTEN_HOST
    port: int = Constants.DEFAULT_PORT
    timeout: int = Constants.REQUEST_TIMEOUT

    @classmethod
    def from_args(cls, args: Any) -> "ProxyConfig":
        """Create config from CLI arguments.

        Args:
            args: Parsed CLI arguments namespace.

        Returns:
            ProxyConfig instance.
        """
        return cls(
            host=getattr(args, "PUBLIC_HOST", None) or Constants.DEFAULT_PUBLIC_HOST,
            upstream=(getattr(args, "UPSTREAM", None) or Constants.DEFAULT_UPSTREAM).rstrip("/"),
            listen_host=getattr(args, "LISTEN_HOST", None) or Constants.DEFAULT_LISTEN_HOST,
            port=int(getattr(args, "PORT", None) or Constants.DEFAULT_PORT),
            timeout=int(getattr(args, "TIMEOUT", None) or Constants.REQUEST_TIMEOUT),
        )

    @property
    def proxy_url(self) -> str:
        """Public URL of the module proxy endpoint."""
        return f"https://{self.host}/{Constants.PROXY_PREFIX}/"


class GoCloneProxyServer:
    """HTTP server re-publishing upstream Go modules under a vanity host.

    Serves the module proxy protocol under ``/_mod/``, answers ``?go-get=1``
    discovery queries for any path, and shows a landing page at ``/``.
    """

    def __init__(self, config: ProxyConfig):
        """Initialize the proxy server.

        Args:
            config: Server configuration.
        """
        self._config = config
        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None

        self._parser = RequestParser(config.host)
        self._upstream = UpstreamClient(config.upstream, timeout=config.timeout)
        self._orchestrator = ProxyOrchestrator(config.host, self._upstream, self._parser)

    @property
    def config(self) -> ProxyConfig:
        return self._config

    def _create_app(self) -> web.Application:
        """Create the aiohttp application."""
        app = web.Application()
        app.router.add_get("/_health", self._health_check)
        app.router.add_get(f"/{Constants.PROXY_PREFIX}/{{tail:.*}}", self._handle_module_request)
        app.router.add_get("/{path:.*}", self._handle_index)
        app.on_startup.append(self._on_startup)
        app.on_cleanup.append(self._on_cleanup)
        return app

    async def _health_check(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.json_response({
            "status": "ok",
            "host": self._config.host,
            "upstream": self._config.upstream,
        })

    async def _on_startup(self, app: web.Application) -> None:
        """Called when the server starts."""
        await self._upstream.start()
        logger.info("Proxy server starting on %s:%s", self._config.listen_host, self._config.port)

    async def _on_cleanup(self, app: web.Application) -> None:
        """Called when the server stops."""
        await self._upstream.stop()
        logger.info("Proxy server stopped")

    async def _handle_index(self, request: web.Request) -> web.Response:
        """Landing page at ``/``; go-get discovery everywhere else."""
        if request.path == "/" and request.query.get("go-get") != "1":
            return web.Response(
                text=LANDING_PAGE.format(url=Constants.HOMEPAGE),
                content_type="text/html",
                charset="utf-8",
            )
        return self._vanity_response(request)

    def _vanity_response(self, request: web.Request) -> web.Response:
        """Answer a ``?go-get=1`` query with a go-import meta tag."""
        if request.query.get("go-get") != "1":
            return web.Response(status=404, text="404 page not found")
        module = request.path.lstrip("/")
        html = (
            f'<meta name="go-import" content="{self._config.host}/{module} '
            f'mod {self._config.proxy_url}">'
        )
        return web.Response(text=html, content_type="text/html", charset="utf-8")

    async def _handle_module_request(self, request: web.Request) -> web.Response:
        """Handle a module proxy protocol request.

        Args:
            request: Incoming HTTP request.

        Returns:
            HTTP response.
        """
        path = request.path
        try:
            result = await self._orchestrator.handle(path)
        except NotFound as exc:
            logger.warning(
                "Not found: %s (%s)", path, exc,
                extra=extra_context(event="request_failed", component="server", outcome="not_found", status_code=exc.status),
            )
            return web.Response(status=exc.status, text=f"not found: {exc}")
        except ProxyError as exc:
            logger.error(
                "Upstream failure for %s: %s", path, exc,
                extra=extra_context(event="request_failed", component="server", outcome="upstream_error", status_code=exc.status),
            )
            return web.Response(status=exc.status, text=str(exc))
        except RewriteError as exc:
            logger.error(
                "Rewrite failed for %s: %s", path, exc,
                extra=extra_context(event="request_failed", component="server", outcome="rewrite_error", status_code=500),
            )
            return web.Response(status=500, text=f"rewrite failed: {exc}")

        return web.Response(
            status=result.status,
            headers=result.headers,
            body=result.body,
        )

    async def start(self) -> None:
        """Start the proxy server."""
        self._app = self._create_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(
            self._runner,
            self._config.listen_host,
            self._config.port,
        )
        await site.start()

        logger.info(
            "goclone proxy listening on http://%s:%s",
            self._config.listen_host, self._config.port,
        )
        logger.info("Public host: %s", self._config.host)
        logger.info("Upstream: %s", self._config.upstream)

    def addresses(self) -> List[Any]:
        """Socket addresses the running server is bound to."""
        if self._runner is None:
            return []
        return list(self._runner.addresses)

    async def stop(self) -> None:
        """Stop the proxy server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._app = None


def run_proxy_server_sync(config: ProxyConfig) -> None:
    """Run the proxy server synchronously.

    Installs signal handlers for SIGTERM and SIGINT for clean shutdown.

    Args:
        config: Server configuration.
    """
    server = GoCloneProxyServer(config)
    loop = asyncio.new_event_loop()

    async def run():
        await server.start()
        stop_event = asyncio.Event()
        running_loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            running_loop.add_signal_handler(sig, stop_event.set)
        await stop_event.wait()
        logger.info("Shutdown signal received, stopping...")
        await server.stop()

    try:
        loop.run_until_complete(run())
    except KeyboardInterrupt:
        # Fallback for platforms where signal handlers don't work (Windows)
        loop.run_until_complete(server.stop())
    finally:
        loop.close()
        logger.info("Proxy server shutdown complete")
