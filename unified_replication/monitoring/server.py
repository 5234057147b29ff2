import json
import logging

from aiohttp import web

from .health import HealthChecker, ReadinessChecker
from .metrics import render_metrics

logger = logging.getLogger(__name__)


class HealthServer:
    """Serves /healthz, /readyz and /metrics."""

    def __init__(self, health: HealthChecker, readiness: ReadinessChecker,
                 host: str = '0.0.0.0', port: int = 8081):
        self.health = health
        self.readiness = readiness
        self.host = host
        self.port = port
        self._runner = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.add_routes([
            web.get('/healthz', self.health_check),
            web.get('/readyz', self.readiness_check),
            web.get('/metrics', self.metrics),
        ])
        return app

    async def start(self):
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"Health server listening on {self.host}:{self.port}")

    async def stop(self):
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

    async def health_check(self, request):
        """Health check endpoint"""
        status = self.health.check()
        return web.Response(
            text=json.dumps(status.to_dict()),
            content_type="application/json",
            status=200 if status.healthy else 503
        )

    async def readiness_check(self, request):
        ready = self.readiness.check()
        return web.Response(
            text=json.dumps({"ready": ready}),
            content_type="application/json",
            status=200 if ready else 503
        )

    async def metrics(self, request):
        """Expose Prometheus metrics"""
        try:
            body, content_type = render_metrics()
            return web.Response(
                body=body,
                headers={"Content-Type": content_type}
            )
        except Exception as e:
            logger.error(f"Error generating metrics: {e}")
            return web.Response(
                text=json.dumps({"error": str(e)}),
                content_type="application/json",
                status=500
            )
