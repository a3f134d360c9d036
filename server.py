"""
server.py — HTTP front end.

Endpoints:
  GET /         → resolve ?subcode= / ?ean= / ?name= (optional ?site=, ?debug)
  GET /health   → plain-text health check (for uptime monitors / nginx)

Examples:
  /?subcode=694062
  /?ean=3616479540274
  /?name=Salon%20Bas%20Lanka&debug=1

Every JSON answer (200, 404 and 400) is cacheable for config.CACHE_MAX_AGE
seconds and readable cross-origin, so a browser front end can call it directly.
"""
from __future__ import annotations

import logging

from aiohttp import web

import config
import dispatcher
from models import InvalidRequest, ResolutionRequest

logger = logging.getLogger(__name__)


def _json(body: dict, status: int = 200) -> web.Response:
    return web.json_response(
        body,
        status=status,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Cache-Control": f"public, max-age={config.CACHE_MAX_AGE}",
        },
    )


# ── Request handlers ───────────────────────────────────────────────────────────

async def handle_resolve(request: web.Request) -> web.Response:
    try:
        resolution = ResolutionRequest.from_query(request.query)
    except InvalidRequest as exc:
        return _json({"error": str(exc)}, status=400)

    outcome = await dispatcher.resolve(resolution)
    return _json(outcome.to_body(resolution.debug), status=outcome.status)


async def handle_health(request: web.Request) -> web.Response:
    """Health check — returns 200 OK. Use with uptime monitors."""
    return web.Response(text="OK", content_type="text/plain")


# ── App factory ────────────────────────────────────────────────────────────────

def build_web_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/health", handle_health)
    app.router.add_get("/",       handle_resolve)
    return app


async def start_server() -> web.AppRunner:
    """Start the web server. Returns runner so caller can shut it down cleanly."""
    app    = build_web_app()
    runner = web.AppRunner(app, access_log=logger)
    await runner.setup()
    site = web.TCPSite(runner, config.SERVER_HOST, config.SERVER_PORT)
    await site.start()
    logger.info(
        "Image proxy listening on %s:%d  (default site: %s)",
        config.SERVER_HOST, config.SERVER_PORT, config.DEFAULT_SITE,
    )
    return runner
