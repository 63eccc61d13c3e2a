"""HTTP entrypoint around the progression engine.

The engine itself has no transport; this process feeds it kill events over HTTP
and calls TickAll on a fixed interval.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Any

from aiohttp import web

from rank_server.game import protocol
from rank_server.game.config import ServerConfig
from rank_server.game.engine import RankingEngine

logger = logging.getLogger(__name__)


class ProgressionService:
    def __init__(self, config: ServerConfig, engine: RankingEngine | None = None):
        self.config = config
        self.server_id = str(uuid.uuid4())
        self.start_time = time.time()

        self.engine = engine or RankingEngine(config.progression)

        self._running = False
        self._tick_task: asyncio.Task | None = None

        self._ticks = 0

    @property
    def ticks(self) -> int:
        return self._ticks

    async def start(self) -> None:
        self._running = True
        self._tick_task = asyncio.create_task(self._tick_loop())
        logger.info("tick loop started (every %.2fs)", self.config.tick_interval_sec)

    async def stop(self) -> None:
        self._running = False
        if self._tick_task:
            self._tick_task.cancel()
            try:
                await self._tick_task
            except asyncio.CancelledError:
                pass
            self._tick_task = None

    async def _tick_loop(self) -> None:
        interval = float(self.config.tick_interval_sec)
        while self._running:
            await asyncio.sleep(interval)
            try:
                self.tick()
            except Exception:
                # Keep ticking; the next pass may succeed.
                logger.exception("tick %d failed", self._ticks + 1)

    def tick(self):
        report = self.engine.tick_all()
        self._ticks += 1
        if report.failed:
            logger.warning("tick %d: %d player(s) failed", self._ticks, len(report.failed))
        return report

    def version_payload(self) -> dict[str, Any]:
        return {
            "serverId": self.server_id,
            "serverVersion": self.config.server_version,
            "tickIntervalSec": self.config.tick_interval_sec,
        }


def _cors_headers(config: ServerConfig, origin: str | None) -> dict[str, str]:
    if not origin:
        return {}
    if config.cors_allow_all or origin in config.cors_allowed_origins:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    return {}


@web.middleware
async def cors_middleware(request: web.Request, handler):
    if request.method == "OPTIONS":
        origin = request.headers.get("Origin")
        headers = {
            **_cors_headers(request.app["config"], origin),
            "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
            "Access-Control-Max-Age": "86400",
        }
        return web.Response(status=204, headers=headers)

    resp = await handler(request)
    for k, v in _cors_headers(request.app["config"], request.headers.get("Origin")).items():
        resp.headers[k] = v
    return resp


async def _read_body(request: web.Request) -> dict[str, Any]:
    try:
        return protocol.loads(await request.text())
    except protocol.ProtocolError as e:
        raise web.HTTPBadRequest(text=str(e))


def create_app(config: ServerConfig, engine: RankingEngine | None = None) -> web.Application:
    app = web.Application(middlewares=[cors_middleware])
    svc = ProgressionService(config, engine=engine)

    app["config"] = config
    app["svc"] = svc

    async def on_startup(_: web.Application):
        await svc.start()

    async def on_cleanup(_: web.Application):
        await svc.stop()

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    async def root(_: web.Request):
        return web.json_response(
            {
                "ok": True,
                "service": "rank-server",
                **svc.version_payload(),
                "endpoints": {
                    "health": "/health",
                    "version": "/version",
                    "players": "/players",
                    "kills": "/kills",
                    "tick": "/tick",
                    "dump": "/dump",
                },
            }
        )

    async def health(_: web.Request):
        return web.json_response(
            {
                "ok": True,
                "uptimeSec": time.time() - svc.start_time,
                "players": svc.engine.player_count,
                "ticks": svc.ticks,
                **svc.version_payload(),
            }
        )

    async def version(_: web.Request):
        return web.json_response(svc.version_payload())

    async def add_player(request: web.Request):
        try:
            req = protocol.AddPlayer.parse(await _read_body(request))
        except protocol.ProtocolError as e:
            raise web.HTTPBadRequest(text=str(e))
        created = svc.engine.add_player(req.playerId, req.name)
        return web.json_response({"created": created, "player": svc.engine.require_player_info(req.playerId).to_dict()})

    async def list_players(_: web.Request):
        return web.json_response({"players": [p.to_dict() for p in svc.engine.players()]})

    async def get_player(request: web.Request):
        info = svc.engine.get_player_info(request.match_info["player_id"])
        if info is None:
            raise web.HTTPNotFound(text="player not found")
        return web.json_response(info.to_dict())

    async def kill(request: web.Request):
        try:
            req = protocol.Kill.parse(await _read_body(request))
        except protocol.ProtocolError as e:
            raise web.HTTPBadRequest(text=str(e))
        result = svc.engine.record_kill(req.killerId, req.victimId)
        if not result.ok:
            return web.json_response(result.to_dict(), status=404)
        return web.json_response(result.to_dict())

    async def tick(_: web.Request):
        return web.json_response(svc.tick().to_dict())

    async def dump(_: web.Request):
        return web.Response(text=svc.engine.dump(), content_type="text/plain")

    app.router.add_get("/", root)
    app.router.add_get("/health", health)
    app.router.add_get("/version", version)
    app.router.add_post("/players", add_player)
    app.router.add_get("/players", list_players)
    app.router.add_get("/players/{player_id}", get_player)
    app.router.add_post("/kills", kill)
    app.router.add_post("/tick", tick)
    app.router.add_get("/dump", dump)

    return app


def main() -> None:
    config = ServerConfig.from_env()
    logging.basicConfig(level=config.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    app = create_app(config)
    web.run_app(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
