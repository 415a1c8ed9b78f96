"""In-memory demo backend for the solar cleaner dashboard.

Implements the same HTTP/JSON contract as the cleaner's API on top of the
data in :mod:`.demo` so the dashboard can be tried without hardware.

Start with ``--serve-demo`` (headless) or ``--demo`` (with the window)::

    solar-dashboard --serve-demo -v

Then from any machine on the LAN::

    curl http://<host>:5050/api/dashboard
    curl -X POST http://<host>:5050/api/cleaner/toggle -H 'Content-Type: application/json' -d '{"state": true}'
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from datetime import datetime, timezone
from typing import Any

from aiohttp import web
from pydantic import ValidationError

from .demo import get_demo_batches, get_demo_schedule, get_demo_status
from .models import ScheduleEntry

log = logging.getLogger(__name__)

_PAGE_SIZE = 5
_HISTORY_LENGTH = 5


class DemoBackend:
    """Embedded HTTP server that stands in for the cleaner."""

    def __init__(self, port: int = 5050, host: str = "0.0.0.0") -> None:
        self._port = port
        self._host = host
        self._status: dict[str, Any] = get_demo_status()
        self._batches: list[dict] = get_demo_batches()
        self._schedule: list[dict] = get_demo_schedule()
        self._app = web.Application(middlewares=[self._error_middleware])
        self._runner: web.AppRunner | None = None
        self._setup_routes()

    @property
    def app(self) -> web.Application:
        return self._app

    def _setup_routes(self) -> None:
        r = self._app.router
        r.add_get("/api/dashboard", self._handle_dashboard)
        r.add_post("/api/cleaner/toggle", self._handle_toggle)
        r.add_post("/api/cleaner/active", self._handle_active)
        r.add_get("/api/batches", self._handle_batches)
        r.add_get("/api/schedule", self._handle_get_schedule)
        r.add_put("/api/schedule", self._handle_put_schedule)
        r.add_post("/api/schedule", self._handle_add_schedule)
        r.add_delete("/api/schedule/{index}", self._handle_delete_schedule)

    # ------------------------------------------------------------------
    # Middleware
    # ------------------------------------------------------------------

    @web.middleware
    async def _error_middleware(
        self,
        request: web.Request,
        handler: Any,
    ) -> web.StreamResponse:
        try:
            return await handler(request)
        except web.HTTPException:
            raise
        except json.JSONDecodeError:
            return web.json_response(
                {"error": "Invalid JSON in request body"}, status=400,
            )
        except ValidationError as e:
            return web.json_response(
                {"error": e.errors(include_url=False, include_context=False)},
                status=400,
            )
        except Exception as e:
            log.exception("Demo backend error")
            return web.json_response(
                {"error": str(e)}, status=500,
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Bind the listening socket and start serving."""
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self._host, self._port)
        await site.start()

        log.info("Demo backend running on http://%s:%d", self._host, self._port)

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            log.info("Demo backend stopped")

    async def run(self, stop_event: asyncio.Event) -> None:
        """Serve until *stop_event* is set."""
        await self.start()
        try:
            await stop_event.wait()
        finally:
            await self.stop()

    # ------------------------------------------------------------------
    # Device control
    # ------------------------------------------------------------------

    async def _handle_dashboard(self, request: web.Request) -> web.Response:
        return web.json_response(self._status)

    async def _handle_toggle(self, request: web.Request) -> web.Response:
        data = await request.json()
        state = data.get("state") if isinstance(data, dict) else None
        if not isinstance(state, bool):
            return web.json_response(
                {"error": "state (bool) is required"}, status=400,
            )

        self._status["isCleanerOn"] = state
        history = self._status["onOffHistory"]
        history.append(
            {"state": state, "time": datetime.now(timezone.utc).isoformat()},
        )
        del history[:-_HISTORY_LENGTH]
        log.info("Demo: cleaner %s", "ON" if state else "OFF")
        return web.json_response({"success": True, "newState": state})

    async def _handle_active(self, request: web.Request) -> web.Response:
        data = await request.json()
        active = data.get("active") if isinstance(data, dict) else None
        if not isinstance(active, bool):
            return web.json_response(
                {"error": "active (bool) is required"}, status=400,
            )

        self._status["isActive"] = active
        log.info("Demo: cleaner %s", "armed" if active else "disarmed")
        return web.json_response({"success": True, "newActiveState": active})

    # ------------------------------------------------------------------
    # GET /api/batches?page=&search=
    # ------------------------------------------------------------------

    async def _handle_batches(self, request: web.Request) -> web.Response:
        try:
            page = int(request.query.get("page", "1"))
        except ValueError:
            return web.json_response({"error": "page must be an integer"}, status=400)
        search = request.query.get("search", "").strip().lower()

        matches = [
            b for b in self._batches
            if not search or search in b["name"].lower() or search in b["date"]
        ]
        page = max(1, min(page, max(1, math.ceil(len(matches) / _PAGE_SIZE))))
        start = (page - 1) * _PAGE_SIZE
        return web.json_response({
            "batches": matches[start:start + _PAGE_SIZE],
            "totalCount": len(matches),
        })

    # ------------------------------------------------------------------
    # Schedule
    # ------------------------------------------------------------------

    async def _handle_get_schedule(self, request: web.Request) -> web.Response:
        return web.json_response(self._schedule)

    async def _handle_put_schedule(self, request: web.Request) -> web.Response:
        data = await request.json()
        if not isinstance(data, list):
            return web.json_response(
                {"error": "a list of schedule entries is required"}, status=400,
            )

        entries = [ScheduleEntry.model_validate(item) for item in data]
        self._schedule = [entry.to_wire() for entry in entries]
        log.info("Demo: schedule replaced (%d entries)", len(self._schedule))
        return web.json_response(
            {"success": True, "updatedSchedule": self._schedule},
        )

    async def _handle_add_schedule(self, request: web.Request) -> web.Response:
        data = await request.json()
        item = ScheduleEntry.model_validate(data).to_wire()
        self._schedule.append(item)
        log.info("Demo: schedule item added %s %s", item["day"], item["time"])
        return web.json_response({"success": True, "newScheduleItem": item})

    async def _handle_delete_schedule(self, request: web.Request) -> web.Response:
        try:
            index = int(request.match_info["index"])
        except ValueError:
            return web.json_response(
                {"success": False, "error": "index must be an integer"}, status=400,
            )
        if not 0 <= index < len(self._schedule):
            return web.json_response(
                {"success": False, "error": f"no schedule item at index {index}"},
                status=404,
            )

        removed = self._schedule.pop(index)
        log.info("Demo: schedule item %d removed (%s %s)", index, removed["day"], removed["time"])
        return web.json_response({"success": True})
