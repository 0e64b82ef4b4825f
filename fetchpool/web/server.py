"""
A thin aiohttp.web adapter exposing job submission and polling over HTTP.
"""

import json
import logging

from aiohttp import web

from fetchpool.core import JobManager
from fetchpool.exceptions import PoolClosedError
from fetchpool.models.config import FetchConfig

log = logging.getLogger(__name__)

MANAGER_KEY = web.AppKey("manager", JobManager)

routes = web.RouteTableDef()


async def _read_url_text(request: web.Request) -> str:
    """
    Extracts newline-separated URLs from a request body. Accepts plain text,
    a form field named 'urls', or JSON `{"urls": "<text>" | [...]}`.
    """
    if request.content_type == "application/json":
        try:
            payload = await request.json()
        except UnicodeDecodeError as e:
            raise web.HTTPBadRequest(text="Request body is not valid UTF-8.") from e
        except json.JSONDecodeError as e:
            raise web.HTTPBadRequest(text=f"Invalid JSON body: {e}") from e
        urls = payload.get("urls", "") if isinstance(payload, dict) else payload
        if isinstance(urls, str):
            return urls
        if isinstance(urls, list) and all(isinstance(u, str) for u in urls):
            return "\n".join(urls)
        raise web.HTTPBadRequest(
            text="'urls' must be a string or a list of strings."
        )

    if request.content_type in (
        "application/x-www-form-urlencoded",
        "multipart/form-data",
    ):
        form = await request.post()
        value = form.get("urls", "")
        return value if isinstance(value, str) else ""

    try:
        return await request.text()
    except UnicodeDecodeError as e:
        raise web.HTTPBadRequest(text="Request body is not valid UTF-8.") from e


@routes.post("/api/jobs")
async def submit_job(request: web.Request) -> web.Response:
    manager = request.app[MANAGER_KEY]
    text = await _read_url_text(request)
    try:
        job_id = manager.submit(text)
    except PoolClosedError as e:
        raise web.HTTPServiceUnavailable(text=str(e)) from e
    return web.json_response({"job_id": job_id}, status=201)


@routes.get("/api/jobs/{job_id}")
async def get_job(request: web.Request) -> web.Response:
    manager = request.app[MANAGER_KEY]
    snapshot = await manager.poll(request.match_info["job_id"])
    return web.json_response(snapshot.model_dump())


async def _start_manager(app: web.Application) -> None:
    await app[MANAGER_KEY].start()


async def _stop_manager(app: web.Application) -> None:
    log.info("Shutting down: draining in-flight fetches...")
    await app[MANAGER_KEY].shutdown()


def create_app(
    config: FetchConfig, manager: JobManager | None = None
) -> web.Application:
    """
    Builds the HTTP application. The job manager is started with the
    application and drained when it shuts down.
    """
    app = web.Application()
    app[MANAGER_KEY] = manager or JobManager(config)
    app.add_routes(routes)
    app.on_startup.append(_start_manager)
    app.on_cleanup.append(_stop_manager)
    return app
