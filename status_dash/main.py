from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from .config import configure_logging, settings
from .db import SessionLocal, engine, init_db
from .metrics.base import RenderContext
from .metrics.builtin import create_default_registry
from .metrics.registry import MetricRegistry
from .resources import get_string
from .services.renderer import RenderedMetric, render_metrics
from .storage import SqlStorage

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
registry = create_default_registry()
storage = SqlStorage(SessionLocal, server_timeout_seconds=settings.server_timeout_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    init_db()
    logger.info("Serving %d metric definitions", len(registry))
    try:
        yield
    finally:
        engine.dispose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)


def get_registry() -> MetricRegistry:
    return registry


def get_storage() -> SqlStorage:
    return storage


def get_render_context(storage: SqlStorage = Depends(get_storage)) -> RenderContext:
    return RenderContext(storage=storage, load_statistics=storage.get_statistics)


@app.get("/", include_in_schema=False)
def root_redirect() -> RedirectResponse:
    return RedirectResponse("/dashboard")


@app.get("/dashboard")
def dashboard(
    request: Request,
    registry: MetricRegistry = Depends(get_registry),
    context: RenderContext = Depends(get_render_context),
):
    report = render_metrics(registry, context)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "metrics": report.metrics,
            "refresh_interval": settings.refresh_interval_seconds,
            "app_name": settings.app_name,
        },
    )


@app.get("/api/metrics")
def read_metrics(
    registry: MetricRegistry = Depends(get_registry),
    context: RenderContext = Depends(get_render_context),
) -> Dict[str, Any]:
    return render_metrics(registry, context).to_dict()


@app.get("/api/metrics/{metric_id}")
def read_metric(
    metric_id: str,
    registry: MetricRegistry = Depends(get_registry),
    context: RenderContext = Depends(get_render_context),
):
    try:
        definition = registry.get(metric_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    try:
        metric = definition.evaluate(context)
    except Exception as exc:
        logger.exception("Failed to compute metric %r", metric_id)
        raise HTTPException(
            status_code=503, detail=f"Metric '{metric_id}' could not be computed."
        ) from exc

    if metric is None:
        return Response(status_code=204)
    return RenderedMetric(definition.id, get_string(definition.label_key), metric).to_dict()


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
