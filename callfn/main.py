from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from callfn import __version__
from callfn.api.dispatch import DEFAULT_DISPATCH_PATH, build_router
from callfn.core.config import Settings, settings
from callfn.functions.registry import FunctionRegistry

logger = logging.getLogger("callfn.app")


def mount(
    app: FastAPI,
    registry: FunctionRegistry,
    *,
    security_token: str | None = None,
    logger: logging.Logger | None = None,
    path: str = DEFAULT_DISPATCH_PATH,
) -> None:
    """
    Expose ``registry`` on ``app`` at ``path``.

    Call once, after every function is registered and before serving. The
    registry is frozen here; later registrations fail.
    """

    if getattr(app.state, "function_registry", None) is not None:
        raise RuntimeError("A dispatcher is already mounted on this application.")
    registry.freeze()
    app.include_router(
        build_router(registry, security_token=security_token, logger=logger, path=path)
    )
    app.state.function_registry = registry


def create_app(
    registry: FunctionRegistry, app_settings: Settings | None = None
) -> FastAPI:
    cfg = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Serving %s functions at %s (auth %s).",
            len(registry),
            cfg.DISPATCH_PATH,
            "enabled" if cfg.SECURITY_TOKEN else "disabled",
        )
        yield

    app = FastAPI(title="callfn", version=__version__, lifespan=lifespan)

    @app.get("/health")
    def health():
        return {"status": "ok", "functions": len(registry)}

    mount(
        app,
        registry,
        security_token=cfg.SECURITY_TOKEN,
        path=cfg.DISPATCH_PATH,
    )
    return app
