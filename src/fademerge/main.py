"""FastAPI application entry point."""

from __future__ import annotations

from typing import Any

import uvicorn
from fastapi import FastAPI

from .config import AppConfig, load_config
from .dependencies import include_routers
from .logging import configure_logging


def create_app(config: AppConfig | None = None, *, s3_client: Any | None = None) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    cfg = config or load_config()
    configure_logging(cfg.log_level)
    app = FastAPI(title="Fade Merge")
    include_routers(app, cfg, s3_client=s3_client)
    return app


app = create_app()


def run() -> None:
    """Serve the application on the configured host and port."""
    config: AppConfig = app.state.config
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    run()
