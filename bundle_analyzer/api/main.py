import logging
from typing import Optional
from fastapi import FastAPI
from contextlib import asynccontextmanager

from ..addon import BundleAnalyzerAddon
from ..build.process import BuildProcess
from ..config.config_loader import AnalyzerConfig


def create_app(
    config: Optional[AnalyzerConfig] = None,
    addon: Optional[BundleAnalyzerAddon] = None,
    app_options: Optional[dict] = None
) -> FastAPI:
    """
    Create the dev server app with the analyze routes mounted.

    Args:
        config: Analyzer configuration (defaults are used if omitted)
        addon: Pre-built addon, mainly for injecting collaborators in tests
        app_options: Host project options passed to the included() hook
    """
    config = config or AnalyzerConfig.default()
    addon = addon or BundleAnalyzerAddon(config.analyzer)

    if addon.context is None:
        addon.init()
        addon.included(app_options)

    build_process: Optional[BuildProcess] = None
    if config.build.command:
        build_process = BuildProcess(
            config.build.command,
            addon.context.monitor,
            cwd=config.build.cwd or str(addon.context.project_root)
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifecycle"""
        logging.info("Starting Bundle Analyzer")
        logging.info(f"Using project root: {addon.context.project_root}")
        logging.info(f"Using stats directory: {addon.context.stats_dir}")

        if build_process is not None:
            await build_process.start()

        yield

        logging.info("Shutting down Bundle Analyzer")
        await addon.shutdown()
        if build_process is not None:
            await build_process.stop()

    app = FastAPI(
        title="Bundle Analyzer",
        description="Bundle size report computed from the dev build's concat stats",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.addon = addon
    app.state.build_process = build_process

    addon.server_middleware(app)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "bundle-analyzer",
            "version": "1.0.0"
        }

    return app
