"""Development HTTP server."""

from .app import DEV_ASSET_URL, NAMESPACE, DevServer, create_app, run_server

__all__ = ["DEV_ASSET_URL", "NAMESPACE", "DevServer", "create_app", "run_server"]
