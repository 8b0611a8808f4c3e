"""Compute proxy server.

Usage:
    # Programmatic usage
    from rhinoview.server import ComputeProxyApp, ComputeProxyServer

    app = ComputeProxyApp(client, collector, {"frequency": "Frequency", "size": "Size"})
    with ComputeProxyServer(app, host="127.0.0.1", port=3000):
        ...

    # Standalone usage
    # python -m rhinoview.server.standalone_server --definition spiky_thing.gh
"""

from .server_app import ComputeProxyApp
from .server_manager import ComputeProxyServer

__all__ = ["ComputeProxyApp", "ComputeProxyServer"]
