"""Compute proxy server lifecycle management."""

import logging
import time

from threading import Thread

import requests

from werkzeug.serving import BaseWSGIServer, make_server

from rhinoview.utils.network_utils import is_port_available

from .server_app import ComputeProxyApp

console_logger = logging.getLogger(__name__)


class ComputeProxyServer:
    """Manages the lifecycle of the compute proxy server.

    This class is designed for programmatic usage. For standalone usage use
    the standalone_server.py script instead.

    Example:
        >>> app = ComputeProxyApp(client, collector, {"frequency": "Frequency"})
        >>> server = ComputeProxyServer(app, host="127.0.0.1", port=3000)
        >>> server.start()
        >>> # ... GET http://127.0.0.1:3000/compute?frequency=3 ...
        >>> server.stop()
    """

    def __init__(self, app: ComputeProxyApp, host: str = "127.0.0.1", port: int = 3000):
        """Initialize the server manager.

        Args:
            app: The Flask application to serve.
            host: The host address to bind the server to.
            port: The port number to bind to.

        Raises:
            ValueError: If the specified port is not available.
        """
        if not is_port_available(host, port):
            raise ValueError(f"Port {port} is not available on {host}")

        self._app = app
        self._host = host
        self._port = port
        self._server: BaseWSGIServer | None = None
        self._server_thread: Thread | None = None
        self._running = False

        console_logger.debug(f"Initialized ComputeProxyServer(host={host}, port={port})")

    def start(self) -> None:
        """Start serving in a background thread and wait until ready.

        Raises:
            RuntimeError: If server is already running or does not become ready.
        """
        if self._running:
            raise RuntimeError("Server is already running")

        console_logger.info(f"Starting compute proxy server on {self._host}:{self._port}")

        try:
            self._server = make_server(self._host, self._port, self._app, threaded=True)
            self._server_thread = Thread(target=self._run_server, daemon=False)
            self._server_thread.start()

            self._wait_until_ready()
            self._running = True
            console_logger.info(
                f"Server running at http://{self._host}:{self._port}/"
            )
        except Exception as e:
            self._cleanup()
            console_logger.error(f"Failed to start server: {e}")
            raise

    def stop(self) -> None:
        """Stop the server gracefully."""
        if not self._running:
            console_logger.warning("Server is not running")
            return

        console_logger.info("Stopping compute proxy server...")
        self._cleanup()
        console_logger.info("Compute proxy server stopped")

    def is_running(self) -> bool:
        return self._running

    @property
    def host(self) -> str:
        """Get the server host address."""
        return self._host

    @property
    def port(self) -> int:
        """Get the server port number."""
        return self._port

    def _run_server(self) -> None:
        """Run the WSGI server in a separate thread."""
        try:
            self._server.serve_forever()
        except Exception as e:
            console_logger.error(f"Server thread failed: {e}")

    def _wait_until_ready(self, timeout: float = 30) -> None:
        """Wait for server to be ready to accept requests.

        Raises:
            RuntimeError: If server doesn't become ready within timeout.
        """
        start_time = time.time()
        while time.time() - start_time < timeout:
            try:
                response = requests.get(
                    f"http://{self._host}:{self._port}/health", timeout=1
                )
                if response.status_code == 200:
                    return
            except requests.exceptions.RequestException:
                pass

            time.sleep(0.1)

        raise RuntimeError(f"Server did not become ready within {timeout} seconds")

    def _cleanup(self) -> None:
        """Shut down the WSGI server and join its thread."""
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
        if self._server_thread and self._server_thread.is_alive():
            self._server_thread.join(timeout=5)
            if self._server_thread.is_alive():
                console_logger.warning("Server thread did not stop gracefully")
        self._running = False
        self._server = None
        self._server_thread = None

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.stop()
