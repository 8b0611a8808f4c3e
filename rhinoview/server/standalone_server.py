#!/usr/bin/env python3
"""
Compute proxy server entry point.

Serves the viewer's static files and proxies `GET /compute` requests to a
Rhino.Compute server.
"""

import argparse
import logging
import signal
import sys
import time

from rhinoview.compute.client import ComputeClient
from rhinoview.compute.parameters import ParameterCollector, ParameterSpec
from rhinoview.utils.logging import setup_logging

from .server_app import ComputeProxyApp
from .server_manager import ComputeProxyServer

console_logger = logging.getLogger(__name__)


def parse_query_param(value: str) -> tuple[str, str]:
    """Parse a `query=ParamName` mapping."""
    query_name, sep, param_name = value.partition("=")
    if not sep or not query_name or not param_name:
        raise argparse.ArgumentTypeError(f"Expected query=ParamName, got {value!r}")
    return query_name, param_name


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and return command line arguments."""
    parser = argparse.ArgumentParser(
        description="Static file server proxying definition evaluations to "
        "Rhino.Compute",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to, default: %(default)s.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port to bind to, default: %(default)s.",
    )
    parser.add_argument(
        "--compute-url",
        type=str,
        default="http://localhost:6500/",
        help="Rhino.Compute server URL, default: %(default)s.",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Rhino.Compute API key. Leave unset for a local server.",
    )
    parser.add_argument(
        "--definition",
        type=str,
        default="spiky_thing.gh",
        help="Definition file or URL to evaluate, default: %(default)s.",
    )
    parser.add_argument(
        "--static-dir",
        type=str,
        default="static",
        help="Directory served for all other paths, default: %(default)s.",
    )
    parser.add_argument(
        "--param",
        type=parse_query_param,
        action="append",
        dest="params",
        help="Query argument to definition input mapping as query=ParamName, "
        "in definition input order. Repeatable. Default: frequency=Frequency "
        "size=Size.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging."
    )

    args = parser.parse_args(argv)
    if not args.params:
        args.params = [("frequency", "Frequency"), ("size", "Size")]
    return args


def build_app(args: argparse.Namespace) -> ComputeProxyApp:
    """Create the proxy app, loading the definition once."""
    client = ComputeClient(url=args.compute_url, api_key=args.api_key)
    definition = client.load_definition(args.definition)
    collector = ParameterCollector(
        [ParameterSpec(name=param_name, default=0.0) for _, param_name in args.params],
        definition=definition,
    )
    return ComputeProxyApp(
        client=client,
        collector=collector,
        query_params=dict(args.params),
        static_dir=args.static_dir,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the compute proxy server.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    args = parse_arguments(argv)
    setup_logging(verbose=args.verbose)

    server = None

    def signal_handler(signum, _):
        """Handle shutdown signals gracefully."""
        console_logger.info(f"Received signal {signum}, shutting down...")
        if server:
            server.stop()
        sys.exit(0)

    # Register signal handlers for graceful shutdown.
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        server = ComputeProxyServer(build_app(args), host=args.host, port=args.port)
        server.start()
        console_logger.info("Press Ctrl+C to stop the server")

        # The server runs in its own thread, so we just wait.
        try:
            while server.is_running():
                time.sleep(1)
        except KeyboardInterrupt:
            console_logger.info("Keyboard interrupt received")

    except Exception as e:
        console_logger.error(f"Failed to start server: {e}")
        return 1

    finally:
        if server and server.is_running():
            server.stop()

    return 0


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
