"""Flask application proxying definition evaluations to Rhino.Compute.

Besides the `/compute` proxy endpoint the app serves the viewer's static
files for every other path.
"""

import logging

from pathlib import Path

import flask

from rhinoview.compute.client import ComputeClient
from rhinoview.compute.parameters import ParameterCollector
from rhinoview.errors import ComputeRequestError, ServiceUnavailableError

console_logger = logging.getLogger(__name__)


class ComputeProxyApp(flask.Flask):
    """Flask application exposing a single evaluation endpoint.

    `GET /compute?frequency=..&size=..` maps each configured query argument to
    its definition input, evaluates the definition and returns the raw compute
    response JSON.
    """

    def __init__(
        self,
        client: ComputeClient,
        collector: ParameterCollector,
        query_params: dict[str, str],
        static_dir: Path | str = "static",
    ) -> None:
        """Initialize the Flask app.

        Args:
            client: Client used to reach the compute server.
            collector: Collector for the proxied definition. Its parameter
                order decides the tree order.
            query_params: Query argument -> definition input name.
            static_dir: Directory served for all non-API paths.
        """
        super().__init__(
            "compute_proxy_server",
            static_folder=str(Path(static_dir).resolve()),
            static_url_path="",
        )

        missing = set(collector.names) - set(query_params.values())
        if missing:
            raise ValueError(
                f"No query argument mapped to parameters: {', '.join(sorted(missing))}"
            )

        self._client = client
        self._collector = collector
        self._query_params = dict(query_params)

        # Setup routes.
        self.add_url_rule("/health", "health", self._health_endpoint, methods=["GET"])
        self.add_url_rule("/compute", "compute", self._compute_endpoint, methods=["GET"])
        self.add_url_rule("/", "index", self._index_endpoint, methods=["GET"])

    def _health_endpoint(self) -> flask.Response:
        """Health check endpoint."""
        return flask.jsonify({"status": "healthy"})

    def _index_endpoint(self) -> flask.Response:
        return self.send_static_file("index.html")

    def _compute_endpoint(self) -> flask.Response:
        """Evaluate the definition with the query arguments as inputs."""
        slider_values = {}
        for query_name, param_name in self._query_params.items():
            raw_value = flask.request.args.get(query_name)
            if raw_value is None:
                return (
                    flask.jsonify({"error": f"Missing query argument: {query_name}"}),
                    400,
                )
            try:
                slider_values[param_name] = float(raw_value)
            except ValueError:
                return (
                    flask.jsonify(
                        {"error": f"Query argument {query_name} is not a number"}
                    ),
                    400,
                )

        request = self._collector.build_request(slider_values)
        try:
            response = self._client.evaluate_definition(request)
        except ServiceUnavailableError as e:
            console_logger.error(f"Compute service unavailable: {e}")
            return flask.jsonify({"error": str(e)}), 503
        except ComputeRequestError as e:
            console_logger.error(f"Compute request failed: {e}")
            return flask.jsonify({"error": str(e)}), 502

        return flask.jsonify(response.raw)
