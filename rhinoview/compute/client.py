import json
import logging
import time

from pathlib import Path

import requests

from rhinoview.errors import ComputeRequestError, ServiceUnavailableError

from .dataclasses import EvaluationRequest, EvaluationResponse

console_logger = logging.getLogger(__name__)


class ComputeClient:
    """Client for making requests to a Rhino.Compute server.

    Provides a high-level interface for evaluating Grasshopper definitions.
    Handles HTTP communication, retries, error handling, and response parsing.

    The client maintains a persistent HTTP session for connection pooling
    and includes automatic retry logic with exponential backoff for
    transient failures.

    Example:
        >>> client = ComputeClient(url="http://localhost:6500/")
        >>> tree = DataTree("Height")
        >>> tree.append([0], [50.0])
        >>> response = client.evaluate_definition(
        ...     EvaluationRequest(definition=definition_bytes, trees=[tree])
        ... )
        >>> print(len(response.outputs))
    """

    def __init__(
        self,
        url: str = "http://localhost:6500/",
        api_key: str | None = None,
        timeout_s: float = 60,
        max_retries: int = 3,
    ):
        """Initialize compute client.

        Args:
            url: Base URL of the compute server. A trailing slash is added if
                missing. Defaults to a local development server.
            api_key: Optional API key sent in the `RhinoComputeKey` header.
                Leave empty for local debugging.
            timeout_s: Read timeout in seconds for a single evaluation.
            max_retries: Maximum number of attempts for transient failures.
        """
        self.base_url = url if url.endswith("/") else url + "/"
        self.api_key = api_key or None
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.session = requests.Session()
        if self.api_key:
            self.session.headers["RhinoComputeKey"] = self.api_key
        console_logger.debug(f"Compute client initialized for {self.base_url}")

    def evaluate_definition(self, request: EvaluationRequest) -> EvaluationResponse:
        """Evaluate a Grasshopper definition with the given input trees.

        Args:
            request: The definition and its ordered input trees.

        Returns:
            The parsed evaluation response. Errors and warnings reported by the
            definition itself are logged but do not raise.

        Raises:
            ServiceUnavailableError: If the server cannot be reached after
                max_retries, keeps failing with 5xx, or times out.
            ComputeRequestError: If the server rejects the request (4xx) or
                returns a body that is not a valid evaluation response.
        """
        url = f"{self.base_url}grasshopper"
        payload = request.to_dict()

        for attempt in range(self.max_retries):
            try:
                console_logger.debug(
                    f"Sending evaluation request (attempt {attempt + 1}) with "
                    f"{len(request.trees)} input trees"
                )
                http_response = self.session.post(
                    url, json=payload, timeout=(10, self.timeout_s)
                )
                http_response.raise_for_status()

                try:
                    body = http_response.json()
                except (json.JSONDecodeError, ValueError) as e:
                    raise ComputeRequestError(
                        f"Invalid JSON in compute response: {e}"
                    ) from e

                try:
                    response = EvaluationResponse.from_dict(body)
                except (ValueError, AttributeError) as e:
                    raise ComputeRequestError(
                        f"Malformed compute response: {e}"
                    ) from e

                for warning in response.warnings:
                    console_logger.warning(f"Definition warning: {warning}")
                for error in response.errors:
                    console_logger.error(f"Definition error: {error}")

                console_logger.debug(
                    f"Evaluation returned {len(response.outputs)} outputs"
                )
                return response

            except requests.exceptions.ConnectionError as e:
                if attempt < self.max_retries - 1:
                    console_logger.warning(
                        f"Connection failed, retrying... "
                        f"({attempt + 1}/{self.max_retries})"
                    )
                    time.sleep(min(2**attempt, 60))  # Exponential backoff with max 60s
                else:
                    console_logger.error("Compute server connection failed after retries")
                    raise ServiceUnavailableError(
                        f"Failed to connect to compute server at {self.base_url}"
                    ) from e

            except requests.exceptions.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else 0
                if status_code >= 500:
                    # Server error, might be temporary.
                    if attempt < self.max_retries - 1:
                        console_logger.warning(
                            f"Server error {status_code}, retrying... "
                            f"({attempt + 1}/{self.max_retries})"
                        )
                        time.sleep(2**attempt)
                        continue
                    console_logger.error(
                        f"Compute server kept failing with status {status_code}"
                    )
                    raise ServiceUnavailableError(
                        f"Compute server error {status_code} after "
                        f"{self.max_retries} attempts"
                    ) from e

                error_detail = e.response.text if e.response is not None else str(e)
                console_logger.error(f"HTTP error from compute server: {error_detail}")
                raise ComputeRequestError(
                    f"Compute server rejected request ({status_code}): {error_detail}"
                ) from e

            except requests.exceptions.Timeout as e:
                console_logger.error("Evaluation request timed out")
                raise ServiceUnavailableError("Evaluation request timed out") from e

        raise ServiceUnavailableError(
            f"Evaluation failed after {self.max_retries} attempts"
        )

    def health_check(self) -> bool:
        """Check if the compute server is healthy and responsive.

        Returns:
            True if server responds successfully to health check within
            5 seconds, False if server is unreachable, returns an error,
            or times out.
        """
        try:
            response = self.session.get(f"{self.base_url}healthcheck", timeout=5)
            response.raise_for_status()
            return True
        except requests.exceptions.RequestException as e:
            console_logger.warning(f"Health check failed: {e}")
            return False

    def load_definition(self, source: str | Path) -> bytes:
        """Load a Grasshopper definition once, from disk or over plain HTTP GET.

        Args:
            source: Local path or http(s) URL of the `.gh`/`.ghx` file.

        Returns:
            The raw definition bytes.

        Raises:
            FileNotFoundError: If a local path does not exist.
            ServiceUnavailableError: If a remote definition cannot be fetched.
        """
        source_str = str(source)
        if source_str.startswith(("http://", "https://")):
            try:
                response = self.session.get(source_str, timeout=(10, self.timeout_s))
                response.raise_for_status()
            except requests.exceptions.RequestException as e:
                raise ServiceUnavailableError(
                    f"Failed to fetch definition from {source_str}: {e}"
                ) from e
            definition = response.content
        else:
            path = Path(source)
            if not path.exists():
                raise FileNotFoundError(f"Definition file not found: {path}")
            definition = path.read_bytes()

        console_logger.info(f"Loaded definition {source_str} ({len(definition)} bytes)")
        return definition
