"""Compute server credentials: URL and API key resolution.

A value set directly in the configuration always wins (e.g. a hardcoded local
URL during development). Otherwise the value persisted in a small YAML
credentials file is used, and if that is missing too the user is prompted and
the answer is persisted for the next run.
"""

import getpass
import logging

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import yaml

from omegaconf import DictConfig

console_logger = logging.getLogger(__name__)

URL_KEY = "RHINO_COMPUTE_URL"
API_KEY_KEY = "RHINO_COMPUTE_KEY"


class CredentialStore:
    """Key/value credentials persisted as YAML."""

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            console_logger.warning(f"Ignoring malformed credentials file {self.path}")
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def get(self, key: str) -> str | None:
        return self.load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self.load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f)
        console_logger.debug(f"Persisted {key} to {self.path}")


def _default_prompt(key: str) -> str | None:
    if "URL" in key:
        return input("RhinoCompute Server URL: ") or None
    return getpass.getpass("RhinoCompute Server API Key: ") or None


def resolve_credential(
    key: str,
    configured: str | None,
    store: CredentialStore,
    prompt: Callable[[str], str | None] = _default_prompt,
) -> str | None:
    """Resolve one credential value.

    Args:
        key: Credential name, e.g. URL_KEY or API_KEY_KEY.
        configured: Value from the configuration. Used as-is when non-empty.
        store: Persisted credentials.
        prompt: Called with `key` when nothing is configured or persisted.
            A None/empty answer is not persisted.

    Returns:
        The resolved value, or None if the user gave no answer.
    """
    if configured:
        return configured

    stored = store.get(key)
    if stored is not None:
        return stored

    value = prompt(key)
    if value:
        store.set(key, value)
    return value


@dataclass
class ComputeConfig:
    """Connection settings for the compute service."""

    url: str
    """Base URL of the compute server."""

    api_key: str | None = None
    """API key, None for a local server."""

    timeout_s: float = 60
    """Read timeout of a single evaluation."""

    max_retries: int = 3
    """Attempts for transient failures."""

    @classmethod
    def from_config(
        cls,
        cfg: DictConfig,
        prompt: Callable[[str], str | None] = _default_prompt,
    ) -> "ComputeConfig":
        """Create config from the `compute` subtree, resolving credentials.

        The API key is only prompted for when the URL did not come from the
        configuration, since a hardcoded URL means a local debug server.

        Raises:
            ValueError: If no compute URL could be resolved.
        """
        store = CredentialStore(cfg.credentials_file)
        url = resolve_credential(URL_KEY, cfg.get("url"), store, prompt)
        if not url:
            raise ValueError("No compute server URL configured")

        if cfg.get("url"):
            api_key = cfg.get("api_key") or None
        else:
            api_key = resolve_credential(API_KEY_KEY, cfg.get("api_key"), store, prompt)

        return cls(
            url=url,
            api_key=api_key,
            timeout_s=cfg.get("timeout_s", 60),
            max_retries=cfg.get("max_retries", 3),
        )
