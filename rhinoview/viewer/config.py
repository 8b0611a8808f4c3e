"""Configuration for the viewer."""

import logging

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from omegaconf import DictConfig

console_logger = logging.getLogger(__name__)


class OverlapPolicy(str, Enum):
    """What happens when a new evaluation starts while one is in flight."""

    LATEST_WINS = "latest_wins"
    """Cancel the in-flight evaluation; only the newest result is shown."""

    SERIALIZE = "serialize"
    """Queue evaluations and apply every result in trigger order."""


@dataclass
class ViewerConfig:
    """Configuration for materialization, camera fitting and export."""

    fov: float = 45.0
    """Vertical camera field of view in degrees."""

    wireframe: bool = False
    """Draw meshes with the wireframe variant of the default material."""

    fit_offset: float = 1.1
    """Margin multiplier used when zooming to extents."""

    min_extent: float = 1.0
    """Framing extent used for point-sized results."""

    overlap_policy: OverlapPolicy = OverlapPolicy.LATEST_WINS
    """Handling of overlapping evaluations."""

    curve_segments: int = 64
    """Polyline segments used to display curves."""

    export_dir: Path = Path("exports")
    """Directory exports are written to."""

    def __post_init__(self) -> None:
        """Validate configuration and convert types."""
        self.overlap_policy = OverlapPolicy(self.overlap_policy)
        self.export_dir = Path(self.export_dir)
        if not 0 < self.fov < 180:
            raise ValueError(f"fov must be in (0, 180) degrees, got {self.fov}")
        if self.fit_offset <= 0:
            raise ValueError(f"fit_offset must be positive, got {self.fit_offset}")
        if self.min_extent <= 0:
            raise ValueError(f"min_extent must be positive, got {self.min_extent}")

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "ViewerConfig":
        """Create config from Hydra/OmegaConf structure.

        Args:
            cfg: Viewer config subtree (cfg.viewer).

        Returns:
            ViewerConfig instance.
        """
        return cls(
            fov=cfg.get("fov", 45.0),
            wireframe=cfg.get("wireframe", False),
            fit_offset=cfg.get("fit_offset", 1.1),
            min_extent=cfg.get("min_extent", 1.0),
            overlap_policy=cfg.get("overlap_policy", "latest_wins"),
            curve_segments=cfg.get("curve_segments", 64),
            export_dir=Path(cfg.get("export_dir", "exports")),
        )
