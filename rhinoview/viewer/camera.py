import logging
import math

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from .scene import SceneNode

console_logger = logging.getLogger(__name__)


@dataclass
class PerspectiveCamera:
    """Perspective camera with a vertical field of view in degrees."""

    fov: float = 45.0
    aspect: float = 1.0
    near: float = 1.0
    far: float = 1000.0
    position: np.ndarray = field(
        default_factory=lambda: np.array([200.0, 200.0, 200.0])
    )


@dataclass
class OrbitControls:
    """Orbit controls state: the point the camera orbits around."""

    target: np.ndarray = field(default_factory=lambda: np.zeros(3))
    max_distance: float = math.inf


def nodes_bounds(nodes: Iterable[SceneNode]) -> np.ndarray | None:
    """Axis-aligned bounds (2, 3) of all non-light nodes, None if empty."""
    corners = []
    for node in nodes:
        if node.is_light:
            continue
        node_bounds = node.bounds()
        if node_bounds is not None:
            corners.append(node_bounds)
    if not corners:
        return None
    stacked = np.vstack(corners)
    return np.array([stacked.min(axis=0), stacked.max(axis=0)])


def fit_distance(
    max_extent: float, fov: float, aspect: float, fit_offset: float = 1.1
) -> float:
    """Camera distance that frames an object of the given extent.

    Args:
        max_extent: Largest side of the bounding box.
        fov: Vertical field of view in degrees.
        aspect: Viewport width / height.
        fit_offset: Margin multiplier.

    Returns:
        Distance from the box center to the camera.
    """
    fit_height_distance = max_extent / (2 * math.tan(math.pi * fov / 360))
    fit_width_distance = fit_height_distance / aspect
    return fit_offset * max(fit_height_distance, fit_width_distance)


def fit_camera_to_nodes(
    camera: PerspectiveCamera,
    controls: OrbitControls,
    nodes: Iterable[SceneNode],
    fit_offset: float = 1.1,
    min_extent: float = 1.0,
) -> bool:
    """Zoom the camera to the extents of the given nodes.

    The camera keeps its current viewing direction and is moved so the
    bounding box of all non-light nodes fills the view. Near/far planes and the
    orbit limit scale with the new distance.

    Args:
        camera: Camera to reposition.
        controls: Orbit controls whose target becomes the box center.
        nodes: Candidate nodes; lights are ignored.
        fit_offset: Margin multiplier applied to the fitting distance.
        min_extent: Extent used instead of a zero-size box so that point-sized
            content still gets a finite, non-zero distance.

    Returns:
        True if the camera was moved, False if there was nothing to frame.
    """
    bounds = nodes_bounds(nodes)
    if bounds is None:
        console_logger.debug("Nothing to frame, keeping camera state")
        return False

    size = bounds[1] - bounds[0]
    center = (bounds[0] + bounds[1]) / 2
    max_extent = float(size.max())
    if max_extent <= 0:
        max_extent = min_extent

    distance = fit_distance(max_extent, camera.fov, camera.aspect, fit_offset)

    direction = np.asarray(controls.target, dtype=np.float64) - np.asarray(
        camera.position, dtype=np.float64
    )
    norm = np.linalg.norm(direction)
    if norm == 0:
        direction = -np.ones(3)
        norm = np.linalg.norm(direction)
    direction = direction / norm * distance

    controls.max_distance = distance * 10
    controls.target = center

    camera.near = distance / 100
    camera.far = distance * 100
    camera.position = center - direction

    console_logger.debug(
        f"Framed box of extent {max_extent:.3f} at distance {distance:.3f}"
    )
    return True
