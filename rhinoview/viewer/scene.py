"""Scene graph: nodes, lights and materials."""

import logging

from dataclasses import dataclass, field
from typing import Iterator

import numpy as np
import trimesh

from rhinoview.geometry.conversion import SceneGeometry

console_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BasicMaterial:
    """Flat colored material assigned by the document importer."""

    color: tuple[float, float, float] = (0.8, 0.8, 0.8)
    """RGB color in [0, 1]."""


@dataclass(frozen=True)
class NormalMaterial:
    """Material that shades faces by their normal direction."""

    wireframe: bool = False
    """Draw triangle edges only."""


Material = BasicMaterial | NormalMaterial


@dataclass(eq=False)
class SceneNode:
    """A node of the render graph, optionally carrying geometry."""

    name: str = ""
    geometry: SceneGeometry | None = None
    material: Material | None = None
    children: list["SceneNode"] = field(default_factory=list)

    @property
    def is_mesh(self) -> bool:
        return isinstance(self.geometry, trimesh.Trimesh)

    @property
    def is_light(self) -> bool:
        return False

    def add(self, node: "SceneNode") -> None:
        self.children.append(node)

    def traverse(self) -> Iterator["SceneNode"]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.traverse()

    def bounds(self) -> np.ndarray | None:
        """Axis-aligned bounds (2, 3) of this subtree, None if it has no geometry."""
        corners = []
        for node in self.traverse():
            if node.is_light or node.geometry is None:
                continue
            node_bounds = node.geometry.bounds
            if node_bounds is None:
                continue
            corners.append(np.asarray(node_bounds, dtype=np.float64))
        if not corners:
            return None
        stacked = np.vstack(corners)
        return np.array([stacked.min(axis=0), stacked.max(axis=0)])


@dataclass(eq=False)
class Light(SceneNode):
    """A light source. Lights carry no geometry and persist across results."""

    kind: str = "ambient"
    """Either "ambient" or "directional"."""

    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    intensity: float = 1.0

    @property
    def is_light(self) -> bool:
        return True


class Scene:
    """The persistent render graph.

    Only the top-level children are managed here; nested nodes belong to
    their parents.
    """

    def __init__(self, background: tuple[float, float, float] = (1.0, 1.0, 1.0)):
        self.background = background
        self.children: list[SceneNode] = []

    def add(self, node: SceneNode) -> None:
        self.children.append(node)

    def remove(self, node: SceneNode) -> None:
        self.children.remove(node)

    def traverse(self) -> Iterator[SceneNode]:
        for child in self.children:
            yield from child.traverse()

    @property
    def lights(self) -> list[Light]:
        return [child for child in self.children if child.is_light]

    def remove_non_lights(self) -> int:
        """Remove every top-level node that is not a light.

        Returns:
            Number of removed nodes.
        """
        kept = [child for child in self.children if child.is_light]
        removed = len(self.children) - len(kept)
        self.children = kept
        return removed

    def meshes(self) -> list[trimesh.Trimesh]:
        """All triangle meshes in the scene, depth first."""
        return [node.geometry for node in self.traverse() if node.is_mesh]


def default_scene() -> Scene:
    """A white scene lit by one directional and one ambient light."""
    scene = Scene()
    scene.add(Light(name="directional", kind="directional", intensity=2.0))
    scene.add(Light(name="ambient", kind="ambient"))
    return scene
