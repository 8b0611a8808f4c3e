"""Geometry decoding on top of the rhino3dm kernel binding."""

from .conversion import SceneGeometry, rhino_to_trimesh
from .decoding import try_decode
from .document import SceneDocument
from .kernel import GeometryKernel, RhinoGeometryKernel

__all__ = [
    "GeometryKernel",
    "RhinoGeometryKernel",
    "SceneDocument",
    "SceneGeometry",
    "rhino_to_trimesh",
    "try_decode",
]
