"""Geometry kernel: decoding, serialization and conversion of Rhino geometry.

The materialization pipeline only talks to the `GeometryKernel` interface so
that it can run against a fake kernel in tests. `RhinoGeometryKernel` is the
production implementation on top of the rhino3dm bindings.
"""

import logging
import tempfile

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import rhino3dm

from .conversion import SceneGeometry, rhino_to_trimesh

console_logger = logging.getLogger(__name__)

FILE3DM_VERSION = 7
"""Archive version written for documents and 3dm exports."""


class GeometryKernel(ABC):
    """Interface to a geometry kernel binding."""

    @abstractmethod
    def decompress_draco(self, encoded: str) -> Any:
        """Decode a Draco-compressed base64 mesh string.

        Raises:
            Exception: Any kernel error if `encoded` is not a Draco mesh.
        """

    @abstractmethod
    def decode_common_object(self, data: dict) -> Any:
        """Decode a JSON-encoded kernel object.

        Raises:
            Exception: Any kernel error if `data` is not a kernel object.
        """

    @abstractmethod
    def write_document(self, objects: list[Any]) -> bytes:
        """Serialize geometry objects to a native model file buffer."""

    @abstractmethod
    def read_document(self, buffer: bytes) -> list[Any]:
        """Read geometry objects back from a native model file buffer."""

    @abstractmethod
    def to_scene_geometry(self, geometry: Any) -> SceneGeometry | None:
        """Convert kernel geometry to renderable geometry, None if unsupported."""


class RhinoGeometryKernel(GeometryKernel):
    """rhino3dm-backed geometry kernel."""

    def __init__(self, curve_segments: int = 64):
        """
        Args:
            curve_segments: Number of polyline segments used to display curves.
        """
        self.curve_segments = curve_segments

    def decompress_draco(self, encoded: str) -> Any:
        if not isinstance(encoded, str):
            raise TypeError(f"Expected a base64 string, got {type(encoded).__name__}")
        return rhino3dm.DracoCompression.DecompressBase64String(encoded)

    def decode_common_object(self, data: dict) -> Any:
        return rhino3dm.CommonObject.Decode(data)

    def write_document(self, objects: list[Any]) -> bytes:
        model = rhino3dm.File3dm()
        for geometry in objects:
            model.Objects.Add(geometry, rhino3dm.ObjectAttributes())

        # rhino3dm only writes to paths.
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "document.3dm"
            if not model.Write(str(path), FILE3DM_VERSION):
                raise RuntimeError("Failed to serialize document to 3dm")
            return path.read_bytes()

    def read_document(self, buffer: bytes) -> list[Any]:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "document.3dm"
            path.write_bytes(buffer)
            model = rhino3dm.File3dm.Read(str(path))
        if model is None:
            raise ValueError("Buffer is not a readable 3dm model")
        return [model.Objects[i].Geometry for i in range(len(model.Objects))]

    def to_scene_geometry(self, geometry: Any) -> SceneGeometry | None:
        result = rhino_to_trimesh(geometry, curve_segments=self.curve_segments)
        if result is None:
            console_logger.debug(
                f"No display conversion for {type(geometry).__name__}, skipping"
            )
        return result
