"""Export of the current result as ASCII STL or native 3dm."""

import logging

from datetime import datetime
from pathlib import Path

import trimesh

from .scene import Scene

console_logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("stl", "3dm")


def export_filename(extension: str, now: datetime | None = None) -> str:
    """Timestamped export filename, e.g. rhinoFile_2024-05-01_13-45-10.stl."""
    now = now or datetime.now()
    return f"rhinoFile_{now.strftime('%Y-%m-%d_%H-%M-%S')}.{extension}"


def export_stl(scene: Scene) -> str:
    """Export every mesh node of the scene as one ASCII STL solid.

    Raises:
        ValueError: If the scene holds no triangle meshes.
    """
    meshes = [mesh for mesh in scene.meshes() if len(mesh.faces) > 0]
    if not meshes:
        raise ValueError("Scene has no mesh geometry to export")
    combined = meshes[0] if len(meshes) == 1 else trimesh.util.concatenate(meshes)
    return combined.export(file_type="stl_ascii")


def export_3dm(model: bytes | None) -> bytes:
    """Export the shown result as a 3dm model.

    Args:
        model: Serialized document of the committed result, see
            MaterializeResult.model.

    Raises:
        ValueError: If no result has been shown.
    """
    if not model:
        raise ValueError("No shown result to export as 3dm")
    return model


def save_export(
    fmt: str,
    scene: Scene,
    model: bytes | None,
    output_dir: Path,
    filename: str | None = None,
) -> Path:
    """Export the current result and write it to `output_dir`.

    Args:
        fmt: Either "stl" or "3dm".
        scene: Scene used for STL export.
        model: Serialized document of the shown result, used for 3dm export.
        output_dir: Directory to write to. Created if missing.
        filename: Output filename, defaults to a timestamped name.

    Returns:
        Path of the written file.

    Raises:
        ValueError: If the format is unknown or there is nothing to export in it.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format: {fmt}")

    if fmt == "stl":
        contents = export_stl(scene).encode("utf-8")
    else:
        contents = export_3dm(model)

    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / (filename or export_filename(fmt))
    path.write_bytes(contents)

    console_logger.info(f"Exported {fmt} to {path}")
    return path
