"""Import of a serialized scene document into scene nodes."""

import asyncio
import logging

from rhinoview.geometry.kernel import GeometryKernel

from .scene import BasicMaterial, SceneNode

console_logger = logging.getLogger(__name__)


def import_document(buffer: bytes, kernel: GeometryKernel) -> SceneNode:
    """Read a native model buffer into a group node with one child per object.

    Objects without a display conversion are skipped.

    Args:
        buffer: Model file contents, as produced by SceneDocument.to_bytes().
        kernel: Kernel used to read and convert the objects.

    Returns:
        Root node of the imported graph.
    """
    root = SceneNode(name="document")
    for index, geometry in enumerate(kernel.read_document(buffer)):
        scene_geometry = kernel.to_scene_geometry(geometry)
        if scene_geometry is None:
            continue
        root.add(
            SceneNode(
                name=f"{type(geometry).__name__}_{index}",
                geometry=scene_geometry,
                material=BasicMaterial(),
            )
        )

    console_logger.debug(f"Imported {len(root.children)} nodes from document")
    return root


async def import_document_async(buffer: bytes, kernel: GeometryKernel) -> SceneNode:
    """Run import_document off the event loop."""
    return await asyncio.to_thread(import_document, buffer, kernel)
