"""Ephemeral document holding the geometry decoded from one response."""

import logging

from typing import Any

from rhinoview.errors import DocumentReleasedError

from .kernel import GeometryKernel

console_logger = logging.getLogger(__name__)


class SceneDocument:
    """Owns the decoded geometry of a single materialization pass.

    The document is append-only and keeps duplicates. Once released, every
    operation raises DocumentReleasedError.
    """

    def __init__(self, kernel: GeometryKernel):
        self._kernel = kernel
        self._objects: list[Any] = []
        self._released = False

    def _check_live(self) -> None:
        if self._released:
            raise DocumentReleasedError("Scene document has been released")

    @property
    def released(self) -> bool:
        return self._released

    @property
    def count(self) -> int:
        self._check_live()
        return len(self._objects)

    @property
    def objects(self) -> list[Any]:
        """A copy of the owned geometry, in insertion order."""
        self._check_live()
        return list(self._objects)

    def add(self, geometry: Any) -> None:
        self._check_live()
        self._objects.append(geometry)

    def to_bytes(self) -> bytes:
        """Serialize the owned geometry to a native model buffer."""
        self._check_live()
        return self._kernel.write_document(self._objects)

    def release(self) -> None:
        """Drop ownership of all geometry. Releasing twice is a no-op."""
        if self._released:
            return
        console_logger.debug(f"Releasing scene document with {len(self._objects)} objects")
        self._objects.clear()
        self._released = True
