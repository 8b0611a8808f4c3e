"""Materialization of evaluation responses into the scene.

The materializer walks every output -> branch -> item of a response, decodes
what it can into a fresh SceneDocument, imports the document as a node graph,
and swaps that graph in for the previous result. Lights and the camera model
are left alone apart from the final zoom to extents.
"""

import logging

from dataclasses import dataclass
from typing import Callable

from rhinoview.compute.dataclasses import EvaluationResponse
from rhinoview.errors import NoGeometryDecodedError
from rhinoview.geometry.decoding import try_decode
from rhinoview.geometry.document import SceneDocument
from rhinoview.geometry.kernel import GeometryKernel

from .camera import OrbitControls, PerspectiveCamera, fit_camera_to_nodes
from .importer import import_document_async
from .scene import NormalMaterial, Scene, SceneNode

console_logger = logging.getLogger(__name__)


@dataclass
class MaterializeResult:
    """Outcome of one materialization pass."""

    object_count: int
    """Geometry objects owned by the pass's document."""

    node: SceneNode | None
    """Root of the imported node graph, None if the result was dropped."""

    committed: bool
    """Whether the scene was replaced."""

    model: bytes | None = None
    """Serialized document the node graph was imported from. This is what a 3dm
    export of the shown result writes, independent of later passes."""


class ResultMaterializer:
    """Turns evaluation responses into scene contents.

    Exactly one SceneDocument is live at a time: the previous pass's document
    is released before a new one is created.
    """

    def __init__(
        self,
        scene: Scene,
        camera: PerspectiveCamera,
        controls: OrbitControls,
        kernel: GeometryKernel,
        wireframe: bool = False,
        fit_offset: float = 1.1,
        min_extent: float = 1.0,
    ):
        """
        Args:
            scene: Scene whose non-light nodes are replaced on every pass.
            camera: Camera to zoom to the new contents.
            controls: Orbit controls updated with the camera.
            kernel: Geometry kernel used to decode, serialize and import.
            wireframe: Material override draws edges only.
            fit_offset: Margin multiplier for the camera fit.
            min_extent: Framing extent used for point-sized contents.
        """
        self.scene = scene
        self.camera = camera
        self.controls = controls
        self.kernel = kernel
        self.default_material = NormalMaterial(wireframe=wireframe)
        self.fit_offset = fit_offset
        self.min_extent = min_extent
        self._document: SceneDocument | None = None

    @property
    def document(self) -> SceneDocument | None:
        """The live document of the latest pass."""
        return self._document

    def collect(self, response: EvaluationResponse) -> SceneDocument:
        """Decode every item of the response into a new live document.

        Raises:
            NoGeometryDecodedError: If no item decoded to geometry.
        """
        if self._document is not None:
            self._document.release()
        self._document = SceneDocument(self.kernel)

        # For each output, iterate through its data tree in the order sent.
        for output in response.outputs:
            for branch in output.inner_tree.values():
                for item in branch:
                    geometry = try_decode(item, self.kernel)
                    if geometry is not None:
                        self._document.add(geometry)

        if self._document.count < 1:
            console_logger.error("No rhino objects to load!")
            raise NoGeometryDecodedError(
                f"No geometry decoded from {len(response.outputs)} outputs"
            )

        console_logger.info(f"Decoded {self._document.count} geometry objects")
        return self._document

    def apply_default_material(self, root: SceneNode) -> None:
        """Replace the material of every mesh node with the default material."""
        for node in root.traverse():
            if node.is_mesh:
                node.material = self.default_material

    def commit(self, root: SceneNode) -> None:
        """Swap the imported graph into the scene and zoom to extents."""
        removed = self.scene.remove_non_lights()
        self.scene.add(root)
        console_logger.debug(f"Replaced {removed} scene nodes")
        fit_camera_to_nodes(
            self.camera,
            self.controls,
            self.scene.children,
            fit_offset=self.fit_offset,
            min_extent=self.min_extent,
        )

    async def materialize(
        self,
        response: EvaluationResponse,
        should_commit: Callable[[], bool] | None = None,
    ) -> MaterializeResult:
        """Replace the scene contents with the geometry of a response.

        Args:
            response: The evaluation response.
            should_commit: Checked after the asynchronous import. Returning
                False drops the imported graph and leaves the scene untouched.

        Returns:
            The outcome of the pass.

        Raises:
            NoGeometryDecodedError: If the response held no decodable geometry.
                The scene and camera are unchanged.
        """
        document = self.collect(response)
        object_count = document.count
        buffer = document.to_bytes()

        root = await import_document_async(buffer, self.kernel)
        self.apply_default_material(root)

        if should_commit is not None and not should_commit():
            console_logger.info("Dropping stale result")
            return MaterializeResult(object_count=object_count, node=None, committed=False)

        self.commit(root)
        return MaterializeResult(
            object_count=object_count, node=root, committed=True, model=buffer
        )
