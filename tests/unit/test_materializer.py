import asyncio
import json
import unittest

import numpy as np

from rhinoview.compute.parameters import ParameterCollector, ParameterSpec
from rhinoview.errors import NoGeometryDecodedError
from rhinoview.viewer.camera import OrbitControls, PerspectiveCamera
from rhinoview.viewer.materializer import ResultMaterializer
from rhinoview.viewer.scene import BasicMaterial, NormalMaterial, SceneNode, default_scene
from tests.unit.mock_utils import (
    FakeKernel,
    draco_item,
    make_response,
    object_item,
    string_item,
)


class TestResultMaterializer(unittest.TestCase):
    """Test materialization of responses into the scene."""

    def setUp(self):
        """Set up test fixtures."""
        self.kernel = FakeKernel()
        self.scene = default_scene()
        self.camera = PerspectiveCamera()
        self.controls = OrbitControls()
        self.materializer = ResultMaterializer(
            scene=self.scene,
            camera=self.camera,
            controls=self.controls,
            kernel=self.kernel,
        )

    def _geometry_nodes(self) -> list[SceneNode]:
        return [child for child in self.scene.children if not child.is_light]

    def test_single_draco_mesh_scenario(self):
        """Test sliders -> one Draco mesh -> one mesh node with the default material."""
        collector = ParameterCollector(
            [ParameterSpec("Height", 50), ParameterSpec("Radius", 10), ParameterSpec("Offset", 2)],
            definition=b"definition",
        )
        request = collector.build_request({"Height": 50, "Radius": 10, "Offset": 2})
        self.assertEqual(len(request.trees), 3)
        response = make_response({"{0}": [draco_item(2.0)]})

        result = asyncio.run(self.materializer.materialize(response))

        self.assertTrue(result.committed)
        self.assertEqual(result.object_count, 1)
        mesh_nodes = [node for node in self.scene.traverse() if node.is_mesh]
        self.assertEqual(len(mesh_nodes), 1)
        self.assertEqual(mesh_nodes[0].material, NormalMaterial(wireframe=False))
        self.assertEqual(len(self.scene.lights), 2)
        np.testing.assert_allclose(self.controls.target, [0.0, 0.0, 0.0], atol=1e-9)

    def test_empty_branch_reports_no_geometry(self):
        """Test an empty branch leaves the scene unchanged."""
        children_before = list(self.scene.children)
        position_before = self.camera.position.copy()

        with self.assertRaises(NoGeometryDecodedError):
            asyncio.run(self.materializer.materialize(make_response({"{0}": []})))

        self.assertEqual(self.scene.children, children_before)
        np.testing.assert_allclose(self.camera.position, position_before)
        self.assertEqual(self.kernel.written_documents, [])

    def test_plain_strings_keep_previous_result(self):
        """Test a response of plain strings keeps the previous geometry."""
        asyncio.run(self.materializer.materialize(make_response({"{0}": [draco_item()]})))
        children_before = list(self.scene.children)

        with self.assertRaises(NoGeometryDecodedError):
            asyncio.run(
                self.materializer.materialize(
                    make_response({"{0}": [string_item("hello"), string_item("world")]})
                )
            )

        self.assertEqual(self.scene.children, children_before)

    def test_two_outputs_both_materialized(self):
        """Test items from every output end up in the document and the scene."""
        response = make_response(
            {"{0}": [draco_item(1.0)]},
            {"{0}": [object_item("mesh", size=2.0, offset=[10, 0, 0])]},
        )

        result = asyncio.run(self.materializer.materialize(response))

        self.assertEqual(self.materializer.document.count, 2)
        self.assertEqual(result.object_count, 2)
        self.assertEqual(len(self.kernel.written_documents[0]), 2)
        self.assertEqual(len(json.loads(result.model)), 2)
        mesh_nodes = [node for node in self.scene.traverse() if node.is_mesh]
        self.assertEqual(len(mesh_nodes), 2)

    def test_duplicates_preserved_across_branches(self):
        """Test every branch is visited and duplicates are kept."""
        response = make_response(
            {"{1}": [draco_item(), draco_item()], "{0}": [string_item("x"), draco_item()]}
        )

        asyncio.run(self.materializer.materialize(response))

        self.assertEqual(self.materializer.document.count, 3)

    def test_replaces_previous_generation(self):
        """Test old geometry nodes are removed and lights persist."""
        asyncio.run(self.materializer.materialize(make_response({"{0}": [draco_item()]})))
        first_root = self._geometry_nodes()[0]

        asyncio.run(
            self.materializer.materialize(make_response({"{0}": [draco_item(3.0)]}))
        )

        geometry_nodes = self._geometry_nodes()
        self.assertEqual(len(geometry_nodes), 1)
        self.assertIsNot(geometry_nodes[0], first_root)
        self.assertEqual(len(self.scene.lights), 2)

    def test_previous_document_released(self):
        """Test only one document is live at a time."""
        asyncio.run(self.materializer.materialize(make_response({"{0}": [draco_item()]})))
        first_document = self.materializer.document

        asyncio.run(self.materializer.materialize(make_response({"{0}": [draco_item()]})))

        self.assertTrue(first_document.released)
        self.assertFalse(self.materializer.document.released)

    def test_non_mesh_nodes_keep_importer_material(self):
        """Test only mesh nodes get the default material."""
        response = make_response(
            {"{0}": [draco_item(), object_item("point", offset=[1, 1, 1])]}
        )

        result = asyncio.run(self.materializer.materialize(response))

        materials = {child.name: child.material for child in result.node.children}
        self.assertEqual(len(materials), 2)
        point_node = [child for child in result.node.children if not child.is_mesh][0]
        self.assertEqual(point_node.material, BasicMaterial())

    def test_geometry_without_display_conversion_skipped(self):
        """Test decoded objects the importer cannot display are skipped."""
        response = make_response({"{0}": [draco_item(), object_item("surface")]})

        result = asyncio.run(self.materializer.materialize(response))

        self.assertEqual(result.object_count, 2)
        self.assertEqual(len(result.node.children), 1)

    def test_wireframe_material(self):
        """Test the wireframe variant of the default material."""
        materializer = ResultMaterializer(
            scene=self.scene,
            camera=self.camera,
            controls=self.controls,
            kernel=self.kernel,
            wireframe=True,
        )

        result = asyncio.run(materializer.materialize(make_response({"{0}": [draco_item()]})))

        self.assertEqual(result.node.children[0].material, NormalMaterial(wireframe=True))

    def test_stale_result_dropped(self):
        """Test a result is dropped when should_commit returns False."""
        children_before = list(self.scene.children)

        result = asyncio.run(
            self.materializer.materialize(
                make_response({"{0}": [draco_item()]}), should_commit=lambda: False
            )
        )

        self.assertFalse(result.committed)
        self.assertIsNone(result.node)
        self.assertEqual(self.scene.children, children_before)


if __name__ == "__main__":
    unittest.main()
