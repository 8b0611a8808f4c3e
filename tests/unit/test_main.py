import shutil
import tempfile
import unittest

from pathlib import Path
from unittest.mock import MagicMock, patch

from omegaconf import OmegaConf

from main import run_view
from rhinoview.compute.parameters import ParameterCollector, ParameterSpec
from rhinoview.viewer.camera import OrbitControls, PerspectiveCamera
from rhinoview.viewer.controller import ViewerController, ViewerState
from rhinoview.viewer.materializer import ResultMaterializer
from rhinoview.viewer.scene import default_scene
from tests.unit.mock_utils import FakeKernel, make_response, object_item, string_item


class TestRunView(unittest.TestCase):
    """Test the view task end to end with a mocked compute client."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.client = MagicMock()
        scene = default_scene()
        camera = PerspectiveCamera()
        controls = OrbitControls()
        self.controller = ViewerController(
            state=ViewerState(scene=scene, camera=camera, controls=controls),
            client=self.client,
            collector=ParameterCollector(
                [ParameterSpec("Height", 50), ParameterSpec("Radius", 10)],
                definition=b"definition",
            ),
            materializer=ResultMaterializer(
                scene=scene, camera=camera, controls=controls, kernel=FakeKernel()
            ),
            export_dir=self.temp_dir,
        )
        self.cfg = OmegaConf.create(
            {
                "slider_steps": [{}, {"Height": 0}],
                "viewer": {"curve_segments": 64, "export_formats": ["stl", "3dm"]},
            }
        )

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_no_mesh_result_exports_what_it_can(self):
        """Test a points-only result followed by an empty step still finishes the
        run and writes the 3dm export."""
        self.client.evaluate_definition.side_effect = [
            make_response({"{0}": [object_item("point", offset=[1, 1, 1])]}),
            make_response({"{0}": [string_item("nothing here")]}),
        ]

        with patch("main.ViewerController.from_config", return_value=self.controller):
            run_view(self.cfg, self.client)

        self.assertEqual(self.client.evaluate_definition.call_count, 2)
        self.assertEqual(
            sorted(path.suffix for path in self.temp_dir.iterdir()), [".3dm"]
        )

    def test_no_export_without_result(self):
        """Test nothing is exported when no step produced a result."""
        self.client.evaluate_definition.return_value = make_response(
            {"{0}": [string_item("nothing here")]}
        )

        with patch("main.ViewerController.from_config", return_value=self.controller):
            run_view(self.cfg, self.client)

        self.assertEqual(list(self.temp_dir.iterdir()), [])


if __name__ == "__main__":
    unittest.main()
