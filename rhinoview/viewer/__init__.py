"""Viewer components: scene graph, camera fitting, materialization and export.

Usage:
    from rhinoview.viewer import ViewerController

    controller = ViewerController.from_config(cfg, client, RhinoGeometryKernel())
    result = asyncio.run(controller.on_slider_change({"Height": 60}))
    controller.export("stl")
"""

from .camera import OrbitControls, PerspectiveCamera, fit_camera_to_nodes
from .config import OverlapPolicy, ViewerConfig
from .controller import ViewerController, ViewerState
from .export import export_3dm, export_filename, export_stl, save_export
from .materializer import MaterializeResult, ResultMaterializer
from .scene import BasicMaterial, Light, NormalMaterial, Scene, SceneNode, default_scene

__all__ = [
    "BasicMaterial",
    "Light",
    "MaterializeResult",
    "NormalMaterial",
    "OrbitControls",
    "OverlapPolicy",
    "PerspectiveCamera",
    "ResultMaterializer",
    "Scene",
    "SceneNode",
    "ViewerConfig",
    "ViewerController",
    "ViewerState",
    "default_scene",
    "export_3dm",
    "export_filename",
    "export_stl",
    "fit_camera_to_nodes",
    "save_export",
]
