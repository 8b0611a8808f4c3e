"""Conversion of rhino3dm geometry to trimesh display geometry."""

import logging

from typing import Any, Union

import numpy as np
import rhino3dm
import trimesh
import trimesh.path

console_logger = logging.getLogger(__name__)

SceneGeometry = Union[trimesh.Trimesh, trimesh.PointCloud, trimesh.path.Path3D]


def mesh_to_trimesh(mesh: "rhino3dm.Mesh") -> trimesh.Trimesh | None:
    """Convert a rhino3dm mesh to a triangle mesh.

    Quads are split along their 0-2 diagonal. The input mesh is not modified.

    Returns:
        The triangle mesh, or None if the mesh has no faces.
    """
    vertex_count = len(mesh.Vertices)
    face_count = len(mesh.Faces)
    if vertex_count == 0 or face_count == 0:
        return None

    vertices = np.empty((vertex_count, 3), dtype=np.float64)
    for i in range(vertex_count):
        vertex = mesh.Vertices[i]
        vertices[i] = (vertex.X, vertex.Y, vertex.Z)

    faces = []
    for i in range(face_count):
        a, b, c, d = mesh.Faces[i]
        faces.append((a, b, c))
        if c != d:
            faces.append((a, c, d))

    return trimesh.Trimesh(vertices=vertices, faces=np.array(faces), process=False)


def _join_meshes(meshes: list["rhino3dm.Mesh | None"]) -> trimesh.Trimesh | None:
    parts = [mesh_to_trimesh(mesh) for mesh in meshes if mesh is not None]
    parts = [part for part in parts if part is not None]
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    return trimesh.util.concatenate(parts)


def brep_to_trimesh(brep: "rhino3dm.Brep") -> trimesh.Trimesh | None:
    """Join the render meshes cached on the faces of a brep.

    Breps decoded from compute output carry render meshes only when the
    definition produced them; without them there is nothing to display.
    """
    meshes = [
        brep.Faces[i].GetMesh(rhino3dm.MeshType.Any) for i in range(len(brep.Faces))
    ]
    result = _join_meshes(meshes)
    if result is None:
        console_logger.warning("Brep has no render meshes, cannot display it")
    return result


def curve_to_path(curve: "rhino3dm.Curve", segments: int = 64) -> trimesh.path.Path3D:
    """Sample a curve into an open or closed 3D polyline path."""
    domain = curve.Domain
    parameters = np.linspace(domain.T0, domain.T1, max(segments, 1) + 1)
    points = np.array(
        [(p.X, p.Y, p.Z) for p in (curve.PointAt(float(t)) for t in parameters)]
    )
    return trimesh.load_path(points)


def rhino_to_trimesh(geometry: Any, curve_segments: int = 64) -> SceneGeometry | None:
    """Convert decoded rhino3dm geometry to display geometry.

    Args:
        geometry: A rhino3dm geometry object.
        curve_segments: Polyline segments used to sample curves.

    Returns:
        A Trimesh for meshes/breps/extrusions, a PointCloud for points, a Path3D
        for curves, or None for unsupported types.
    """
    if isinstance(geometry, rhino3dm.Mesh):
        return mesh_to_trimesh(geometry)

    if isinstance(geometry, rhino3dm.Brep):
        return brep_to_trimesh(geometry)

    if isinstance(geometry, rhino3dm.Extrusion):
        return _join_meshes([geometry.GetMesh(rhino3dm.MeshType.Any)])

    if isinstance(geometry, rhino3dm.Point):
        location = geometry.Location
        return trimesh.PointCloud([(location.X, location.Y, location.Z)])

    if isinstance(geometry, rhino3dm.PointCloud):
        points = [(p.X, p.Y, p.Z) for p in geometry.GetPoints()]
        if not points:
            return None
        return trimesh.PointCloud(points)

    if isinstance(geometry, rhino3dm.Curve):
        return curve_to_path(geometry, segments=curve_segments)

    return None
