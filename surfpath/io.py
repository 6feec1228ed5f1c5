"""I/O helpers for surface meshes, clouds, and trajectory libraries."""
from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, List

import open3d as o3d

from utils.error_tracker import SurfaceLoadError
from utils.io import save_poses
from utils.logger import Logger

from .config import CLOUD_SUFFIX, MESH_SUFFIX
from .data import DataCoordinator
from .paths import ProcessPathResult, TrajectoryLibrary

LOG = Logger.get_logger("sp.io")


def load_mesh(path: Path) -> o3d.geometry.TriangleMesh:
    """Load a triangle mesh from PLY."""
    mesh = o3d.io.read_triangle_mesh(str(path))
    if len(mesh.triangles) == 0:
        raise SurfaceLoadError(f"empty mesh at {path}")
    LOG.info(f"loaded mesh: {path} ({len(mesh.vertices)}V {len(mesh.triangles)}T)")
    return mesh


def load_cloud(path: Path) -> o3d.geometry.PointCloud:
    """Load a point cloud from PLY."""
    pc = o3d.io.read_point_cloud(str(path))
    if len(pc.points) == 0:
        raise SurfaceLoadError(f"empty cloud at {path}")
    LOG.info(f"loaded cloud: {path} ({len(pc.points)} pts)")
    return pc


def load_surface_dir(root: Path, data: DataCoordinator | None = None) -> DataCoordinator:
    """
    Register every ``<name>_mesh.ply`` under ``root`` (ids in name order),
    with ``<name>_cloud.ply`` as its surface cloud when present.
    """
    data = data or DataCoordinator()
    meshes = sorted(root.glob(f"*{MESH_SUFFIX}"))
    if not meshes:
        LOG.warning(f"no *{MESH_SUFFIX} files under {root}")
    for i, mp in enumerate(meshes):
        name = mp.name[: -len(MESH_SUFFIX)]
        cp = root / f"{name}{CLOUD_SUFFIX}"
        cloud = load_cloud(cp) if cp.exists() else None
        data.add_surface(i, name, load_mesh(mp), cloud)
    return data


def _jsonable(obj: Any) -> Any:
    if is_dataclass(obj):
        return asdict(obj)
    if isinstance(obj, (dict, list, str, int, float, bool)) or obj is None:
        return obj
    return repr(obj)


def library_to_dict(library: TrajectoryLibrary) -> Dict[str, Any]:
    return {name: _jsonable(plan) for name, plan in library.items()}


def save_library(library: TrajectoryLibrary, path: Path) -> Path:
    """Write the library as JSON keyed by path name."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(library_to_dict(library), indent=2))
    LOG.info(f"saved trajectory library ({len(library)} plans) to {path}")
    return path


def save_paths(results: List[ProcessPathResult], out_dir: Path) -> List[Path]:
    """One pose JSON per generated path, named after the path."""
    written = []
    for res in results:
        for path in res.paths:
            written.append(save_poses(path.poses, out_dir / f"{path.name}.json"))
    return written
