import json

import open3d as o3d
import pytest

from conftest import line_cloud, square_mesh
from surfpath.config import SynthesisCfg, resolve_blend_params
from surfpath.data import CloudType, DataCoordinator
from surfpath.io import library_to_dict, load_cloud, load_mesh, load_surface_dir, save_library
from surfpath.main import run
from surfpath.services import LinearProcessPlanner
from utils.config import Pose
from utils.error_tracker import SurfaceLoadError
from utils.io import load_poses, save_poses


def test_pose_file_round_trip(tmp_path):
    poses = [Pose(1.0, 2.0, 3.0), Pose(0.0, 0.0, 1.0, 0.0, 0.0, 1.0, 0.0)]
    path = save_poses(poses, tmp_path / "a" / "poses.json")
    assert load_poses(path) == poses
    assert load_poses(tmp_path / "missing.json") == []


def test_library_is_json_keyed_by_path_name(tmp_path):
    cfg = SynthesisCfg()
    plan = LinearProcessPlanner().plan_blend_process(
        [Pose(0, 0, 0), Pose(1, 0, 0)], resolve_blend_params(cfg.params, cfg)
    )
    lib = {"S_blend": plan, "S_scan": ("opaque", 1)}
    d = library_to_dict(lib)
    assert d["S_blend"]["kind"] == "blend"
    assert len(d["S_blend"]["poses"]) == 4

    out = save_library(lib, tmp_path / "debug" / "lib.json")
    loaded = json.loads(out.read_text())
    assert sorted(loaded) == ["S_blend", "S_scan"]
    assert loaded["S_blend"]["segments"][1]["label"] == "process"


def _write_surface(root, name, cloud=True):
    o3d.io.write_triangle_mesh(str(root / f"{name}_mesh.ply"), square_mesh(size=0.5))
    if cloud:
        pc = o3d.geometry.PointCloud(o3d.utility.Vector3dVector(line_cloud(15)))
        o3d.io.write_point_cloud(str(root / f"{name}_cloud.ply"), pc)


def test_load_surface_dir(tmp_path):
    _write_surface(tmp_path, "b")
    _write_surface(tmp_path, "a", cloud=False)
    data = load_surface_dir(tmp_path, DataCoordinator())
    assert data.get_selected_ids() == [0, 1]
    assert data.get_surface_name(0) == "a"
    assert data.get_cloud(CloudType.SURFACE, 0) is None
    assert len(data.get_cloud(CloudType.SURFACE, 1).points) == 15
    with pytest.raises(KeyError):
        data.get_surface_name(5)


def test_run_writes_library_and_paths(tmp_path):
    _write_surface(tmp_path, "plate", cloud=False)
    out = run(SynthesisCfg(input_root=str(tmp_path)))
    assert out == tmp_path / "debug" / "trajectory_library.json"
    lib = json.loads(out.read_text())
    assert sorted(lib) == ["plate_blend", "plate_scan"]
    assert (tmp_path / "debug" / "paths" / "plate_blend.json").exists()


def test_run_without_surfaces(tmp_path):
    assert run(SynthesisCfg(input_root=str(tmp_path))) is None


def test_missing_geometry_raises_load_error(tmp_path):
    with pytest.raises(SurfaceLoadError):
        load_mesh(tmp_path / "nothing_mesh.ply")
    with pytest.raises(SurfaceLoadError):
        load_cloud(tmp_path / "nothing_cloud.ply")
