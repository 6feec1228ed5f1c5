from utils.logger import Logger

# console only; keep test runs from writing .logs/
Logger.configure(level="WARNING", file_sink=False)

from typing import List, Optional  # noqa: E402

import numpy as np  # noqa: E402
import open3d as o3d  # noqa: E402
import pytest  # noqa: E402

from utils.config import Pose  # noqa: E402


def make_mesh(V, F) -> o3d.geometry.TriangleMesh:
    return o3d.geometry.TriangleMesh(
        o3d.utility.Vector3dVector(np.asarray(V, dtype=float)),
        o3d.utility.Vector3iVector(np.asarray(F, dtype=np.int32)),
    )


def square_mesh(z: float = 0.0, size: float = 1.0) -> o3d.geometry.TriangleMesh:
    V = [[0, 0, z], [size, 0, z], [size, size, z], [0, size, z]]
    return make_mesh(V, [[0, 1, 2], [0, 2, 3]])


def line_cloud(n: int = 15, step: float = 0.01) -> np.ndarray:
    return np.column_stack([np.arange(n) * step, np.zeros(n), np.zeros(n)])


class FakeBlendPlanner:
    """Returns ``n`` local poses along X, or None / raises when told to."""

    def __init__(self, n: int = 10, fail: bool = False, exc: Exception | None = None):
        self.n = n
        self.fail = fail
        self.exc = exc
        self.calls = []

    def plan_blend(self, boundaries, surface_pose, params) -> Optional[List[Pose]]:
        self.calls.append((list(boundaries), surface_pose, params))
        if self.exc is not None:
            raise self.exc
        if self.fail:
            return None
        return [Pose(0.1 * i, 0.05, 0.0, 0.0, 0.0, 0.3826834, 0.9238795) for i in range(self.n)]


class FakeProcessPlanner:
    """Records dispatch; plans are (kind, first pose z, params)."""

    def __init__(self):
        self.blend_calls = []
        self.scan_calls = []

    def plan_blend_process(self, poses, params):
        self.blend_calls.append((list(poses), params))
        return ("blend-plan", poses[0].z if poses else None, params)

    def plan_scan_process(self, poses, params):
        self.scan_calls.append((list(poses), params))
        return ("scan-plan", poses[0].z if poses else None, params)


def empty_profile(boundary, params):
    return np.zeros((0, 2))


def all_points(cloud, cfg):
    return np.arange(len(np.asarray(cloud)))


@pytest.fixture
def surface_pose() -> Pose:
    # 90 deg about Z, shifted
    return Pose(1.0, 2.0, 3.0, 0.0, 0.0, np.sqrt(0.5), np.sqrt(0.5))
