# surfpath/builders.py
"""Blend / edge / scan pose sequences for one surface."""
from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from utils.config import Pose
from utils.logger import Logger

from .config import PathPlanningParams, ScanRampCfg
from .segmentation import SegmentationResult
from .services import BlendPathPlanner, BoundaryTrajectoryFn, ScanProfileFn
from .transforms import matrices_to_poses, override_orientation, points_to_world, poses_to_world

LOG = Logger.get_logger("build")

# trailing trajectory points dropped from every edge path (velocity spikes)
EDGE_TRIM = 2


class BlendPathBuilder:
    """Ask the blend planner for a local path, then move it into the world."""

    def __init__(self, planner: BlendPathPlanner) -> None:
        self.planner = planner

    def build(
        self,
        boundaries: Sequence[np.ndarray],
        surface_pose: Pose,
        params: PathPlanningParams,
    ) -> Optional[List[Pose]]:
        local = self.planner.plan_blend(boundaries, Pose.identity(), params)
        if local is None:
            return None
        poses = poses_to_world(surface_pose, local)
        LOG.info(f"blend path: {len(poses)} poses")
        return poses


class EdgePathBuilder:
    """One boundary chain -> poses along it, oriented like the surface."""

    def __init__(self, trajectory: BoundaryTrajectoryFn) -> None:
        self.trajectory = trajectory

    def build(
        self,
        seg: SegmentationResult,
        index: int,
        surface_pose: Pose,
    ) -> Optional[List[Pose]]:
        raw = self.trajectory(seg, index)
        if len(raw) <= EDGE_TRIM:
            LOG.warning(f"edge #{index}: trajectory too short ({len(raw)} pts)")
            return None
        poses = matrices_to_poses(raw[:-EDGE_TRIM])
        return override_orientation(poses, surface_pose)


class ScanPathBuilder:
    """Profilometer raster over the first boundary plus standoff ramps."""

    def __init__(self, profile: ScanProfileFn, ramp: ScanRampCfg | None = None) -> None:
        self.profile = profile
        self.ramp = ramp or ScanRampCfg()

    def build(
        self,
        boundaries: Sequence[np.ndarray],
        surface_pose: Pose,
        params: PathPlanningParams,
    ) -> Optional[List[Pose]]:
        if len(boundaries) == 0:
            LOG.warning("scan path: no boundaries")
            return None
        pts = np.asarray(self.profile(boundaries[0], params), dtype=float)
        if pts.size == 0:
            LOG.warning("scan path: empty scan profile")
            return None
        path = points_to_world(surface_pose, pts)
        return add_standoff_ramps(path, self.ramp.step_count, self.ramp.step_distance)


def add_standoff_ramps(path: List[Pose], count: int, step: float) -> List[Pose]:
    """
    ``count`` approach poses before the first pose and ``count`` departure
    poses after the last, offset along world Z by i*step (i = 0..count-1),
    distance from the surface growing away from the path.
    """
    if not path:
        return []
    start, end = path[0], path[-1]
    approach = [start.translated(dz=i * step) for i in range(count)]
    departure = [end.translated(dz=i * step) for i in range(count)]
    return approach[::-1] + list(path) + departure
