# surfpath/services.py
"""
External collaborators of the pipeline, as capability interfaces, plus the
local implementations used when no remote planner is wired in.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence

import numpy as np

from utils.config import Pose
from utils.logger import Logger

from .classify import PathType
from .config import BlendPlanParams, PathPlanningParams, ScanPlanParams
from .profile import blend_raster, scan_profile
from .segmentation import SegmentationResult, boundary_trajectory, detect_boundary_points
from .transforms import points_to_world

LOG = Logger.get_logger("services")


# ============================== INTERFACES ===================================


class BlendPathPlanner(Protocol):
    def plan_blend(
        self,
        boundaries: Sequence[np.ndarray],
        surface_pose: Pose,
        params: PathPlanningParams,
    ) -> Optional[List[Pose]]:
        """Poses in the frame of ``surface_pose``; None on failure."""
        ...


class ProcessPlanner(Protocol):
    def plan_blend_process(
        self, poses: Sequence[Pose], params: BlendPlanParams
    ) -> Optional["ProcessPlan"]:
        ...

    def plan_scan_process(
        self, poses: Sequence[Pose], params: ScanPlanParams
    ) -> Optional["ProcessPlan"]:
        ...


ScanProfileFn = Callable[[np.ndarray, PathPlanningParams], np.ndarray]
BoundaryTrajectoryFn = Callable[[SegmentationResult, int], List[np.ndarray]]
BoundaryDetectorFn = Callable[..., np.ndarray]


# ============================== PLANS ========================================


@dataclass(frozen=True)
class PlanSegment:
    label: str  # "approach" | "process" | "retract"
    start: int  # index into ProcessPlan.poses
    end: int  # inclusive
    speed: float
    duration: float


@dataclass(frozen=True)
class ProcessPlan:
    kind: PathType
    poses: List[Pose]
    segments: List[PlanSegment]

    @property
    def duration(self) -> float:
        return float(sum(s.duration for s in self.segments))


def path_length(poses: Sequence[Pose]) -> float:
    if len(poses) < 2:
        return 0.0
    P = np.array([p.position for p in poses])
    return float(np.linalg.norm(np.diff(P, axis=0), axis=1).sum())


def _timed(label: str, poses: List[Pose], start: int, end: int, speed: float) -> PlanSegment:
    length = path_length(poses[start : end + 1])
    return PlanSegment(label, start, end, speed, length / speed if speed > 0 else 0.0)


# ============================== LOCAL SERVICES ===============================


class RasterBlendPlanner:
    """Serpentine tool passes inside each boundary, joined by lifted traverses."""

    def plan_blend(
        self,
        boundaries: Sequence[np.ndarray],
        surface_pose: Pose,
        params: PathPlanningParams,
    ) -> Optional[List[Pose]]:
        local: List[np.ndarray] = []
        for bnd in boundaries:
            passes = blend_raster(bnd, params)
            for P in passes:
                pts = np.hstack([P, np.zeros((len(P), 1))])
                if local:
                    prev = local[-1]
                    up = params.traverse_height
                    local.append(prev + [0.0, 0.0, up])
                    local.append(np.array([pts[0, 0], pts[0, 1], up]))
                local.extend(pts)
        if not local:
            LOG.warning("blend planner: no passes fit inside the boundaries")
            return None
        return points_to_world(surface_pose, np.asarray(local))


class LinearProcessPlanner:
    """Approach / process / retract plans timed from the configured speeds."""

    def plan_blend_process(
        self, poses: Sequence[Pose], params: BlendPlanParams
    ) -> Optional[ProcessPlan]:
        poses = list(poses)
        if not poses:
            return None
        h = params.safe_traverse_height
        full = [poses[0].translated(dz=h)] + poses + [poses[-1].translated(dz=h)]
        n = len(full)
        segs = [
            _timed("approach", full, 0, 1, params.approach_spd),
            _timed("process", full, 1, n - 2, params.blending_spd),
            _timed("retract", full, n - 2, n - 1, params.retract_spd),
        ]
        return ProcessPlan(PathType.BLEND, full, segs)

    def plan_scan_process(
        self, poses: Sequence[Pose], params: ScanPlanParams
    ) -> Optional[ProcessPlan]:
        poses = list(poses)
        if not poses:
            return None
        d = params.approach_distance
        full = [poses[0].translated(dz=d)] + poses + [poses[-1].translated(dz=d)]
        n = len(full)
        segs = [
            _timed("approach", full, 0, 1, params.traverse_spd),
            _timed("process", full, 1, n - 2, params.traverse_spd),
            _timed("retract", full, n - 2, n - 1, params.traverse_spd),
        ]
        return ProcessPlan(PathType.SCAN, full, segs)


@dataclass
class Services:
    """Everything the orchestrator calls out to; swap members in tests."""

    blend_planner: BlendPathPlanner = field(default_factory=RasterBlendPlanner)
    process_planner: ProcessPlanner = field(default_factory=LinearProcessPlanner)
    scan_profile: ScanProfileFn = scan_profile
    boundary_trajectory: BoundaryTrajectoryFn = boundary_trajectory
    boundary_detector: BoundaryDetectorFn = detect_boundary_points
