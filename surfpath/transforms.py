"""Surface-local geometry -> world-frame poses."""
from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np

from utils.config import Pose
from utils.helpers import make_T
from utils.logger import Logger

LOG = Logger.get_logger("frames")


def _lift(local_pts) -> np.ndarray:
    """(N, 2|3) -> (N, 3); 2D points sit at zero height."""
    P = np.asarray(local_pts, dtype=float)
    if P.size == 0:
        return np.zeros((0, 3))
    if P.ndim != 2 or P.shape[1] not in (2, 3):
        raise ValueError(f"local points must be (N, 2) or (N, 3), got {P.shape}")
    if P.shape[1] == 2:
        P = np.hstack([P, np.zeros((len(P), 1))])
    return P


def points_to_world(surface_pose: Pose, local_pts) -> List[Pose]:
    """
    BASE <- SURF applied to bare local points. Each point is a pure
    translation in the surface frame, so the world orientation is the
    surface orientation.
    """
    T_base_surf = surface_pose.as_matrix()
    out: List[Pose] = []
    for p in _lift(local_pts):
        T = T_base_surf @ make_T(np.eye(3), p)
        out.append(Pose.from_matrix(T).with_orientation(surface_pose))
    return out


def poses_to_world(surface_pose: Pose, local_poses: Iterable[Pose]) -> List[Pose]:
    """
    BASE <- SURF applied to local poses. Positions are composed; the locally
    planned orientation is replaced by the surface orientation (one processing
    orientation per planar surface).
    """
    T_base_surf = surface_pose.as_matrix()
    out: List[Pose] = []
    for lp in local_poses:
        T = T_base_surf @ make_T(np.eye(3), lp.position)
        out.append(Pose.from_matrix(T).with_orientation(surface_pose))
    return out


def matrices_to_poses(Ts: Sequence[np.ndarray]) -> List[Pose]:
    return [Pose.from_matrix(T) for T in Ts]


def override_orientation(poses: Iterable[Pose], reference: Pose) -> List[Pose]:
    return [p.with_orientation(reference) for p in poses]
