# surfpath/segmentation.py
"""Boundary points of a surface cloud -> ordered, smoothed boundary chains."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Sequence

import numpy as np
from scipy.spatial import cKDTree

from utils.helpers import frame_from_normal, make_T
from utils.logger import Logger

from .config import SegmentationCfg
from .geometry import as_points, fit_plane, smooth_polyline

LOG = Logger.get_logger("segment")


@dataclass
class SegmentationResult:
    chains: List[np.ndarray]  # ordered cloud indices per chain
    smoothed: List[np.ndarray]  # (len(chain), 3) smoothed positions per chain
    closed: List[bool]
    longest: int  # index of the chain with most points, -1 if none

    def __len__(self) -> int:
        return len(self.chains)

    def eligible(self, min_points: int) -> List[int]:
        """Chain indices long enough for edge paths."""
        return [i for i, c in enumerate(self.chains) if len(c) >= min_points]


# ============================== DETECTION ====================================


def detect_boundary_points(cloud, cfg: SegmentationCfg | None = None) -> np.ndarray:
    """
    Angle-criterion boundary test: project neighbours onto the local tangent
    plane; a point whose largest angular gap exceeds the threshold is on a border.
    """
    cfg = cfg or SegmentationCfg()
    P = as_points(cloud)
    if len(P) == 0:
        return np.zeros(0, dtype=int)
    tree = cKDTree(P)
    thr = np.radians(cfg.boundary_angle_deg)
    out: List[int] = []
    for i, nbrs in enumerate(tree.query_ball_point(P, cfg.boundary_radius)):
        nbrs = [j for j in nbrs if j != i]
        if len(nbrs) < cfg.boundary_min_nn:
            out.append(i)
            continue
        Q = P[nbrs]
        _, n = fit_plane(np.vstack([Q, P[i]]))
        B = frame_from_normal(n)
        d = Q - P[i]
        ang = np.sort(np.arctan2(d @ B[:, 1], d @ B[:, 0]))
        gaps = np.diff(np.concatenate([ang, ang[:1] + 2.0 * np.pi]))
        if float(gaps.max()) > thr:
            out.append(i)
    LOG.info(f"boundary points: {len(out)}/{len(P)}")
    return np.asarray(out, dtype=int)


# ============================== CHAINS =======================================


def _walk(
    start: int,
    tree: cKDTree,
    Q: np.ndarray,
    visited: np.ndarray,
    radius: float,
) -> List[int]:
    """Greedy nearest-unvisited walk from ``start`` (local indices)."""
    path: List[int] = []
    cur = start
    while True:
        nbrs = [j for j in tree.query_ball_point(Q[cur], radius) if not visited[j]]
        if not nbrs:
            return path
        d = np.linalg.norm(Q[nbrs] - Q[cur], axis=1)
        cur = nbrs[int(np.argmin(d))]
        visited[cur] = True
        path.append(cur)


def _returns_to_seed(
    Q: np.ndarray, local: List[int], head: List[int], radius: float
) -> bool:
    """
    Closed loop: the tail walk went all the way round (nothing left for the
    head walk), ended next to the seed, and the chain is much wider than
    the walk radius.
    """
    if head or len(local) < 3:
        return False
    C = Q[local]
    if float(np.linalg.norm(C[-1] - C[0])) > radius:
        return False
    return float(np.linalg.norm(C.max(0) - C.min(0))) > 2.0 * radius


def segment_boundary(
    cloud,
    boundary_idx: Sequence[int],
    search_radius: float,
    smoothing_kernel: Sequence[float],
) -> SegmentationResult:
    """
    Group boundary points into ordered chains.

    Seeds are taken in input order; each chain grows greedily from its tail
    and then from its head until no unvisited point lies within
    ``search_radius`` of either end.
    """
    P = as_points(cloud)
    idx = np.asarray(boundary_idx, dtype=int).reshape(-1)
    if len(idx) == 0:
        LOG.warning("no boundary points to segment")
        return SegmentationResult([], [], [], -1)
    if idx.min() < 0 or idx.max() >= len(P):
        raise IndexError(f"boundary index out of range for cloud of {len(P)} pts")

    Q = P[idx]
    tree = cKDTree(Q)
    visited = np.zeros(len(idx), dtype=bool)
    chains: List[np.ndarray] = []
    smoothed: List[np.ndarray] = []
    closed: List[bool] = []

    for seed in range(len(idx)):
        if visited[seed]:
            continue
        visited[seed] = True
        tail = _walk(seed, tree, Q, visited, search_radius)
        head = _walk(seed, tree, Q, visited, search_radius)
        local = head[::-1] + [seed] + tail
        chain = idx[local]
        is_closed = _returns_to_seed(Q, local, head, search_radius)
        chains.append(chain)
        closed.append(is_closed)
        smoothed.append(smooth_polyline(P[chain], smoothing_kernel, closed=is_closed))

    longest = int(np.argmax([len(c) for c in chains]))
    LOG.info(
        f"segmented {len(idx)} boundary pts into {len(chains)} chains "
        f"(longest #{longest}: {len(chains[longest])} pts)"
    )
    return SegmentationResult(chains, smoothed, closed, longest)


def segment_cloud(
    cloud,
    cfg: SegmentationCfg | None = None,
    detector: Callable[..., np.ndarray] = detect_boundary_points,
) -> SegmentationResult:
    """Detect boundary points with ``detector``, then segment them."""
    cfg = cfg or SegmentationCfg()
    idx = detector(cloud, cfg)
    return segment_boundary(cloud, idx, cfg.search_radius, cfg.smoothing_kernel)


# ============================== TRAJECTORY ===================================


def boundary_trajectory(seg: SegmentationResult, index: int) -> List[np.ndarray]:
    """
    4x4 poses along one chain: origin at the smoothed point, X along the
    chain tangent, Z along the chain's best-fit plane normal.
    """
    S = seg.smoothed[index]
    if len(S) == 0:
        return []
    _, n = fit_plane(S)
    if len(S) > 1:
        tangents = np.gradient(S, axis=0)
    else:
        tangents = np.zeros_like(S)
    out = []
    for p, t in zip(S, tangents):
        R = frame_from_normal(n, t if np.linalg.norm(t) > 1e-12 else None)
        out.append(make_T(R, p))
    return out
