# surfpath/boundary.py
"""Validation and cleanup of closed polygon boundaries (surface-local 2D)."""
from __future__ import annotations

from typing import List, Sequence

import numpy as np
from shapely.geometry import LinearRing

from utils.error_tracker import BoundaryError
from utils.logger import Logger

from .config import BoundaryFilterCfg

LOG = Logger.get_logger("bnd")

EPS = 1e-9


def as_boundary(pts) -> np.ndarray:
    """(N, 2) float array; a repeated closing point is dropped."""
    P = np.asarray(pts, dtype=float)
    if P.ndim != 2 or P.shape[1] < 2:
        raise BoundaryError(f"boundary must be (N, 2), got shape {P.shape}")
    P = P[:, :2]
    if len(P) > 1 and np.linalg.norm(P[0] - P[-1]) <= EPS:
        P = P[:-1]
    return P


def circumference(bnd: np.ndarray) -> float:
    """Sum of consecutive edge lengths, closing the loop."""
    P = np.asarray(bnd, dtype=float)
    if len(P) < 2:
        return 0.0
    seg = np.roll(P, -1, axis=0) - P
    return float(np.linalg.norm(seg, axis=1).sum())


def check_boundary(bnd: np.ndarray, min_points: int = 3) -> bool:
    """Well-formed: enough distinct points, no coincident neighbours, simple ring."""
    P = np.asarray(bnd, dtype=float)
    if len(P) < min_points:
        return False
    if len(np.unique(np.round(P, 9), axis=0)) < min_points:
        return False
    seg = np.linalg.norm(np.roll(P, -1, axis=0) - P, axis=1)
    if np.any(seg <= EPS):
        return False
    ring = LinearRing(P)
    return bool(ring.is_valid and ring.is_simple)


def filter_density(bnd: np.ndarray, min_dist: float) -> np.ndarray:
    """Drop points closer than ``min_dist`` to the previously kept point."""
    P = np.asarray(bnd, dtype=float)
    if len(P) == 0:
        return P.copy()
    keep = [0]
    for i in range(1, len(P)):
        if np.linalg.norm(P[i] - P[keep[-1]]) >= min_dist:
            keep.append(i)
    # closing pair wraps back to the first point
    while len(keep) > 1 and np.linalg.norm(P[keep[-1]] - P[0]) < min_dist:
        keep.pop()
    return P[keep].copy()


def filter_boundaries(
    boundaries: Sequence[np.ndarray], cfg: BoundaryFilterCfg | None = None
) -> List[np.ndarray]:
    """
    Keep boundaries that are long enough and well-formed, thin them by
    ``cfg.min_point_spacing`` and reverse their traversal direction.

    Rejected boundaries are logged and skipped; inputs are never modified.
    """
    cfg = cfg or BoundaryFilterCfg()
    out: List[np.ndarray] = []
    for i, raw in enumerate(boundaries):
        try:
            bnd = as_boundary(raw)
        except BoundaryError as e:
            LOG.warning(f"[BND {i}] ignoring boundary: {e}")
            continue
        circ = circumference(bnd)
        if circ < cfg.min_boundary_length:
            LOG.warning(f"[BND {i}] ignoring boundary with length {circ:.4f}")
            continue
        if not check_boundary(bnd, cfg.min_points):
            LOG.warning(f"[BND {i}] ignoring ill-formed boundary ({len(bnd)} pts)")
            continue
        thin = filter_density(bnd, cfg.min_point_spacing)
        if len(thin) < cfg.min_points:
            LOG.warning(
                f"[BND {i}] ignoring boundary: {len(thin)} pts left after "
                f"density filter d={cfg.min_point_spacing}"
            )
            continue
        out.append(thin[::-1].copy())
    LOG.info(f"boundaries: kept {len(out)}/{len(boundaries)}")
    return out
