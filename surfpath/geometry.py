# surfpath/geometry.py
from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
import open3d as o3d

from utils.logger import Logger

LOG = Logger.get_logger("geom")


def as_points(cloud) -> np.ndarray:
    """(N, 3) float array from an Open3D cloud or any array-like."""
    if isinstance(cloud, o3d.geometry.PointCloud):
        return np.asarray(cloud.points, dtype=float)
    P = np.asarray(cloud, dtype=float)
    if P.ndim != 2 or P.shape[1] != 3:
        raise ValueError(f"point cloud must be (N, 3), got shape {P.shape}")
    return P


def fit_plane(P: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Least-squares plane (centroid, unit normal); normal points to +Z."""
    c = P.mean(0)
    if len(P) < 3:
        return c, np.array([0.0, 0.0, 1.0])
    _, _, Vt = np.linalg.svd(P - c, full_matrices=False)
    n = Vt[-1] if Vt.shape[0] == 3 else np.array([0.0, 0.0, 1.0])
    n = n / (np.linalg.norm(n) + 1e-12)
    if n[2] < 0:
        n = -n
    return c, n


def smooth_polyline(
    P: np.ndarray, kernel: Sequence[float], closed: bool = False
) -> np.ndarray:
    """
    Weighted moving average with a symmetric kernel.
    Open polylines renormalize the truncated kernel at the ends; closed ones wrap.
    """
    P = np.asarray(P, dtype=float)
    w = np.asarray(kernel, dtype=float)
    n = len(P)
    if n < 3 or len(w) < 2:
        return P.copy()
    half = len(w) // 2
    out = np.empty_like(P)
    for i in range(n):
        idx = np.arange(i - half, i - half + len(w))
        if closed:
            out[i] = (w[:, None] * P[idx % n]).sum(0) / w.sum()
            continue
        ok = (idx >= 0) & (idx < n)
        ww = w[ok]
        out[i] = (ww[:, None] * P[idx[ok]]).sum(0) / ww.sum()
    return out


def resample_polyline(
    P: np.ndarray, step: float, keep_tail_min_frac: float = 0.0
) -> np.ndarray:
    """Even spacing along polyline; keep tail if long enough."""
    if len(P) < 2:
        return P
    seg = P[1:] - P[:-1]
    L = np.linalg.norm(seg, axis=1)
    total = float(L.sum())
    if total < step:
        return P
    out = [P[0]]
    acc = 0.0
    target = step
    for i in range(1, len(P)):
        d = float(np.linalg.norm(P[i] - P[i - 1]))
        if d <= 1e-12:
            continue
        dirv = (P[i] - P[i - 1]) / d
        while acc + d >= target:
            out.append(P[i - 1] + dirv * (target - acc))
            target += step
        acc += d
    tail = acc - ((len(out) - 1) * step)
    if tail > 1e-9 and tail >= keep_tail_min_frac * step:
        out.append(P[-1])
    return np.asarray(out) if len(out) >= 2 else P
