# surfpath/mesh.py
"""Planar surface mesh -> surface pose + closed boundary polygons in that frame."""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Tuple

import numpy as np
import open3d as o3d

from utils.config import Pose
from utils.helpers import fmt_array, frame_from_normal, make_T
from utils.logger import Logger

LOG = Logger.get_logger("mesh")


def boundary_edges(triangles: np.ndarray) -> np.ndarray:
    """Edges (sorted vertex pairs) used by exactly one triangle."""
    F = np.asarray(triangles, dtype=int)
    if len(F) == 0:
        return np.zeros((0, 2), dtype=int)
    E = np.vstack([F[:, [0, 1]], F[:, [1, 2]], F[:, [2, 0]]])
    E = np.sort(E, axis=1)
    uniq, counts = np.unique(E, axis=0, return_counts=True)
    return uniq[counts == 1]


def link_loops(edges: np.ndarray) -> List[List[int]]:
    """Chain boundary edges into closed vertex loops (open leftovers dropped)."""
    adj: Dict[int, List[int]] = defaultdict(list)
    for a, b in edges.tolist():
        adj[a].append(b)
        adj[b].append(a)
    used = set()
    loops: List[List[int]] = []
    for a, b in edges.tolist():
        e0 = (min(a, b), max(a, b))
        if e0 in used:
            continue
        used.add(e0)
        loop = [a]
        cur = b
        while cur != loop[0]:
            loop.append(cur)
            nxt = None
            for c in adj[cur]:
                e = (min(cur, c), max(cur, c))
                if e not in used:
                    nxt = c
                    used.add(e)
                    break
            if nxt is None:
                break
            cur = nxt
        if cur == loop[0] and len(loop) >= 3:
            loops.append(loop)
        else:
            LOG.warning(f"dropping open boundary run of {len(loop)} vertices")
    return loops


def _signed_area(P: np.ndarray) -> float:
    x, y = P[:, 0], P[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def surface_frame(V: np.ndarray) -> np.ndarray:
    """BASE <- SURF: origin at centroid, Z = plane normal (+Z up), X = main axis."""
    c = V.mean(0)
    _, _, Vt = np.linalg.svd(V - c, full_matrices=False)
    if Vt.shape[0] < 3:
        return make_T(np.eye(3), c)
    n = Vt[2] if Vt[2][2] >= 0 else -Vt[2]
    return make_T(frame_from_normal(n, Vt[0]), c)


class MeshImporter:
    """Holds the pose and boundaries of the last mesh it processed."""

    def __init__(self) -> None:
        self.pose: Pose = Pose.identity()
        self.boundaries: List[np.ndarray] = []

    def calculate_simple_boundary(self, mesh: o3d.geometry.TriangleMesh) -> bool:
        V = np.asarray(mesh.vertices, dtype=float)
        F = np.asarray(mesh.triangles, dtype=int)
        self.pose, self.boundaries = Pose.identity(), []
        if len(V) < 3 or len(F) == 0:
            LOG.warning(f"mesh too small: {len(V)}V {len(F)}T")
            return False

        T = surface_frame(V)
        self.pose = Pose.from_matrix(T)
        R, c = T[:3, :3], T[:3, 3]
        loops = link_loops(boundary_edges(F))
        polys: List[Tuple[float, np.ndarray]] = []
        for loop in loops:
            uv = ((V[loop] - c) @ R)[:, :2]
            polys.append((abs(_signed_area(uv)), uv))
        polys.sort(key=lambda t: -t[0])
        self.boundaries = [uv for _, uv in polys]
        LOG.info(
            f"mesh: {len(V)}V {len(F)}T -> {len(self.boundaries)} boundary loops, "
            f"origin={fmt_array(self.pose.position)}"
        )
        return bool(self.boundaries)
