# surfpath/profile.py
"""Serpentine raster coverage of a 2D boundary (scan profiles, blend passes)."""
from __future__ import annotations

from typing import List

import numpy as np
from shapely.geometry import LineString, MultiLineString, Polygon

from utils.logger import Logger

from .config import PathPlanningParams
from .geometry import resample_polyline

LOG = Logger.get_logger("profile")


def _segments(geom) -> List[LineString]:
    if geom.is_empty:
        return []
    if isinstance(geom, LineString):
        return [geom]
    if isinstance(geom, MultiLineString):
        return list(geom.geoms)
    return [g for g in getattr(geom, "geoms", []) if isinstance(g, LineString)]


def raster_passes(
    boundary: np.ndarray, pass_width: float, overlap: float, margin: float
) -> List[np.ndarray]:
    """
    Pass lines (each (2, 2)) covering ``boundary`` inset by ``margin``.

    Passes run along the boundary's long bbox axis, spaced by
    ``pass_width * (1 - overlap)``, and alternate direction.
    """
    poly = Polygon(np.asarray(boundary, dtype=float)[:, :2])
    if not poly.is_valid or poly.is_empty:
        LOG.warning("raster: invalid boundary polygon")
        return []
    inset = poly.buffer(-margin, join_style="mitre") if margin > 0 else poly
    if inset.is_empty or inset.area <= 0:
        LOG.warning(f"raster: nothing left after margin {margin}")
        return []

    step = pass_width * (1.0 - overlap)
    if step <= 0:
        LOG.warning(f"raster: non-positive pass step (width={pass_width}, overlap={overlap})")
        return []
    minx, miny, maxx, maxy = inset.bounds
    along_x = (maxx - minx) >= (maxy - miny)
    ax = 0 if along_x else 1
    lo, hi = (miny, maxy) if along_x else (minx, maxx)
    span = hi - lo
    n = max(1, int(np.ceil(span / step - 1e-9)))
    first = lo + 0.5 * (span - (n - 1) * step) if n > 1 else lo + 0.5 * span

    out: List[np.ndarray] = []
    rows = 0
    for k in range(n):
        c = first + k * step
        if along_x:
            line = LineString([(minx - 1.0, c), (maxx + 1.0, c)])
        else:
            line = LineString([(c, miny - 1.0), (c, maxy + 1.0)])
        row = []
        for s in _segments(inset.intersection(line)):
            a, b = np.asarray(s.coords[0]), np.asarray(s.coords[-1])
            if a[ax] > b[ax]:
                a, b = b, a
            row.append(np.stack([a, b]))
        row.sort(key=lambda seg: seg[0, ax])
        if not row:
            continue
        if rows % 2 == 1:
            row = [seg[::-1] for seg in row[::-1]]
        out.extend(row)
        rows += 1
    return out


def scan_profile(boundary: np.ndarray, params: PathPlanningParams) -> np.ndarray:
    """
    Profilometer path over one boundary: stripe width ``scan_width``, shared
    by ``overlap``, kept ``margin`` inside. Returns (N, 2) pass endpoints in
    visiting order.
    """
    passes = raster_passes(boundary, params.scan_width, params.overlap, params.margin)
    if not passes:
        return np.zeros((0, 2))
    pts = np.vstack(passes)
    LOG.info(f"scan profile: {len(passes)} passes, {len(pts)} pts")
    return pts


def blend_raster(boundary: np.ndarray, params: PathPlanningParams) -> List[np.ndarray]:
    """Tool passes (tool diameter wide) densified at ``discretization``."""
    passes = raster_passes(boundary, 2.0 * params.tool_radius, params.overlap, params.margin)
    return [resample_polyline(p, params.discretization, keep_tail_min_frac=0.0) for p in passes]
