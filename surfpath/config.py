# surfpath/config.py
from __future__ import annotations

import json
from dataclasses import dataclass, fields, is_dataclass, replace
from pathlib import Path
from typing import Any, Dict, Tuple

from utils.error_tracker import ConfigError
from utils.logger import Logger

LOG = Logger.get_logger("cfg")

# ============================== CONSTANTS ====================================

DEBUG_DIR_NAME = "debug"
MESH_SUFFIX = "_mesh.ply"
CLOUD_SUFFIX = "_cloud.ply"

# ============================== CONFIG TYPES =================================


@dataclass(frozen=True)
class PathPlanningParams:
    """Caller-supplied planning parameters (meters)."""

    margin: float = 0.005  # inset from the boundary before rastering
    overlap: float = 0.0  # fraction of pass width shared by neighbours [0, 1)
    tool_radius: float = 0.025
    discretization: float = 0.01  # sample step along a pass
    traverse_height: float = 0.05  # safe height between passes
    scan_width: float = 0.05  # profilometer stripe width


@dataclass(frozen=True)
class BlendProcessCfg:
    """Process constants for blend / edge plans."""

    tool_force: float = 0.0
    spindle_speed: float = 0.0
    approach_spd: float = 0.005
    blending_spd: float = 0.3
    retract_spd: float = 0.02
    traverse_spd: float = 0.05


@dataclass(frozen=True)
class ScanProcessCfg:
    """Process constants for laser scan plans."""

    approach_distance: float = 0.15
    traverse_spd: float = 0.05
    quality_metric: int = 0
    window_width: float = 0.02
    min_qa_value: float = 0.05
    max_qa_value: float = 0.05


@dataclass(frozen=True)
class BoundaryFilterCfg:
    min_boundary_length: float = 0.1  # circumference below this is dropped
    min_point_spacing: float = 0.1  # density filter distance
    min_points: int = 3


@dataclass(frozen=True)
class SegmentationCfg:
    search_radius: float = 0.03  # chain walk radius
    smoothing_kernel: Tuple[float, ...] = (1, 2, 3, 4, 5, 4, 3, 2, 1)
    min_chain_points: int = 10  # shorter chains get no edge path
    boundary_radius: float = 0.03  # neighbourhood for boundary detection
    boundary_angle_deg: float = 90.0  # max angular gap marking a boundary point
    boundary_min_nn: int = 3


@dataclass(frozen=True)
class ScanRampCfg:
    """Standoff ramp: step_count poses spaced step_distance along world Z."""

    step_count: int = 5
    step_distance: float = 0.01


@dataclass(frozen=True)
class SynthesisCfg:
    """Top-level knobs for a synthesis run."""

    params: PathPlanningParams = PathPlanningParams()
    blend: BlendProcessCfg = BlendProcessCfg()
    scan: ScanProcessCfg = ScanProcessCfg()
    boundary: BoundaryFilterCfg = BoundaryFilterCfg()
    segmentation: SegmentationCfg = SegmentationCfg()
    ramp: ScanRampCfg = ScanRampCfg()

    # 1 = sequential; >1 runs surfaces on a thread pool
    workers: int = 1

    # I/O (entry point only)
    input_root: str = "."
    output_name: str = "trajectory_library.json"
    debug_dir_name: str = DEBUG_DIR_NAME


# ============================== RESOLVED PARAMS ==============================


@dataclass(frozen=True)
class BlendPlanParams:
    """Parameters sent with blend / edge process-plan requests."""

    margin: float
    overlap: float
    tool_radius: float
    discretization: float
    safe_traverse_height: float
    tool_force: float
    spindle_speed: float
    approach_spd: float
    blending_spd: float
    retract_spd: float
    traverse_spd: float


@dataclass(frozen=True)
class ScanPlanParams:
    """Parameters sent with scan process-plan requests."""

    scan_width: float
    margin: float
    overlap: float
    approach_distance: float
    traverse_spd: float
    quality_metric: int
    window_width: float
    min_qa_value: float
    max_qa_value: float


def resolve_blend_params(params: PathPlanningParams, cfg: SynthesisCfg) -> BlendPlanParams:
    b = cfg.blend
    return BlendPlanParams(
        margin=params.margin,
        overlap=params.overlap,
        tool_radius=params.tool_radius,
        discretization=params.discretization,
        safe_traverse_height=params.traverse_height,
        tool_force=b.tool_force,
        spindle_speed=b.spindle_speed,
        approach_spd=b.approach_spd,
        blending_spd=b.blending_spd,
        retract_spd=b.retract_spd,
        traverse_spd=b.traverse_spd,
    )


def resolve_scan_params(params: PathPlanningParams, cfg: SynthesisCfg) -> ScanPlanParams:
    s = cfg.scan
    return ScanPlanParams(
        scan_width=params.scan_width,
        margin=params.margin,
        overlap=params.overlap,
        approach_distance=s.approach_distance,
        traverse_spd=s.traverse_spd,
        quality_metric=s.quality_metric,
        window_width=s.window_width,
        min_qa_value=s.min_qa_value,
        max_qa_value=s.max_qa_value,
    )


# ============================== LOADING ======================================


def _overlay(base: Any, data: Dict[str, Any], where: str) -> Any:
    """Recursively replace dataclass fields from a JSON dict."""
    known = {f.name: f for f in fields(base)}
    updates: Dict[str, Any] = {}
    for key, val in data.items():
        if key not in known:
            raise ConfigError(f"unknown key '{where}{key}'")
        cur = getattr(base, key)
        if is_dataclass(cur):
            if not isinstance(val, dict):
                raise ConfigError(f"'{where}{key}' must be an object")
            updates[key] = _overlay(cur, val, f"{where}{key}.")
        elif isinstance(cur, tuple):
            updates[key] = tuple(val)
        elif isinstance(cur, bool) or not isinstance(cur, (int, float)):
            updates[key] = val
        else:
            try:
                updates[key] = type(cur)(val)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"bad value for '{where}{key}': {val!r}") from e
    return replace(base, **updates)


def validate_cfg(cfg: SynthesisCfg) -> SynthesisCfg:
    """Reject values the pipeline cannot work with."""
    if not 0.0 <= cfg.params.overlap < 1.0:
        raise ConfigError(f"overlap must be in [0, 1), got {cfg.params.overlap}")
    if cfg.params.scan_width <= 0 or cfg.params.tool_radius <= 0:
        raise ConfigError("scan_width and tool_radius must be positive")
    if cfg.params.discretization <= 0:
        raise ConfigError("discretization must be positive")
    if cfg.ramp.step_count < 0:
        raise ConfigError("ramp.step_count must be >= 0")
    if cfg.segmentation.search_radius <= 0:
        raise ConfigError("segmentation.search_radius must be positive")
    if not cfg.segmentation.smoothing_kernel or sum(cfg.segmentation.smoothing_kernel) <= 0:
        raise ConfigError("segmentation.smoothing_kernel must have a positive sum")
    if cfg.workers < 1:
        raise ConfigError("workers must be >= 1")
    return cfg


def load_cfg(path: Path | str, base: SynthesisCfg | None = None) -> SynthesisCfg:
    """Read a JSON file and overlay it on ``base`` (defaults if None)."""
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"config not found: {p}")
    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as e:
        raise ConfigError(f"config {p.name} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config {p.name} must hold a JSON object")
    cfg = validate_cfg(_overlay(base or SynthesisCfg(), data, ""))
    LOG.info(f"[CFG] loaded {p.name}: {sorted(data)}")
    return cfg
