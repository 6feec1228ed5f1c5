# utils/io.py
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from utils.config import Pose
from utils.logger import Logger

logger = Logger.get_logger("io")


# ============================================================================ #
# I/O: pose sequences (no Open3D logic here)
# ============================================================================ #
def pose_to_dict(p: Pose) -> Dict[str, float]:
    return {
        "x": p.x, "y": p.y, "z": p.z,
        "qx": p.qx, "qy": p.qy, "qz": p.qz, "qw": p.qw,
    }


def pose_from_dict(d: Dict[str, Any]) -> Pose:
    return Pose(
        float(d["x"]),
        float(d["y"]),
        float(d["z"]),
        float(d.get("qx", 0.0)),
        float(d.get("qy", 0.0)),
        float(d.get("qz", 0.0)),
        float(d.get("qw", 1.0)),
    )


def save_poses(poses: Sequence[Pose], path: Path) -> Path:
    """Write a pose sequence as a JSON list of {x,y,z,qx,qy,qz,qw}."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([pose_to_dict(p) for p in poses], indent=2))
    logger.info(f"[POSES] saved {len(poses)} poses to {path.name}")
    return path


def load_poses(path: Path) -> List[Pose]:
    """
    Load a pose list written by save_poses().
    Returns empty list if file not found.
    """
    if not path.exists():
        logger.warning(f"[POSES] not found: {path}")
        return []
    data = json.loads(path.read_text())
    out = [pose_from_dict(d) for d in data]
    logger.info(f"[POSES] loaded {len(out)} entries from {path.name}")
    return out
