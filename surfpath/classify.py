# surfpath/classify.py
from __future__ import annotations

from enum import Enum
from typing import Optional

from utils.logger import Logger

LOG = Logger.get_logger("classify")


class PathType(str, Enum):
    BLEND = "blend"
    EDGE = "edge"
    SCAN = "scan"


BLEND_SUFFIX = "_blend"
EDGE_TAG = "_edge"
SCAN_TAG = "_scan"


def is_blend_path(name: str) -> bool:
    """Suffix-anchored: 'x_blend' yes, 'x_blend_extra' no."""
    return name.endswith(BLEND_SUFFIX)


def is_edge_path(name: str) -> bool:
    """Substring match: 'x_edge_3' and 'x_edgecase' both count."""
    return EDGE_TAG in name


def is_scan_path(name: str) -> bool:
    """Substring match."""
    return SCAN_TAG in name


def classify_path_name(name: str) -> Optional[PathType]:
    """Blend, then edge, then scan; None (logged) when nothing matches."""
    if is_blend_path(name):
        return PathType.BLEND
    if is_edge_path(name):
        return PathType.EDGE
    if is_scan_path(name):
        return PathType.SCAN
    LOG.error(f"unrecognized path type: {name}")
    return None


def blend_name(surface: str) -> str:
    return f"{surface}{BLEND_SUFFIX}"


def edge_name(surface: str, index: int) -> str:
    return f"{surface}{EDGE_TAG}_{index}"


def scan_name(surface: str) -> str:
    return f"{surface}{SCAN_TAG}"
