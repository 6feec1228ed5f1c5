# surfpath/paths.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from utils.config import Pose

from .classify import PathType, classify_path_name

# name -> opaque process plan; later writes for the same name win
TrajectoryLibrary = Dict[str, Any]


@dataclass
class NamedPath:
    """A pose sequence with its external name and its type tag."""

    name: str
    poses: List[Pose]
    path_type: Optional[PathType] = None

    def __post_init__(self) -> None:
        if self.path_type is None:
            self.path_type = classify_path_name(self.name)

    def __len__(self) -> int:
        return len(self.poses)


@dataclass
class ProcessPathResult:
    """Paths generated for one surface, in generation order."""

    surface_id: int
    surface_name: str
    paths: List[NamedPath] = field(default_factory=list)
    edge_poses: List[Pose] = field(default_factory=list)  # all edges, for display

    def add(self, path: NamedPath) -> None:
        self.paths.append(path)

    def names(self) -> List[str]:
        return [p.name for p in self.paths]

    def get(self, name: str) -> Optional[NamedPath]:
        for p in self.paths:
            if p.name == name:
                return p
        return None


@dataclass
class ProcessPlanResult:
    plans: List[Tuple[str, Any]] = field(default_factory=list)


@dataclass
class SynthesisResult:
    """Everything one generate_motion_library() call produced."""

    blend_poses: List[List[Pose]] = field(default_factory=list)
    edge_poses: List[List[Pose]] = field(default_factory=list)
    scan_poses: List[List[Pose]] = field(default_factory=list)
    paths: List[ProcessPathResult] = field(default_factory=list)
    library: TrajectoryLibrary = field(default_factory=dict)

    def record(self, path: NamedPath) -> None:
        if path.path_type is PathType.BLEND:
            self.blend_poses.append(path.poses)
        elif path.path_type is PathType.EDGE:
            self.edge_poses.append(path.poses)
        elif path.path_type is PathType.SCAN:
            self.scan_poses.append(path.poses)

    def merge(self, plans: ProcessPlanResult) -> None:
        for name, plan in plans.plans:
            self.library[name] = plan
