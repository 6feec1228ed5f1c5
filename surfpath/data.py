# surfpath/data.py
"""In-memory surface store: inputs for synthesis, generated poses for display."""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

import open3d as o3d

from utils.config import Pose
from utils.logger import Logger

LOG = Logger.get_logger("data")


class CloudType(str, Enum):
    SURFACE = "surface"
    BOUNDARY = "boundary"


class PoseType(str, Enum):
    BLEND = "blend"
    SCAN = "scan"


@dataclass
class SurfaceRecord:
    name: str
    mesh: o3d.geometry.TriangleMesh
    clouds: Dict[CloudType, object] = field(default_factory=dict)
    poses: Dict[PoseType, List[Pose]] = field(default_factory=dict)
    edges: Dict[str, List[Pose]] = field(default_factory=dict)


class DataCoordinator:
    """Surfaces keyed by integer id, plus the current selection."""

    def __init__(self) -> None:
        self._surfaces: Dict[int, SurfaceRecord] = {}
        self._selected: List[int] = []
        self._lock = threading.Lock()

    # ---- inputs ---------------------------------------------------------

    def add_surface(
        self,
        id: int,
        name: str,
        mesh: o3d.geometry.TriangleMesh,
        cloud=None,
        select: bool = True,
    ) -> None:
        rec = SurfaceRecord(name=name, mesh=mesh)
        if cloud is not None:
            rec.clouds[CloudType.SURFACE] = cloud
        with self._lock:
            self._surfaces[id] = rec
            if select and id not in self._selected:
                self._selected.append(id)
        LOG.debug(f"surface {id} '{name}' added")

    def select(self, ids: Sequence[int]) -> None:
        missing = [i for i in ids if i not in self._surfaces]
        if missing:
            raise KeyError(f"unknown surface ids: {missing}")
        self._selected = list(ids)

    def _rec(self, id: int) -> SurfaceRecord:
        try:
            return self._surfaces[id]
        except KeyError:
            raise KeyError(f"unknown surface id: {id}") from None

    def get_selected_ids(self) -> List[int]:
        return list(self._selected)

    def get_surface_name(self, id: int) -> str:
        return self._rec(id).name

    def get_surface_mesh(self, id: int) -> o3d.geometry.TriangleMesh:
        return self._rec(id).mesh

    def get_cloud(self, kind: CloudType, id: int):
        """Stored cloud or None."""
        return self._rec(id).clouds.get(kind)

    def set_cloud(self, kind: CloudType, id: int, cloud) -> None:
        with self._lock:
            self._rec(id).clouds[kind] = cloud

    # ---- outputs --------------------------------------------------------

    def set_poses(self, kind: PoseType, id: int, poses: Sequence[Pose]) -> None:
        with self._lock:
            self._rec(id).poses[kind] = list(poses)

    def get_poses(self, kind: PoseType, id: int) -> Optional[List[Pose]]:
        return self._rec(id).poses.get(kind)

    def add_edge(self, id: int, name: str, poses: Sequence[Pose]) -> None:
        with self._lock:
            self._rec(id).edges[name] = list(poses)

    def get_edges(self, id: int) -> Dict[str, List[Pose]]:
        return dict(self._rec(id).edges)
