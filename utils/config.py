# utils/config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from utils.helpers import R_to_quat, make_T, quat_to_R


# ============================== CORE DATATYPES ===============================


@dataclass(frozen=True)
class Pose:
    """6-DOF pose: position (x, y, z) + unit quaternion (qx, qy, qz, qw)."""

    x: float
    y: float
    z: float
    qx: float = 0.0
    qy: float = 0.0
    qz: float = 0.0
    qw: float = 1.0

    def __post_init__(self) -> None:
        q = np.array([self.qx, self.qy, self.qz, self.qw], dtype=float)
        n = float(np.linalg.norm(q))
        if not np.isfinite(n) or n < 1e-12:
            raise ValueError(f"Pose quaternion has zero norm: {q.tolist()}")
        if abs(n - 1.0) > 1e-12:
            q /= n
        for name, val in zip(("qx", "qy", "qz", "qw"), q):
            object.__setattr__(self, name, float(val))
        for name in ("x", "y", "z"):
            object.__setattr__(self, name, float(getattr(self, name)))

    @classmethod
    def identity(cls) -> "Pose":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_matrix(cls, T: np.ndarray) -> "Pose":
        """Build from a 4x4 rigid transform (rotation is re-orthonormalized)."""
        T = np.asarray(T, dtype=float)
        q = R_to_quat(T[:3, :3])
        return cls(T[0, 3], T[1, 3], T[2, 3], q[0], q[1], q[2], q[3])

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    @property
    def quaternion(self) -> np.ndarray:
        return np.array([self.qx, self.qy, self.qz, self.qw], dtype=float)

    def as_matrix(self) -> np.ndarray:
        return make_T(quat_to_R(self.quaternion), self.position)

    def with_orientation(self, other: "Pose") -> "Pose":
        """Same position, orientation copied from ``other``."""
        return Pose(self.x, self.y, self.z, other.qx, other.qy, other.qz, other.qw)

    def translated(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "Pose":
        """World-axis offset, orientation unchanged."""
        return Pose(
            self.x + dx, self.y + dy, self.z + dz,
            self.qx, self.qy, self.qz, self.qw,
        )

    def as_tuple(self) -> Tuple[float, float, float, float, float, float, float]:
        return (self.x, self.y, self.z, self.qx, self.qy, self.qz, self.qw)
