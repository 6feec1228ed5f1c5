# utils/helpers.py
from __future__ import annotations

import numpy as np

# ============================================================================ #
# numpy
# ============================================================================ #
np.set_printoptions(suppress=True, precision=6, linewidth=180)


# ============================================================================ #
# Math: rotations, quaternions, transforms, formatting
# ============================================================================ #
def quat_to_R(q: np.ndarray) -> np.ndarray:
    """Quaternion (x, y, z, w) -> 3x3 rotation matrix. Input is normalized."""
    q = np.asarray(q, dtype=float).reshape(4)
    q = q / (np.linalg.norm(q) + 1e-12)
    x, y, z, w = q
    return np.array(
        [
            [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - z * w), 2.0 * (x * z + y * w)],
            [2.0 * (x * y + z * w), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - x * w)],
            [2.0 * (x * z - y * w), 2.0 * (y * z + x * w), 1.0 - 2.0 * (x * x + y * y)],
        ]
    )


def orthonormalize(R: np.ndarray) -> np.ndarray:
    """Closest proper rotation to R (SVD projection)."""
    U, _, Vt = np.linalg.svd(np.asarray(R, dtype=float))
    Rn = U @ Vt
    if np.linalg.det(Rn) < 0:
        U[:, -1] *= -1.0
        Rn = U @ Vt
    return Rn


def R_to_quat(R: np.ndarray) -> np.ndarray:
    """3x3 rotation -> unit quaternion (x, y, z, w) with w >= 0."""
    m = orthonormalize(R)
    tr = float(np.trace(m))
    if tr > 0.0:
        s = 2.0 * np.sqrt(tr + 1.0)
        w = 0.25 * s
        x = (m[2, 1] - m[1, 2]) / s
        y = (m[0, 2] - m[2, 0]) / s
        z = (m[1, 0] - m[0, 1]) / s
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        w = (m[2, 1] - m[1, 2]) / s
        x = 0.25 * s
        y = (m[0, 1] + m[1, 0]) / s
        z = (m[0, 2] + m[2, 0]) / s
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        w = (m[0, 2] - m[2, 0]) / s
        x = (m[0, 1] + m[1, 0]) / s
        y = 0.25 * s
        z = (m[1, 2] + m[2, 1]) / s
    else:
        s = 2.0 * np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        w = (m[1, 0] - m[0, 1]) / s
        x = (m[0, 2] + m[2, 0]) / s
        y = (m[1, 2] + m[2, 1]) / s
        z = 0.25 * s
    q = np.array([x, y, z, w], dtype=float)
    q /= np.linalg.norm(q)
    return -q if q[3] < 0 else q


def make_T(R: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Assemble 4x4 transform from R (3x3) and t (3,)."""
    T = np.eye(4, dtype=float)
    T[:3, :3] = R
    T[:3, 3] = np.asarray(t, dtype=float).reshape(3)
    return T


def frame_from_normal(n: np.ndarray, hint: np.ndarray | None = None) -> np.ndarray:
    """
    Right-handed 3x3 basis [u v n] with n as the Z axis.
    ``hint`` (if given and not parallel to n) fixes the X axis direction.
    """
    n = np.asarray(n, dtype=float)
    n = n / (np.linalg.norm(n) + 1e-12)
    if hint is not None:
        u = np.asarray(hint, dtype=float) - np.dot(hint, n) * n
        if np.linalg.norm(u) > 1e-9:
            u /= np.linalg.norm(u)
            return np.stack([u, np.cross(n, u), n], axis=1)
    ref = np.array([1.0, 0.0, 0.0]) if abs(n[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
    u = ref - np.dot(ref, n) * n
    u /= np.linalg.norm(u) + 1e-12
    return np.stack([u, np.cross(n, u), n], axis=1)


def fmt_array(v) -> str:
    """Pretty numpy one-liner for logs."""
    return np.array2string(np.asarray(v), separator=", ")
