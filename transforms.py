# =============================
# Matrix / quaternion helpers (numpy)
# =============================
"""
Small numpy toolbox used by the manipulator and the renderer.

Conventions:
  * 4x4 matrices act on column vectors, translation lives in ``m[:3, 3]``
    (transpose before handing to OpenGL).
  * Quaternions are ``[x, y, z, w]`` float64 arrays; ``quat_multiply(a, b)``
    is the Hamilton product, so ``rotation(a ⊗ b) = rotation(a) @ rotation(b)``.
"""

import math

import numpy as np

_EPS = 1e-12


def normalize(v):
    """Unit vector, or zeros when ``v`` has (almost) no length."""
    v = np.asarray(v, dtype=np.float64)
    n = np.linalg.norm(v)
    if n < _EPS:
        return np.zeros_like(v)
    return v / n


# ────────────── Quaternions ──────────────

def quat_identity():
    return np.array([0.0, 0.0, 0.0, 1.0])


def quat_from_axis_angle(axis, angle):
    axis = normalize(axis)
    s = math.sin(angle * 0.5)
    return np.array([axis[0] * s, axis[1] * s, axis[2] * s,
                     math.cos(angle * 0.5)])


def quat_multiply(a, b):
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def quat_conjugate(q):
    return np.array([-q[0], -q[1], -q[2], q[3]])


def quat_normalize(q):
    n = np.linalg.norm(q)
    if n < _EPS:
        return quat_identity()
    return np.asarray(q, dtype=np.float64) / n


def quat_to_matrix3(q):
    x, y, z, w = q
    return np.array([
        [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - z * w), 2.0 * (x * z + y * w)],
        [2.0 * (x * y + z * w), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - x * w)],
        [2.0 * (x * z - y * w), 2.0 * (y * z + x * w), 1.0 - 2.0 * (x * x + y * y)],
    ])


def quat_from_matrix(m):
    """Quaternion of the rotation part (upper 3x3) of ``m``."""
    m = np.asarray(m, dtype=np.float64)
    tr = m[0, 0] + m[1, 1] + m[2, 2]
    if tr > 0.0:
        s = math.sqrt(tr + 1.0) * 2.0
        q = [(m[2, 1] - m[1, 2]) / s,
             (m[0, 2] - m[2, 0]) / s,
             (m[1, 0] - m[0, 1]) / s,
             0.25 * s]
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2.0
        q = [0.25 * s,
             (m[0, 1] + m[1, 0]) / s,
             (m[0, 2] + m[2, 0]) / s,
             (m[2, 1] - m[1, 2]) / s]
    elif m[1, 1] > m[2, 2]:
        s = math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2.0
        q = [(m[0, 1] + m[1, 0]) / s,
             0.25 * s,
             (m[1, 2] + m[2, 1]) / s,
             (m[0, 2] - m[2, 0]) / s]
    else:
        s = math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2.0
        q = [(m[0, 2] + m[2, 0]) / s,
             (m[1, 2] + m[2, 1]) / s,
             0.25 * s,
             (m[1, 0] - m[0, 1]) / s]
    return quat_normalize(np.array(q))


# ────────────── 4x4 matrices ──────────────

def translation_matrix(x, y, z):
    m = np.eye(4)
    m[:3, 3] = (x, y, z)
    return m


def rotation_matrix(q):
    m = np.eye(4)
    m[:3, :3] = quat_to_matrix3(q)
    return m


def rigid_inverse(m):
    """Inverse of a rotation + translation matrix (no scale)."""
    r = m[:3, :3]
    inv = np.eye(4)
    inv[:3, :3] = r.T
    inv[:3, 3] = -r.T @ m[:3, 3]
    return inv


def look_at(eye, center, up):
    """View matrix (world → camera), camera looking down its -Z."""
    eye = np.asarray(eye, dtype=np.float64)
    f = normalize(np.asarray(center, dtype=np.float64) - eye)
    s = np.cross(f, up)
    if np.linalg.norm(s) < 1e-9:
        # up parallel to the look direction — pick any perpendicular
        s = np.cross(f, [1.0, 0.0, 0.0])
        if np.linalg.norm(s) < 1e-9:
            s = np.cross(f, [0.0, 1.0, 0.0])
    s = normalize(s)
    u = np.cross(s, f)
    m = np.eye(4)
    m[0, :3] = s
    m[1, :3] = u
    m[2, :3] = -f
    m[0, 3] = -np.dot(s, eye)
    m[1, 3] = -np.dot(u, eye)
    m[2, 3] = np.dot(f, eye)
    return m


def perspective(fov, aspect, near, far):
    f = 1.0 / np.tan(fov / 2.0)
    nf = near - far
    return np.array([
        [f / aspect, 0.0, 0.0,                        0.0],
        [0.0,        f,   0.0,                        0.0],
        [0.0,        0.0, (far + near) / nf, 2.0 * far * near / nf],
        [0.0,        0.0, -1.0,                       0.0],
    ])
