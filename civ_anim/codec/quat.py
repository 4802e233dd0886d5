"""
Quaternion helpers on plain (w, x, y, z) tuples.
"""

import math

from civ_anim.codec.animation import IDENTITY_ROTATION, Quat, Vec3

NORM_EPSILON = 1e-10


def from_smallest_three(x: float, y: float, z: float) -> Quat:
    """
    Rebuild a unit quaternion from its x, y, z components.

    w is recovered from the unit-norm constraint (clamped at zero) and the
    result renormalized. Degenerate input gives the identity rotation.
    """
    sum_sq = x * x + y * y + z * z
    w = math.sqrt(1.0 - sum_sq) if sum_sq <= 1.0 else 0.0
    return normalize((w, x, y, z))


def normalize(q: Quat) -> Quat:
    """Scale to unit length; a near-zero or NaN length gives the identity rotation."""
    length = math.sqrt(q[0] * q[0] + q[1] * q[1] + q[2] * q[2] + q[3] * q[3])
    if length > NORM_EPSILON:
        return (q[0] / length, q[1] / length, q[2] / length, q[3] / length)
    return IDENTITY_ROTATION


def from_xyzw(q) -> Quat:
    """Reorder an (x, y, z, w) quaternion to (w, x, y, z)."""
    return (q[3], q[0], q[1], q[2])


def conjugate(q: Quat) -> Quat:
    return (q[0], -q[1], -q[2], -q[3])


def multiply(a: Quat, b: Quat) -> Quat:
    """Hamilton product a * b (apply b, then a)."""
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return (
        aw * bw - ax * bx - ay * by - az * bz,
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
    )


def rotate(q: Quat, v: Vec3) -> Vec3:
    """Rotate a vector by a unit quaternion."""
    w, x, y, z = q
    # t = 2 * cross(q.xyz, v)
    tx = 2.0 * (y * v[2] - z * v[1])
    ty = 2.0 * (z * v[0] - x * v[2])
    tz = 2.0 * (x * v[1] - y * v[0])
    return (
        v[0] + w * tx + (y * tz - z * ty),
        v[1] + w * ty + (z * tx - x * tz),
        v[2] + w * tz + (x * ty - y * tx),
    )
