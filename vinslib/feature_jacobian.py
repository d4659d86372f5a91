"""Jacobians of a feature's 3D position with respect to its parameterisation.

Each function takes the current 3D position of a feature (global or in the
anchor frame) and returns the Jacobian of that position with respect to the
error state of the chosen landmark representation.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike

__all__ = [
    "full_inverse_depth_jacobian",
    "msckf_inverse_depth_jacobian",
    "single_inverse_depth_jacobian",
]


def _as_position(p_f: ArrayLike) -> np.ndarray:
    arr = np.asarray(p_f, dtype=np.float64).reshape(-1)
    if arr.size != 3:
        raise ValueError(f"feature position must hold exactly three values, got {arr.size}")
    return arr


def _require_depth(p: np.ndarray) -> float:
    z = float(p[2])
    if z == 0.0:
        raise ValueError("feature position has zero depth, inverse depth is undefined")
    return z


def full_inverse_depth_jacobian(p_f: ArrayLike) -> np.ndarray:
    """Return the 3x3 Jacobian of ``p_f`` wrt ``(theta, phi, rho)``.

    The representation is ``rho = 1/|p|``, ``phi = acos(rho * z)`` and
    ``theta = atan2(y, x)``.
    """
    p = _as_position(p_f)
    norm = float(np.linalg.norm(p))
    if norm == 0.0:
        raise ValueError("feature position is at the origin, inverse depth is undefined")
    rho = 1.0 / norm
    phi = math.acos(max(-1.0, min(1.0, rho * p[2])))
    theta = math.atan2(p[1], p[0])

    sin_th, cos_th = math.sin(theta), math.cos(theta)
    sin_phi, cos_phi = math.sin(phi), math.cos(phi)
    inv_rho = 1.0 / rho
    inv_rho2 = 1.0 / (rho * rho)
    return np.array(
        [
            [-inv_rho * sin_th * sin_phi, inv_rho * cos_th * cos_phi, -inv_rho2 * cos_th * sin_phi],
            [inv_rho * cos_th * sin_phi, inv_rho * sin_th * cos_phi, -inv_rho2 * sin_th * sin_phi],
            [0.0, -inv_rho * sin_phi, -inv_rho2 * cos_phi],
        ]
    )


def msckf_inverse_depth_jacobian(p_f: ArrayLike) -> np.ndarray:
    """Return the 3x3 Jacobian of ``p_f`` wrt ``(alpha, beta, rho)``.

    The representation is ``alpha = x/z``, ``beta = y/z`` and ``rho = 1/z``.
    """
    p = _as_position(p_f)
    z = _require_depth(p)
    alpha = p[0] / z
    beta = p[1] / z
    rho = 1.0 / z
    inv_rho = 1.0 / rho
    inv_rho2 = 1.0 / (rho * rho)
    return np.array(
        [
            [inv_rho, 0.0, -inv_rho2 * alpha],
            [0.0, inv_rho, -inv_rho2 * beta],
            [0.0, 0.0, -inv_rho2],
        ]
    )


def single_inverse_depth_jacobian(p_f: ArrayLike) -> np.ndarray:
    """Return the 3x1 Jacobian of ``p_f`` wrt its single inverse depth ``rho = 1/z``.

    The bearing ``rho * p_f`` is held fixed.
    """
    p = _as_position(p_f)
    z = _require_depth(p)
    rho = 1.0 / z
    bearing = rho * p
    return (-(1.0 / (rho * rho)) * bearing).reshape(3, 1)