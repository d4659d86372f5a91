"""Pinhole camera models with lens distortion.

``CameraModel`` holds the shared intrinsic calibration
``(f_x, f_y, c_x, c_y, k_1, k_2, k_3, k_4)``. ``CameraEquidistant``
implements the fisheye (equidistant) distortion model.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import ArrayLike

__all__ = ["CameraModel", "CameraEquidistant"]

_SMALL_RADIUS = 1e-8
_UNDISTORT_ITERATIONS = 10
_UNDISTORT_EPSILON = 1e-8


def _as_point(point: ArrayLike, name: str) -> np.ndarray:
    arr = np.asarray(point, dtype=np.float64).reshape(-1)
    if arr.size != 2:
        raise ValueError(f"{name} must hold exactly two values, got {arr.size}")
    return arr


class CameraModel(ABC):
    """Base pinhole camera: calibration storage and the projection interface."""

    def __init__(self, calib: ArrayLike) -> None:
        self.set_value(calib)

    def set_value(self, calib: ArrayLike) -> None:
        """Set the eight intrinsic values and rebuild the camera matrix and distortion."""
        values = np.asarray(calib, dtype=np.float64).reshape(-1)
        if values.size != 8:
            raise ValueError(f"camera calibration needs 8 values, got {values.size}")
        self._values = values.copy()
        fx, fy, cx, cy = values[:4]
        self._K = np.array(
            [[fx, 0.0, cx], [0.0, fy, cy], [0.0, 0.0, 1.0]], dtype=np.float64
        )
        self._D = values[4:8].copy()

    @property
    def value(self) -> np.ndarray:
        """The full intrinsic vector ``(f_x, f_y, c_x, c_y, k_1..k_4)``."""
        return self._values.copy()

    @property
    def K(self) -> np.ndarray:  # noqa: N802 - conventional name
        """The 3x3 camera matrix."""
        return self._K.copy()

    @property
    def D(self) -> np.ndarray:  # noqa: N802 - conventional name
        """The four distortion coefficients."""
        return self._D.copy()

    @abstractmethod
    def undistort(self, uv_dist: ArrayLike) -> np.ndarray:
        """Map a raw pixel coordinate to normalized camera coordinates."""

    @abstractmethod
    def distort(self, uv_norm: ArrayLike) -> np.ndarray:
        """Map normalized camera coordinates to a raw pixel coordinate."""

    @abstractmethod
    def compute_distort_jacobian(
        self, uv_norm: ArrayLike
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return the 2x2 Jacobian wrt the normalized point and the 2x8 one wrt the intrinsics."""


class CameraEquidistant(CameraModel):
    """Fisheye / equidistant distortion model (Kalibr ``pinhole-equi``)."""

    def _theta_terms(self, uv_norm: np.ndarray) -> tuple[float, float, float, float, float]:
        k1, k2, k3, k4 = self._values[4:8]
        r = float(np.hypot(uv_norm[0], uv_norm[1]))
        theta = float(np.arctan(r))
        theta_d = theta + k1 * theta**3 + k2 * theta**5 + k3 * theta**7 + k4 * theta**9
        inv_r = 1.0 / r if r > _SMALL_RADIUS else 1.0
        cdist = theta_d * inv_r if r > _SMALL_RADIUS else 1.0
        return r, theta, theta_d, inv_r, cdist

    def undistort(self, uv_dist: ArrayLike) -> np.ndarray:
        """Invert the fisheye distortion with Newton iterations on the angle."""
        uv = _as_point(uv_dist, "uv_dist")
        fx, fy, cx, cy = self._values[:4]
        k1, k2, k3, k4 = self._values[4:8]
        pw = np.array([(uv[0] - cx) / fx, (uv[1] - cy) / fy])
        theta_d = float(np.hypot(pw[0], pw[1]))
        theta_d = min(max(-np.pi / 2, theta_d), np.pi / 2)

        scale = 1.0
        theta = theta_d
        if theta_d > _SMALL_RADIUS:
            for _ in range(_UNDISTORT_ITERATIONS):
                t2 = theta * theta
                t4 = t2 * t2
                t6 = t4 * t2
                t8 = t6 * t2
                value = theta * (1 + k1 * t2 + k2 * t4 + k3 * t6 + k4 * t8) - theta_d
                slope = 1 + 3 * k1 * t2 + 5 * k2 * t4 + 7 * k3 * t6 + 9 * k4 * t8
                fix = value / slope
                theta -= fix
                if abs(fix) < _UNDISTORT_EPSILON:
                    break
            scale = np.tan(theta) / theta_d

        if (theta_d < 0 < theta) or (theta < 0 < theta_d):
            raise ValueError(f"point {uv.tolist()} cannot be undistorted by this model")
        return pw * scale

    def distort(self, uv_norm: ArrayLike) -> np.ndarray:
        """Apply the fisheye distortion and camera matrix to a normalized point."""
        uvn = _as_point(uv_norm, "uv_norm")
        fx, fy, cx, cy = self._values[:4]
        _, _, _, _, cdist = self._theta_terms(uvn)
        return np.array([fx * uvn[0] * cdist + cx, fy * uvn[1] * cdist + cy])

    def compute_distort_jacobian(
        self, uv_norm: ArrayLike
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(H_dz_dzn, H_dz_dzeta)`` for the fisheye projection."""
        uvn = _as_point(uv_norm, "uv_norm")
        fx, fy = self._values[:2]
        k1, k2, k3, k4 = self._values[4:8]
        r, theta, theta_d, inv_r, cdist = self._theta_terms(uvn)
        xn, yn = uvn

        duv_dxy = np.diag([fx, fy])
        dxy_dxyn = np.eye(2) * (theta_d * inv_r)
        dxy_dr = np.array([[-xn * theta_d * inv_r * inv_r], [-yn * theta_d * inv_r * inv_r]])
        dr_dxyn = np.array([[xn * inv_r, yn * inv_r]])
        dxy_dthd = np.array([[xn * inv_r], [yn * inv_r]])
        dthd_dth = (
            1
            + 3 * k1 * theta**2
            + 5 * k2 * theta**4
            + 7 * k3 * theta**6
            + 9 * k4 * theta**8
        )
        dth_dr = 1.0 / (r * r + 1.0)

        h_dz_dzn = duv_dxy @ (dxy_dxyn + (dxy_dr + dxy_dthd * dthd_dth * dth_dr) @ dr_dxyn)

        powers = np.array([theta**3, theta**5, theta**7, theta**9])
        h_dz_dzeta = np.zeros((2, 8))
        h_dz_dzeta[0, 0] = xn * cdist
        h_dz_dzeta[0, 2] = 1.0
        h_dz_dzeta[0, 4:8] = fx * xn * inv_r * powers
        h_dz_dzeta[1, 1] = yn * cdist
        h_dz_dzeta[1, 3] = 1.0
        h_dz_dzeta[1, 4:8] = fy * yn * inv_r * powers
        return h_dz_dzn, h_dz_dzeta