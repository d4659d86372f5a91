"""Radial-tangential (Brown-Conrady) pinhole camera model.

The intrinsic vector is ``(f_x, f_y, c_x, c_y, k_1, k_2, p_1, p_2)``. This is
the model Kalibr calls ``pinhole-radtan``.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from vinslib.camera import CameraModel, _as_point

__all__ = ["CameraRadtan"]

_UNDISTORT_ITERATIONS = 20
_UNDISTORT_EPSILON = 1e-12


class CameraRadtan(CameraModel):
    """Pinhole camera with radial and tangential lens distortion."""

    def _distort_normalized(self, xn: float, yn: float) -> tuple[float, float]:
        k1, k2, p1, p2 = self._values[4:8]
        r2 = xn * xn + yn * yn
        r4 = r2 * r2
        radial = 1 + k1 * r2 + k2 * r4
        x1 = xn * radial + 2 * p1 * xn * yn + p2 * (r2 + 2 * xn * xn)
        y1 = yn * radial + p1 * (r2 + 2 * yn * yn) + 2 * p2 * xn * yn
        return x1, y1

    def undistort(self, uv_dist: ArrayLike) -> np.ndarray:
        """Invert the distortion by fixed-point iteration on the normalized point."""
        uv = _as_point(uv_dist, "uv_dist")
        fx, fy, cx, cy = self._values[:4]
        k1, k2, p1, p2 = self._values[4:8]
        x0 = (uv[0] - cx) / fx
        y0 = (uv[1] - cy) / fy
        x, y = x0, y0
        for _ in range(_UNDISTORT_ITERATIONS):
            r2 = x * x + y * y
            icdist = 1.0 / (1 + (k2 * r2 + k1) * r2)
            delta_x = 2 * p1 * x * y + p2 * (r2 + 2 * x * x)
            delta_y = p1 * (r2 + 2 * y * y) + 2 * p2 * x * y
            x_new = (x0 - delta_x) * icdist
            y_new = (y0 - delta_y) * icdist
            step = abs(x_new - x) + abs(y_new - y)
            x, y = x_new, y_new
            if step < _UNDISTORT_EPSILON:
                break
        return np.array([x, y])

    def distort(self, uv_norm: ArrayLike) -> np.ndarray:
        """Apply the radtan distortion and camera matrix to a normalized point."""
        uvn = _as_point(uv_norm, "uv_norm")
        fx, fy, cx, cy = self._values[:4]
        x1, y1 = self._distort_normalized(uvn[0], uvn[1])
        return np.array([fx * x1 + cx, fy * y1 + cy])

    def compute_distort_jacobian(
        self, uv_norm: ArrayLike
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(H_dz_dzn, H_dz_dzeta)`` for the radtan projection."""
        uvn = _as_point(uv_norm, "uv_norm")
        fx, fy = self._values[:2]
        k1, k2, p1, p2 = self._values[4:8]
        x, y = float(uvn[0]), float(uvn[1])
        x_2 = x * x
        y_2 = y * y
        x_y = x * y
        r_2 = x_2 + y_2
        r_4 = r_2 * r_2
        radial = 1 + k1 * r_2 + k2 * r_4
        cross = 2 * k1 * x_y + 4 * k2 * x_y * r_2 + 2 * p1 * x + 2 * p2 * y

        h_dz_dzn = np.array(
            [
                [
                    fx * (radial + (2 * k1 * x_2 + 4 * k2 * x_2 * r_2) + 2 * p1 * y + 6 * p2 * x),
                    fx * cross,
                ],
                [
                    fy * cross,
                    fy * (radial + (2 * k1 * y_2 + 4 * k2 * y_2 * r_2) + 2 * p2 * x + 6 * p1 * y),
                ],
            ]
        )

        x1, y1 = self._distort_normalized(x, y)
        h_dz_dzeta = np.zeros((2, 8))
        h_dz_dzeta[0, 0] = x1
        h_dz_dzeta[0, 2] = 1.0
        h_dz_dzeta[0, 4] = fx * x * r_2
        h_dz_dzeta[0, 5] = fx * x * r_4
        h_dz_dzeta[0, 6] = 2 * fx * x_y
        h_dz_dzeta[0, 7] = fx * (r_2 + 2 * x_2)
        h_dz_dzeta[1, 1] = y1
        h_dz_dzeta[1, 3] = 1.0
        h_dz_dzeta[1, 4] = fy * y * r_2
        h_dz_dzeta[1, 5] = fy * y * r_4
        h_dz_dzeta[1, 6] = fy * (r_2 + 2 * y_2)
        h_dz_dzeta[1, 7] = 2 * fy * x_y
        return h_dz_dzn, h_dz_dzeta