"""Givens-rotation tools that reshape stacked measurement systems.

Both functions work on a linear system ``res = H_x * dx + H_f * df + n``.
They return new arrays and leave their inputs untouched.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike

__all__ = ["nullspace_project", "measurement_compress"]


def _givens(p: float, q: float) -> tuple[float, float]:
    """Return ``(c, s)`` so that ``[c*p - s*q, s*p + c*q] == [r, 0]``."""
    if q == 0.0:
        return (-1.0 if p < 0.0 else 1.0), 0.0
    if p == 0.0:
        return 0.0, (1.0 if q < 0.0 else -1.0)
    if abs(p) > abs(q):
        t = q / p
        u = math.sqrt(1.0 + t * t)
        if p < 0.0:
            u = -u
        c = 1.0 / u
        return c, -t * c
    t = p / q
    u = math.sqrt(1.0 + t * t)
    if q < 0.0:
        u = -u
    s = -1.0 / u
    return -t * s, s


def _rotate_rows(mat: np.ndarray, top: int, c: float, s: float) -> None:
    upper = mat[top].copy()
    lower = mat[top + 1].copy()
    mat[top] = c * upper - s * lower
    mat[top + 1] = s * upper + c * lower


def _as_matrix(value: ArrayLike, name: str) -> np.ndarray:
    arr = np.array(value, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"{name} must be a 2-D matrix, got {arr.ndim} dimensions")
    return arr


def _as_vector(value: ArrayLike, name: str) -> np.ndarray:
    arr = np.array(value, dtype=np.float64)
    if arr.ndim == 2 and arr.shape[1] == 1:
        arr = arr[:, 0].copy()
    if arr.ndim != 1:
        raise ValueError(f"{name} must be a vector")
    return arr


def nullspace_project(
    H_f: ArrayLike, H_x: ArrayLike, res: ArrayLike
) -> tuple[np.ndarray, np.ndarray]:
    """Project the left nullspace of ``H_f`` onto ``H_x`` and ``res``.

    Removes the dependency of the system on the feature error. Returns the
    projected ``(H_x, res)``, which have ``H_f.shape[1]`` fewer rows.
    """
    hf = _as_matrix(H_f, "H_f")
    hx = _as_matrix(H_x, "H_x")
    r = _as_vector(res, "res")
    rows, cols = hf.shape
    if hx.shape[0] != rows or r.shape[0] != rows:
        raise ValueError(
            f"row counts differ: H_f {rows}, H_x {hx.shape[0]}, res {r.shape[0]}"
        )
    if rows < cols:
        raise ValueError(f"H_f needs at least as many rows as columns, got {hf.shape}")

    rvec = r.reshape(-1, 1)
    for n in range(cols):
        for m in range(rows - 1, n, -1):
            c, s = _givens(hf[m - 1, n], hf[m, n])
            _rotate_rows(hf[:, n:], m - 1, c, s)
            _rotate_rows(hx, m - 1, c, s)
            _rotate_rows(rvec, m - 1, c, s)

    return hx[cols:].copy(), rvec[cols:, 0].copy()


def measurement_compress(
    H_x: ArrayLike, res: ArrayLike
) -> tuple[np.ndarray, np.ndarray]:
    """Compress a tall system to as many rows as ``H_x`` has columns.

    A fat or square ``H_x`` is returned unchanged (as copies).
    """
    hx = _as_matrix(H_x, "H_x")
    r = _as_vector(res, "res")
    rows, cols = hx.shape
    if r.shape[0] != rows:
        raise ValueError(f"row counts differ: H_x {rows}, res {r.shape[0]}")
    if rows <= cols:
        return hx, r

    rvec = r.reshape(-1, 1)
    for n in range(cols):
        for m in range(rows - 1, n, -1):
            c, s = _givens(hx[m - 1, n], hx[m, n])
            _rotate_rows(hx[:, n:], m - 1, c, s)
            _rotate_rows(rvec, m - 1, c, s)

    keep = min(rows, cols)
    return hx[:keep].copy(), rvec[:keep, 0].copy()