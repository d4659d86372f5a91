# vinslib

Building blocks for visual-inertial state estimators, written on top of NumPy:

- pinhole camera models with equidistant fisheye (`CameraEquidistant`) and
  radial-tangential (`CameraRadtan`) distortion, each able to distort,
  undistort and give the Jacobians of the distortion with respect to the
  normalized coordinates and to the eight intrinsic parameters
  `(fx, fy, cx, cy, k1, k2, k3|p1, k4|p2)`;
- Jacobians of a 3D feature position with respect to its inverse-depth
  representations;
- reduction of stacked linear measurement systems: left-nullspace projection
  of the feature Jacobian and measurement compression, both by Givens
  rotations;
- the 95th percentile chi-square table used for gating measurements;
- updater options (chi-square multiplier and pixel noise).

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Usage

### Camera models

```python
from vinslib.camera import CameraEquidistant
from vinslib.camera_radtan import CameraRadtan

calib = [458.654, 457.296, 367.215, 248.375,
         -0.28340811, 0.07395907, 0.00019359, 1.76187114e-05]
cam = CameraRadtan(calib)

uv = cam.distort([0.1, -0.05])          # raw pixel coordinates
back = cam.undistort(uv)                 # normalized coordinates again
H_dz_dzn, H_dz_dzeta = cam.compute_distort_jacobian([0.1, -0.05])  # 2x2, 2x8
```

`CameraEquidistant` works the same way for fisheye lenses; its `undistort`
raises `ValueError` for a point the model cannot invert.

Both classes derive from the abstract `CameraModel`. `set_value` replaces
the calibration of an existing model (it must hold exactly eight values,
otherwise `ValueError`). The read-only properties `value`, `K` and `D` give
copies of the intrinsic vector, the 3x3 camera matrix and the four distortion
coefficients.

### Chi-square gating

`CHI_SQUARE_TABLE_95TH` holds the 95th percentile of the chi-square
distribution for 0 to 999 degrees of freedom (entry 0 is `0.0`), rounded to
six decimals. `chi2_threshold(dof)` looks a value up; past the end of the
table it logs a warning and returns the last entry. A negative `dof` raises
`ValueError`, a non-integer one `TypeError`.

```python
from vinslib.chi_square import chi2_threshold
from vinslib.options import UpdaterOptions

opts = UpdaterOptions(chi2_multiplier=5.0, sigma_pix=1.5).with_squared_noise()
accept = chi2 <= opts.chi2_multiplier * chi2_threshold(len(res))
print(opts.summary())
```

`UpdaterOptions` is a frozen dataclass with `chi2_multiplier` (default 5.0),
`sigma_pix` (1.0) and `sigma_pix_sq` (1.0). `with_squared_noise()` returns a
copy whose `sigma_pix_sq` equals `sigma_pix ** 2`.

### Reducing a measurement system

```python
from vinslib.linear_system import nullspace_project, measurement_compress

H_x, res = nullspace_project(H_f, H_x, res)   # drops H_f.shape[1] rows
H_x, res = measurement_compress(H_x, res)     # at most H_x.shape[1] rows
```

Both functions return new arrays and leave their inputs untouched.
`measurement_compress` returns a fat or square `H_x` unchanged. Mismatched
row counts raise `ValueError`.

### Inverse-depth Jacobians

```python
from vinslib.feature_jacobian import (
    full_inverse_depth_jacobian,
    msckf_inverse_depth_jacobian,
    single_inverse_depth_jacobian,
)

J_full = full_inverse_depth_jacobian([0.3, -0.2, 4.0])     # 3x3, wrt (theta, phi, rho)
J_msckf = msckf_inverse_depth_jacobian([0.3, -0.2, 4.0])   # 3x3, wrt (alpha, beta, rho)
J_single = single_inverse_depth_jacobian([0.3, -0.2, 4.0]) # 3x1, wrt rho
```

A position at the origin (full form) or with zero depth (the other two)
raises `ValueError`.

## What this package does not do

It holds no filter state, covariance or IMU propagation, performs no feature
triangulation or tracking, and has no EKF update step or command-line
program. It supplies the camera models, Jacobians, system reduction and
gating values such a filter is built from.