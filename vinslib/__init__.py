"""Camera distortion models, inverse-depth Jacobians, measurement system reduction and chi-square gating."""

__version__ = "0.1.0"

__all__ = [
    "camera",
    "camera_radtan",
    "chi_square",
    "feature_jacobian",
    "linear_system",
    "options",
]