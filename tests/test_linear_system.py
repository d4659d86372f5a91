import numpy as np
import pytest

from vinslib.linear_system import measurement_compress, nullspace_project


@pytest.fixture
def system():
    rng = np.random.default_rng(42)
    H_f = rng.normal(size=(10, 3))
    H_x = rng.normal(size=(10, 12))
    res = rng.normal(size=10)
    return H_f, H_x, res


def _complement_projector(H_f):
    return np.eye(H_f.shape[0]) - H_f @ np.linalg.pinv(H_f)


def test_nullspace_project_shapes(system):
    H_f, H_x, res = system
    hx, r = nullspace_project(H_f, H_x, res)
    assert hx.shape == (7, 12)
    assert r.shape == (7,)


def test_nullspace_project_preserves_projected_gram(system):
    H_f, H_x, res = system
    hx, r = nullspace_project(H_f, H_x, res)
    proj = _complement_projector(H_f)
    np.testing.assert_allclose(hx.T @ hx, H_x.T @ proj @ H_x, atol=1e-9)
    np.testing.assert_allclose(hx.T @ r, H_x.T @ proj @ res, atol=1e-9)
    np.testing.assert_allclose(r @ r, res @ proj @ res, atol=1e-9)


def test_nullspace_project_removes_feature_contribution(system):
    H_f, H_x, _ = system
    res = H_f @ np.array([0.5, -1.0, 2.0])
    _, r = nullspace_project(H_f, H_x, res)
    np.testing.assert_allclose(r, np.zeros(7), atol=1e-10)


def test_nullspace_project_accepts_column_residual(system):
    H_f, H_x, res = system
    _, r1 = nullspace_project(H_f, H_x, res)
    _, r2 = nullspace_project(H_f, H_x, res.reshape(-1, 1))
    np.testing.assert_allclose(np.ravel(r1), np.ravel(r2))


def test_nullspace_project_leaves_inputs_untouched(system):
    H_f, H_x, res = system
    copies = (H_f.copy(), H_x.copy(), res.copy())
    nullspace_project(H_f, H_x, res)
    np.testing.assert_array_equal(H_f, copies[0])
    np.testing.assert_array_equal(H_x, copies[1])
    np.testing.assert_array_equal(res, copies[2])


def test_nullspace_project_row_mismatch_raises(system):
    H_f, H_x, res = system
    with pytest.raises(ValueError):
        nullspace_project(H_f, H_x[:-1], res)
    with pytest.raises(ValueError):
        nullspace_project(H_f, H_x, res[:-1])


def test_nullspace_project_too_few_rows_raises():
    with pytest.raises(ValueError):
        nullspace_project(np.ones((2, 3)), np.ones((2, 4)), np.ones(2))


def test_measurement_compress_fat_matrix_unchanged():
    H_x = np.arange(12, dtype=float).reshape(3, 4)
    res = np.array([1.0, 2.0, 3.0])
    hx, r = measurement_compress(H_x, res)
    np.testing.assert_array_equal(hx, H_x)
    np.testing.assert_array_equal(r, res)


def test_measurement_compress_tall_matrix():
    rng = np.random.default_rng(7)
    H_x = rng.normal(size=(20, 5))
    res = rng.normal(size=20)
    hx, r = measurement_compress(H_x, res)
    assert hx.shape == (5, 5)
    assert r.shape == (5,)
    np.testing.assert_allclose(np.tril(hx, -1), np.zeros((5, 5)), atol=1e-10)
    np.testing.assert_allclose(hx.T @ hx, H_x.T @ H_x, atol=1e-9)
    np.testing.assert_allclose(hx.T @ r, H_x.T @ res, atol=1e-9)


def test_measurement_compress_same_least_squares_solution():
    rng = np.random.default_rng(3)
    H_x = rng.normal(size=(15, 4))
    res = rng.normal(size=15)
    hx, r = measurement_compress(H_x, res)
    full = np.linalg.lstsq(H_x, res, rcond=None)[0]
    small = np.linalg.solve(hx, r)
    np.testing.assert_allclose(small, full, atol=1e-9)


def test_measurement_compress_single_column():
    hx, r = measurement_compress(np.array([[3.0], [4.0]]), np.array([1.0, 2.0]))
    np.testing.assert_allclose(hx, [[5.0]])
    np.testing.assert_allclose(r, [2.2])


def test_measurement_compress_row_mismatch_raises():
    with pytest.raises(ValueError):
        measurement_compress(np.ones((5, 2)), np.ones(4))