import logging

import pytest

from vinslib.chi_square import CHI_SQUARE_TABLE_95TH, chi2_threshold


@pytest.mark.parametrize(
    "dof, expected",
    [
        (1, 3.841459),
        (2, 5.991465),
        (3, 7.814728),
        (9, 16.918978),
        (10, 18.307038),
        (99, 123.225221),
        (100, 124.342113),
        (998, 1072.605834),
        (999, 1073.642651),
    ],
)
def test_pinned_values(dof, expected):
    assert chi2_threshold(dof) == pytest.approx(expected, abs=1.5e-6)


def test_zero_dof_is_zero():
    assert chi2_threshold(0) == 0.0


def test_every_index_returns_table_value():
    for dof, expected in enumerate(CHI_SQUARE_TABLE_95TH):
        assert chi2_threshold(dof) == expected


def test_thresholds_strictly_increasing():
    values = [chi2_threshold(dof) for dof in range(len(CHI_SQUARE_TABLE_95TH))]
    assert all(a < b for a, b in zip(values, values[1:]))


def test_last_entry_is_used_beyond_table():
    assert chi2_threshold(5000) == pytest.approx(1073.642651, abs=1.5e-6)


def test_beyond_table_returns_last_and_warns(caplog):
    beyond = len(CHI_SQUARE_TABLE_95TH) + 25
    with caplog.at_level(logging.WARNING, logger="vinslib.chi_square"):
        value = chi2_threshold(beyond)
    assert value == chi2_threshold(len(CHI_SQUARE_TABLE_95TH) - 1)
    assert str(beyond) in caplog.text


def test_within_table_does_not_warn(caplog):
    with caplog.at_level(logging.WARNING, logger="vinslib.chi_square"):
        value = chi2_threshold(5)
    assert value == pytest.approx(11.070498, abs=1.5e-6)
    assert caplog.records == []


def test_negative_dof_raises():
    with pytest.raises(ValueError):
        chi2_threshold(-1)


@pytest.mark.parametrize("bad", [1.5, "3", True])
def test_non_integer_dof_raises(bad):
    with pytest.raises(TypeError):
        chi2_threshold(bad)