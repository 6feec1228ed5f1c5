import numpy as np
import pytest

from surfpath.boundary import (
    as_boundary,
    check_boundary,
    circumference,
    filter_boundaries,
    filter_density,
)
from surfpath.config import BoundaryFilterCfg
from utils.error_tracker import BoundaryError

SQUARE = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])


def test_circumference_closes_loop():
    assert circumference(SQUARE) == pytest.approx(4.0)
    assert circumference(SQUARE[:1]) == 0.0


def test_closing_duplicate_point_is_dropped():
    closed = np.vstack([SQUARE, SQUARE[:1]])
    assert len(as_boundary(closed)) == 4
    assert circumference(as_boundary(closed)) == pytest.approx(4.0)


def test_check_boundary_rejects_bowtie_and_degenerate():
    bowtie = np.array([[0, 0], [1, 1], [1, 0], [0, 1]], dtype=float)
    assert check_boundary(SQUARE)
    assert not check_boundary(bowtie)
    assert not check_boundary(SQUARE[:2])
    assert not check_boundary(np.array([[0, 0], [0, 0], [1, 0], [1, 1]], dtype=float))


def test_short_boundaries_are_excluded():
    small = SQUARE * 0.01  # circumference 0.04
    out = filter_boundaries([small, SQUARE], BoundaryFilterCfg(min_boundary_length=0.1))
    assert len(out) == 1
    assert circumference(out[0]) == pytest.approx(4.0)


def test_kept_boundary_is_reversed_and_input_untouched():
    before = SQUARE.copy()
    out = filter_boundaries([SQUARE])
    np.testing.assert_allclose(out[0], SQUARE[::-1])
    np.testing.assert_array_equal(SQUARE, before)
    assert out[0] is not SQUARE


def test_ill_formed_boundary_is_skipped_not_fatal():
    bowtie = np.array([[0, 0], [1, 1], [1, 0], [0, 1]], dtype=float)
    assert filter_boundaries([bowtie]) == []


def test_density_filter_merges_close_points():
    P = np.array([[0.0, 0.0], [0.05, 0.0], [1.0, 0.0], [1.0, 1.0], [1.0, 1.02], [0.0, 1.0]])
    thin = filter_density(P, 0.1)
    np.testing.assert_allclose(thin, P[[0, 2, 3, 5]])

    out = filter_boundaries([P], BoundaryFilterCfg(min_point_spacing=0.1))
    np.testing.assert_allclose(out[0], P[[0, 2, 3, 5]][::-1])


def test_boundary_too_sparse_after_density_filter_is_dropped():
    tri = np.array([[0.0, 0.0], [0.3, 0.0], [0.0, 0.3]])
    cfg = BoundaryFilterCfg(min_boundary_length=0.1, min_point_spacing=0.5)
    assert filter_boundaries([tri], cfg) == []


def test_malformed_array_is_skipped_and_as_boundary_raises():
    with pytest.raises(BoundaryError):
        as_boundary(np.zeros(5))
    out = filter_boundaries([np.zeros(5), SQUARE])
    assert len(out) == 1


def test_density_filter_checks_closing_pair():
    P = np.vstack([SQUARE, [[0.0, 0.05]]])
    np.testing.assert_allclose(filter_density(P, 0.1), SQUARE)
