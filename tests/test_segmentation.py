import numpy as np
import open3d as o3d
import pytest

from conftest import line_cloud
from surfpath.config import SegmentationCfg
from surfpath.segmentation import (
    boundary_trajectory,
    detect_boundary_points,
    segment_boundary,
    segment_cloud,
)

KERNEL = (1, 2, 3, 4, 5, 4, 3, 2, 1)


def test_single_line_becomes_one_ordered_chain():
    P = line_cloud(15)
    seg = segment_boundary(P, np.arange(15), 0.03, KERNEL)
    assert len(seg) == 1
    assert seg.longest == 0
    assert sorted(seg.chains[0].tolist()) == list(range(15))
    d = np.diff(seg.chains[0])
    assert np.all(d == 1) or np.all(d == -1)


def test_shuffled_seed_still_grows_both_ways():
    P = line_cloud(15)
    idx = np.array([7, 0, 14, 3, 11, 1, 2, 4, 5, 6, 8, 9, 10, 12, 13])
    seg = segment_boundary(P, idx, 0.015, KERNEL)
    assert len(seg) == 1
    d = np.diff(seg.chains[0])
    assert np.all(d == 1) or np.all(d == -1)


def test_gap_larger_than_radius_splits_chains_and_longest_is_reported():
    a = line_cloud(12)
    b = line_cloud(5) + [1.0, 0.0, 0.0]
    P = np.vstack([b, a])
    seg = segment_boundary(P, np.arange(len(P)), 0.03, KERNEL)
    assert len(seg) == 2
    assert len(seg.chains[seg.longest]) == 12
    # short chains are still returned, only flagged as ineligible
    assert seg.eligible(10) == [seg.longest]


def test_indices_refer_to_the_backing_cloud():
    P = np.vstack([np.full((3, 3), 5.0), line_cloud(4)])
    seg = segment_boundary(P, [3, 4, 5, 6], 0.03, KERNEL)
    assert sorted(seg.chains[0].tolist()) == [3, 4, 5, 6]


def test_empty_and_out_of_range_indices():
    P = line_cloud(5)
    seg = segment_boundary(P, [], 0.03, KERNEL)
    assert len(seg) == 0 and seg.longest == -1
    with pytest.raises(IndexError):
        segment_boundary(P, [0, 9], 0.03, KERNEL)


def test_smoothing_reduces_noise_and_keeps_a_line_straight():
    P = line_cloud(30)
    noisy = P.copy()
    noisy[::2, 1] += 0.002
    noisy[1::2, 1] -= 0.002
    seg = segment_boundary(noisy, np.arange(30), 0.03, KERNEL)
    S = seg.smoothed[0]
    assert S.shape == (30, 3)
    assert np.abs(S[5:-5, 1]).max() < 0.001

    clean = segment_boundary(P, np.arange(30), 0.03, KERNEL).smoothed[0]
    np.testing.assert_allclose(clean[:, 1:], 0.0, atol=1e-12)


def test_accepts_open3d_cloud():
    pc = o3d.geometry.PointCloud(o3d.utility.Vector3dVector(line_cloud(15)))
    seg = segment_boundary(pc, np.arange(15), 0.03, KERNEL)
    assert len(seg.chains[0]) == 15


def test_boundary_trajectory_one_pose_per_chain_point():
    P = line_cloud(15)
    seg = segment_boundary(P, np.arange(15), 0.03, KERNEL)
    traj = boundary_trajectory(seg, 0)
    assert len(traj) == 15
    for T in traj:
        assert T.shape == (4, 4)
        R = T[:3, :3]
        np.testing.assert_allclose(R.T @ R, np.eye(3), atol=1e-9)
        assert np.linalg.det(R) == pytest.approx(1.0)


def test_detect_boundary_points_on_a_grid():
    g = np.arange(10) * 0.01
    xx, yy = np.meshgrid(g, g, indexing="ij")
    P = np.column_stack([xx.ravel(), yy.ravel(), np.zeros(100)])
    found = set(detect_boundary_points(P, SegmentationCfg(boundary_radius=0.025)).tolist())
    perimeter = {i * 10 + j for i in range(10) for j in range(10) if i in (0, 9) or j in (0, 9)}
    assert perimeter <= found
    assert 5 * 10 + 5 not in found
    assert 4 * 10 + 4 not in found


def test_segment_cloud_on_a_line():
    seg = segment_cloud(line_cloud(15))
    assert len(seg) == 1
    assert len(seg.chains[0]) == 15


def test_short_dense_line_is_smoothed_as_open():
    P = line_cloud(15, step=0.002)
    seg = segment_boundary(P, np.arange(15), 0.03, KERNEL)
    assert seg.closed == [False]
    S = seg.smoothed[0]
    lo, hi = sorted([S[0, 0], S[-1, 0]])
    assert lo == pytest.approx(0.04 / 15)
    assert hi == pytest.approx(0.028 - 0.04 / 15)


def test_ring_is_closed():
    t = np.linspace(0.0, 2.0 * np.pi, 40, endpoint=False)
    P = np.column_stack([0.05 * np.cos(t), 0.05 * np.sin(t), np.zeros(40)])
    seg = segment_boundary(P, np.arange(40), 0.03, KERNEL)
    assert len(seg) == 1
    assert seg.closed == [True]


def test_segment_cloud_uses_given_detector():
    calls = []

    def detector(cloud, cfg):
        calls.append(cfg)
        return np.arange(10)

    seg = segment_cloud(line_cloud(15), SegmentationCfg(), detector)
    assert len(calls) == 1
    assert len(seg.chains[0]) == 10
