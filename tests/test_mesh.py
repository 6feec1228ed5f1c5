import numpy as np
import pytest

from conftest import make_mesh, square_mesh
from surfpath.boundary import circumference
from surfpath.mesh import MeshImporter, boundary_edges, link_loops


def _annulus():
    # 3x3 outer square with a 1x1 hole, 8 quads as 16 triangles
    g = [0.0, 1.0, 2.0, 3.0]
    V = [[x, y, 0.0] for y in g for x in g]
    F = []
    for j in range(3):
        for i in range(3):
            if i == 1 and j == 1:
                continue
            a = j * 4 + i
            F += [[a, a + 1, a + 5], [a, a + 5, a + 4]]
    return make_mesh(V, F)


def test_boundary_edges_of_two_triangles():
    E = boundary_edges(np.array([[0, 1, 2], [0, 2, 3]]))
    assert sorted(map(tuple, E.tolist())) == [(0, 1), (0, 3), (1, 2), (2, 3)]


def test_link_loops_drops_open_runs():
    assert link_loops(np.array([[0, 1], [1, 2]])) == []
    (loop,) = link_loops(np.array([[0, 1], [1, 2], [0, 2]]))
    assert sorted(loop) == [0, 1, 2]


def test_square_mesh_pose_and_boundary():
    imp = MeshImporter()
    assert imp.calculate_simple_boundary(square_mesh(z=0.5, size=2.0))
    np.testing.assert_allclose(imp.pose.position, [1.0, 1.0, 0.5], atol=1e-9)
    # surface normal is world +Z
    R = imp.pose.as_matrix()[:3, :3]
    np.testing.assert_allclose(R[:, 2], [0.0, 0.0, 1.0], atol=1e-9)

    (bnd,) = imp.boundaries
    assert bnd.shape == (4, 2)
    assert circumference(bnd) == pytest.approx(8.0)
    # local frame is centred on the surface
    np.testing.assert_allclose(bnd.mean(0), [0.0, 0.0], atol=1e-9)


def test_annulus_outer_loop_first():
    imp = MeshImporter()
    assert imp.calculate_simple_boundary(_annulus())
    assert len(imp.boundaries) == 2
    assert circumference(imp.boundaries[0]) == pytest.approx(12.0)
    assert circumference(imp.boundaries[1]) == pytest.approx(4.0)


def test_empty_mesh_is_rejected():
    imp = MeshImporter()
    assert not imp.calculate_simple_boundary(make_mesh(np.zeros((0, 3)), np.zeros((0, 3))))
    assert imp.boundaries == []
