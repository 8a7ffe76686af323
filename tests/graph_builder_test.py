"""Tests for navigation graph construction."""

import logging
import unittest

import numpy as np
import pytest

from trinav.geombase import GeneralPose3
from trinav.navmesh.graph import GraphBuilder, build_graph
from trinav.navmesh.types import (
    Cell,
    DegenerateTriangleError,
    InvalidMeshError,
    NavGraphConfig,
    Portal,
)

from meshes import grid_mesh, islands_mesh, ring_mesh, square_mesh, strip_mesh, xz


def assert_graph_invariants(test, graph):
    """0..3 соседей, симметричное соседство через один и тот же портал."""
    for cell in graph.cells:
        test.assertLessEqual(len(cell.neighbors), 3)
        for other_index, portal in cell.neighbors.items():
            other = graph.cell(other_index)
            test.assertIn(cell.index, other.neighbors)
            test.assertIs(other.neighbors[cell.index], portal)
            test.assertEqual(len(portal.points), 2)
            test.assertTrue(portal.points <= cell.point_set)
            test.assertTrue(portal.points <= other.point_set)


class BuildAdjacencyTest(unittest.TestCase):
    """Тесты соседства ячеек."""

    def test_single_triangle(self):
        """Один треугольник — нет соседей."""
        graph = build_graph([0, 1, 2], xz([(0, 0), (1, 0), (0, 1)]))
        self.assertEqual(len(graph), 1)
        self.assertEqual(graph.cells[0].neighbors, {})

    def test_two_adjacent_triangles(self):
        """Два треугольника с общей диагональю."""
        graph = build_graph(*square_mesh())

        self.assertEqual(len(graph), 2)
        cell0, cell1 = graph.cells
        self.assertEqual(list(cell0.neighbors), [1])
        self.assertEqual(list(cell1.neighbors), [0])

        portal = cell0.neighbors[1]
        self.assertIs(portal, cell1.neighbors[0])
        self.assertEqual(portal.points, frozenset({(0.0, 0.0), (4.0, 4.0)}))
        self.assertEqual(portal.endpoints(), ((0.0, 0.0), (4.0, 4.0)))
        self.assertEqual(portal.other(0), 1)
        self.assertEqual(portal.other(1), 0)

    def test_centroids(self):
        graph = build_graph(*square_mesh())
        cx, cy = graph.cells[0].centroid
        self.assertAlmostEqual(cx, 8.0 / 3.0)
        self.assertAlmostEqual(cy, 4.0 / 3.0)

    def test_three_triangles_fan(self):
        """Три треугольника веером вокруг общей вершины: у каждого 2 соседа."""
        vertices = xz([(0, 0), (0, 2), (2, -1), (-2, -1)])
        triangles = np.array([
            [0, 1, 2],
            [0, 2, 3],
            [0, 3, 1],
        ], dtype=np.int32)
        graph = build_graph(triangles, vertices)

        for cell in graph.cells:
            self.assertEqual(len(cell.neighbors), 2, f"Cell {cell.index} should have 2 neighbors")
        assert_graph_invariants(self, graph)

    def test_strip_chain(self):
        graph = build_graph(*strip_mesh())
        counts = [len(cell.neighbors) for cell in graph.cells]
        self.assertEqual(counts, [1, 2, 2, 2, 2, 1])
        self.assertEqual(sorted(graph.cells[2].neighbors), [1, 3])

    def test_ring(self):
        graph = build_graph(*ring_mesh())
        for cell in graph.cells:
            self.assertEqual(len(cell.neighbors), 2)
        self.assertEqual(sorted(graph.cells[0].neighbors), [1, 3])
        assert_graph_invariants(self, graph)

    def test_grid_invariants(self):
        graph = build_graph(*grid_mesh(4))
        self.assertEqual(len(graph), 32)
        self.assertIn(3, [len(cell.neighbors) for cell in graph.cells])
        assert_graph_invariants(self, graph)

    def test_islands_not_connected(self):
        graph = build_graph(*islands_mesh())
        self.assertEqual([len(cell.neighbors) for cell in graph.cells], [0, 0])

    def test_shared_vertex_is_not_adjacency(self):
        """Соседство только по ребру, общей вершины мало."""
        vertices = xz([(0, 0), (1, 0), (0, 1), (-1, 0), (0, -1)])
        graph = build_graph([0, 1, 2, 0, 3, 4], vertices)
        self.assertEqual([len(cell.neighbors) for cell in graph.cells], [0, 0])

    def test_split_vertices_are_welded(self):
        """Разные индексы с одинаковыми координатами — одна вершина."""
        vertices = xz([(0, 0), (4, 0), (4, 4), (0, 0), (4, 4), (0, 4)])
        graph = build_graph([0, 1, 2, 3, 4, 5], vertices)
        self.assertEqual(list(graph.cells[0].neighbors), [1])

    def test_weld_tolerance(self):
        vertices = xz([(0, 0), (4, 0), (4, 4), (1e-9, 0), (4, 4 + 1e-9), (0, 4)])
        graph = build_graph([0, 1, 2, 3, 4, 5], vertices)
        self.assertEqual(list(graph.cells[0].neighbors), [1])

    def test_non_manifold_edge_keeps_neighbor_limit(self):
        """Пять треугольников на одном ребре: не больше трёх соседей у каждого."""
        vertices = xz([(0, 0), (2, 0), (1, 1), (1, -1), (1, 2), (1, -2), (1, 3)])
        triangles = [0, 1, 2, 0, 1, 3, 0, 1, 4, 0, 1, 5, 0, 1, 6]
        graph = build_graph(triangles, vertices)

        self.assertEqual(len(graph), 5)
        self.assertEqual(len(graph.cells[4].neighbors), 0)
        assert_graph_invariants(self, graph)

    def test_height_is_dropped(self):
        vertices = np.array([
            [0.0, 5.0, 0.0],
            [4.0, -3.0, 0.0],
            [4.0, 1.0, 4.0],
        ])
        graph = build_graph([0, 1, 2], vertices)
        self.assertEqual(graph.cells[0].points, ((0.0, 0.0), (4.0, 0.0), (4.0, 4.0)))


class TransformTest(unittest.TestCase):
    """Трансформация локальных координат меша в мировые."""

    def test_translation(self):
        transform = GeneralPose3.translation(10.0, 3.0, 5.0)
        graph = build_graph(*square_mesh(), transform=transform)

        points = set(graph.cells[0].points)
        self.assertEqual(points, {(10.0, 5.0), (14.0, 5.0), (14.0, 9.0)})

    def test_matrix_transform(self):
        matrix = np.eye(4)
        matrix[:3, 3] = [1.0, 0.0, -2.0]
        matrix[0, 0] = 2.0
        graph = build_graph(*square_mesh(), transform=matrix)

        self.assertEqual(set(graph.cells[0].points), {(1.0, -2.0), (9.0, -2.0), (9.0, 2.0)})

    def test_rotation_about_up_axis(self):
        transform = GeneralPose3.rotation(np.array([0.0, 1.0, 0.0]), np.pi / 2)
        graph = build_graph([0, 1, 2], xz([(0, 0), (1, 0), (0, 1)]), transform=transform)

        # (x, z) -> (z, -x) при повороте на +90 градусов вокруг Y
        self.assertEqual(set(graph.cells[0].points), {(0.0, 0.0), (0.0, -1.0), (1.0, 0.0)})


class InvalidMeshTest(unittest.TestCase):
    """Некорректный вход — немедленная ошибка."""

    def test_length_not_divisible_by_three(self):
        with self.assertRaises(InvalidMeshError):
            GraphBuilder([0, 1, 2, 3], xz([(0, 0), (1, 0), (0, 1), (1, 1)]))

    def test_index_out_of_range(self):
        with self.assertRaises(InvalidMeshError):
            GraphBuilder([0, 1, 3], xz([(0, 0), (1, 0), (0, 1)]))

    def test_negative_index(self):
        with self.assertRaises(InvalidMeshError):
            GraphBuilder([0, -1, 2], xz([(0, 0), (1, 0), (0, 1)]))

    def test_float_indices(self):
        with self.assertRaises(InvalidMeshError):
            GraphBuilder([0.0, 1.0, 2.0], xz([(0, 0), (1, 0), (0, 1)]))

    def test_vertices_must_be_3d(self):
        with self.assertRaises(InvalidMeshError):
            GraphBuilder([0, 1, 2], np.array([[0, 0], [1, 0], [0, 1]], dtype=float))

    def test_non_finite_vertices(self):
        vertices = xz([(0, 0), (1, 0), (0, 1)])
        vertices[1, 0] = np.nan
        with self.assertRaises(InvalidMeshError):
            GraphBuilder([0, 1, 2], vertices)

    def test_invalid_mesh_error_is_value_error(self):
        with self.assertRaises(ValueError):
            GraphBuilder([0, 1], xz([(0, 0), (1, 0)]))

    def test_empty_mesh(self):
        graph = build_graph([], [])
        self.assertTrue(graph.ready)
        self.assertEqual(len(graph), 0)


class DegenerateTriangleTest(unittest.TestCase):

    def test_repeated_vertex_raises(self):
        builder = GraphBuilder([0, 1, 1], xz([(0, 0), (1, 0), (0, 1)]))
        with self.assertRaises(DegenerateTriangleError) as ctx:
            builder.run()
        self.assertEqual(ctx.exception.triangle, 0)
        self.assertFalse(builder.graph.ready)

    def test_collinear_raises(self):
        with self.assertRaises(DegenerateTriangleError):
            build_graph([0, 1, 2], xz([(0, 0), (1, 1), (2, 2)]))

    def test_vertical_triangle_is_degenerate(self):
        """Треугольник в вертикальной плоскости вырождается после проекции."""
        vertices = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        with self.assertRaises(DegenerateTriangleError):
            build_graph([0, 1, 2], vertices)

    def test_skip_policy(self):
        triangles, vertices = square_mesh()
        vertices = np.vstack([vertices, xz([(10, 10), (11, 11)])])
        triangles = triangles + [4, 5, 5]

        builder = GraphBuilder(triangles, vertices, config=NavGraphConfig(on_degenerate="skip"))
        graph = builder.run()

        self.assertTrue(graph.ready)
        self.assertEqual(len(graph), 2)
        self.assertEqual(builder.skipped_triangles, [2])

    def test_skip_keeps_triangle_numbers(self):
        vertices = xz([(0, 0), (1, 1), (2, 2), (0, 0), (4, 0), (4, 4)])
        config = NavGraphConfig(on_degenerate="skip")
        graph = build_graph([0, 1, 2, 3, 4, 5], vertices, config=config)

        self.assertEqual(len(graph), 1)
        self.assertEqual(graph.cells[0].index, 0)
        self.assertEqual(graph.cells[0].triangle, 1)

    def test_bad_policy(self):
        with self.assertRaises(ValueError):
            NavGraphConfig(on_degenerate="ignore")


class IncrementalBuildTest(unittest.TestCase):
    """Построение по одному треугольнику за шаг."""

    def test_not_ready_until_last_step(self):
        builder = GraphBuilder(*strip_mesh())
        graph = builder.graph

        for _ in range(5):
            self.assertFalse(builder.step())
            self.assertFalse(graph.ready)
            self.assertEqual(graph.cells, ())
            self.assertEqual(len(graph), 0)
            self.assertEqual(graph.portals(), [])

        self.assertTrue(builder.step())
        self.assertTrue(graph.ready)
        self.assertEqual(len(graph), 6)
        self.assertEqual(builder.progress, 1.0)

    def test_step_after_done(self):
        builder = GraphBuilder(*square_mesh())
        builder.run()
        self.assertTrue(builder.step())
        self.assertEqual(len(builder.graph), 2)

    def test_progress(self):
        builder = GraphBuilder(*square_mesh())
        self.assertEqual(builder.progress, 0.0)
        builder.step()
        self.assertEqual(builder.progress, 0.5)

    def test_steps_iterator(self):
        builder = GraphBuilder(*strip_mesh())
        self.assertEqual(list(builder.steps()), [0, 1, 2, 3, 4, 5])
        self.assertTrue(builder.done)

    def test_empty_mesh_single_step(self):
        builder = GraphBuilder([], np.zeros((0, 3)))
        self.assertFalse(builder.graph.ready)
        self.assertTrue(builder.step())
        self.assertTrue(builder.graph.ready)


class BackgroundBuildTest(unittest.TestCase):

    def test_background_build(self):
        builder = GraphBuilder(*grid_mesh(5))
        builder.start_background()
        self.assertTrue(builder.wait_ready(timeout=10.0))
        self.assertEqual(len(builder.result()), 50)

    def test_background_error_is_reraised(self):
        builder = GraphBuilder([0, 1, 2], xz([(0, 0), (1, 1), (2, 2)]))
        builder.start_background()
        with self.assertRaises(DegenerateTriangleError):
            builder.wait_ready(timeout=10.0)
        self.assertFalse(builder.graph.ready)

    def test_start_twice(self):
        builder = GraphBuilder(*square_mesh())
        builder.start_background()
        builder.wait_ready(timeout=10.0)
        with self.assertRaises(RuntimeError):
            builder.start_background()


class DebugIntrospectionTest(unittest.TestCase):

    def test_portals_and_links(self):
        graph = build_graph(*strip_mesh())
        self.assertEqual(len(graph.portals()), 5)
        links = graph.debug_links()
        self.assertEqual(len(links), 5)
        self.assertEqual(links[0], (graph.cells[0].centroid, graph.cells[1].centroid))

    def test_cell_outlines(self):
        graph = build_graph(*square_mesh())
        outlines = graph.cell_outlines()
        self.assertEqual(len(outlines), 2)
        self.assertEqual(set(outlines[0]), {(0.0, 0.0), (4.0, 0.0), (4.0, 4.0)})


def test_skip_policy_logs_warning(caplog):
    config = NavGraphConfig(on_degenerate="skip")
    with caplog.at_level(logging.WARNING, logger="trinav"):
        build_graph([0, 1, 2], xz([(0, 0), (1, 1), (2, 2)]), config=config)
    assert "degenerate triangle 0" in caplog.text


def test_opposite_point():
    graph = build_graph(*square_mesh())
    portal = graph.cells[0].neighbors[1]
    assert graph.cells[0].opposite_point(portal) == (4.0, 0.0)
    assert graph.cells[1].opposite_point(portal) == (0.0, 4.0)


def test_opposite_point_foreign_portal():
    portal = Portal(points=frozenset({(0.0, 0.0), (1.0, 1.0)}), cells=(0, 1))
    cell = Cell(index=5, triangle=5, points=((0.0, 0.0), (1.0, 1.0), (1.0, 1.0)), centroid=(0.0, 0.0))
    with pytest.raises(ValueError):
        cell.opposite_point(portal)
