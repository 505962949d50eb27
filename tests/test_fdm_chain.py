# tests/test_fdm_chain.py
"""
CHAIN TESTS: Hand-Checkable Force Density Solutions
===================================================

A single unknown node hanging between two supports:

    (0,0,0) ---- node 1 ---- (2,0,0)
     node 0                  node 2

With force density q on both branches and load p at node 1:

    2q · x1 = q · (x0 + x2)   ->  x1 = 1
    2q · z1 = pz              ->  z1 = pz / (2q)

Each branch then has length L = sqrt(1 + z1²), force F = q · L, and
ΣFL = 2 · q · L².
"""

import pytest
import numpy as np

from mini_fdm import (
    TopologyGraph, EquilibriumSolver, SolverConfig,
    ShapeMismatchError, SingularSystemError,
)


def make_chain_solver(**config_kwargs):
    graph = TopologyGraph(3, [0, 2])
    graph.add_branch(0, 1)
    graph.add_branch(1, 2)
    graph.build()

    config = SolverConfig(**config_kwargs) if config_kwargs else None
    solver = EquilibriumSolver(graph, config)
    solver.set_boundary_conditions([0.0, 0.0, 2.0], [0.0, 0.0, 0.0], [0.0, 0.0, 0.0])
    return solver


class TestChainSolution:

    def test_default_unit_load(self):
        solver = make_chain_solver()
        np.testing.assert_array_equal(solver.get_load(), [0.0, 0.0, -1.0])

        result = solver.solve()

        np.testing.assert_allclose(result.state()[1], [1.0, 0.0, -0.5], atol=1e-12)
        np.testing.assert_allclose(result.lengths, [np.sqrt(1.25)] * 2, rtol=1e-12)
        np.testing.assert_allclose(result.forces, [np.sqrt(1.25)] * 2, rtol=1e-12)
        assert np.isclose(result.sigma_fl, 2.5, rtol=1e-12)
        assert np.isclose(solver.sigma_fl(), 2.5, rtol=1e-12)
        assert result.residual < 1e-12

    def test_force_density_scales_sag_and_forces(self):
        solver = make_chain_solver()
        solver.set_force_densities([2.0, 2.0])
        result = solver.solve()

        L = np.sqrt(1.0 + 0.25 ** 2)
        np.testing.assert_allclose(result.state()[1], [1.0, 0.0, -0.25], atol=1e-12)
        np.testing.assert_allclose(result.forces, [2.0 * L, 2.0 * L], rtol=1e-12)
        assert np.isclose(result.sigma_fl, 4.25, rtol=1e-12)

    def test_scalar_force_density(self):
        solver = make_chain_solver()
        solver.set_force_densities(2.0)
        np.testing.assert_array_equal(solver.force_densities, [2.0, 2.0])

    def test_unequal_force_densities_shift_node(self):
        """q0 = 3, q1 = 1: x1 = (3·0 + 1·2) / 4 = 0.5."""
        solver = make_chain_solver()
        solver.set_force_densities([3.0, 1.0])
        result = solver.solve()
        assert np.isclose(result.state()[1, 0], 0.5)

    def test_horizontal_load(self):
        solver = make_chain_solver()
        solver.set_load((1.0, 0.0, 0.0))
        result = solver.solve()
        np.testing.assert_allclose(result.state()[1], [1.5, 0.0, 0.0], atol=1e-12)

    def test_nodal_loads_replace_uniform_load(self):
        solver = make_chain_solver()
        loads = np.zeros((3, 3))
        loads[1] = [0.0, 0.0, -3.0]
        loads[0] = [100.0, 100.0, 100.0]  # fixed node, ignored
        solver.set_nodal_loads(loads)

        result = solver.solve()
        np.testing.assert_allclose(result.state()[1], [1.0, 0.0, -1.5], atol=1e-12)
        np.testing.assert_allclose(result.loads, [[0.0, 0.0, -3.0]])

        # Setting a uniform load clears them again
        solver.set_load((0.0, 0.0, -1.0))
        assert solver.nodal_loads is None
        assert np.isclose(solver.solve().state()[1, 2], -0.5)

    def test_config_default_load(self):
        solver = make_chain_solver(default_load=(0.0, 0.0, -4.0))
        assert np.isclose(solver.solve().state()[1, 2], -2.0)

    def test_config_default_force_density(self):
        solver = make_chain_solver(default_force_density=4.0)
        np.testing.assert_array_equal(solver.force_densities, [4.0, 4.0])


class TestChainReResolve:

    def test_load_change_recomputes_everything(self):
        solver = make_chain_solver()
        first = solver.solve()

        solver.set_load((0.0, 0.0, -2.0))
        second = solver.solve()

        assert first is not second
        assert np.isclose(first.state()[1, 2], -0.5)
        assert np.isclose(second.state()[1, 2], -1.0)
        assert solver.result is second

    def test_boundary_change_moves_solution(self):
        solver = make_chain_solver()
        solver.set_boundary_conditions([0.0, 0.0, 4.0], [0.0, 0.0, 0.0], [0.0, 0.0, 2.0])
        result = solver.solve()
        np.testing.assert_allclose(result.state()[1], [2.0, 0.0, 0.5], atol=1e-12)

    def test_copy_shares_inputs_not_result(self):
        solver = make_chain_solver()
        solver.set_force_densities(2.0)
        first = solver.solve()

        other = solver.copy()
        assert other.graph is solver.graph
        assert not other.has_solution
        assert np.isclose(other.solve().state()[1, 2], -0.25)

        other.set_load((0.0, 0.0, -4.0))
        other.set_force_densities(1.0)
        other.solve()

        np.testing.assert_array_equal(solver.get_load(), [0.0, 0.0, -1.0])
        np.testing.assert_array_equal(solver.force_densities, [2.0, 2.0])
        assert solver.result is first


class TestChainErrors:

    def test_sigma_fl_zero_before_solve(self):
        solver = make_chain_solver()
        assert solver.sigma_fl() == 0.0
        assert not solver.has_solution

    def test_state_before_solve_rejected(self):
        solver = make_chain_solver()
        with pytest.raises(RuntimeError):
            solver.state()

    def test_solve_without_boundary_conditions_rejected(self):
        graph = TopologyGraph(2, [0])
        graph.add_branch(0, 1)
        graph.build()
        with pytest.raises(RuntimeError):
            EquilibriumSolver(graph).solve()

    def test_unbuilt_graph_rejected(self):
        graph = TopologyGraph(2, [0])
        graph.add_branch(0, 1)
        with pytest.raises(RuntimeError):
            EquilibriumSolver(graph)

    @pytest.mark.parametrize("x, y, z", [
        ([0.0, 1.0], [0.0, 0.0, 0.0], [0.0, 0.0, 0.0]),
        ([0.0, 1.0, 2.0], [0.0, 0.0, 0.0, 0.0], [0.0, 0.0, 0.0]),
        ([0.0, 1.0, 2.0], [0.0, 0.0, 0.0], [[0.0, 0.0, 0.0]]),
    ])
    def test_boundary_length_mismatch_rejected(self, x, y, z):
        solver = make_chain_solver()
        with pytest.raises(ShapeMismatchError):
            solver.set_boundary_conditions(x, y, z)

    def test_shape_mismatch_is_value_error(self):
        assert issubclass(ShapeMismatchError, ValueError)

    def test_non_finite_fixed_position_rejected(self):
        solver = make_chain_solver()
        with pytest.raises(ValueError):
            solver.set_boundary_conditions([np.nan, 0.0, 2.0], [0.0] * 3, [0.0] * 3)

    def test_bad_load_rejected(self):
        solver = make_chain_solver()
        with pytest.raises(ShapeMismatchError):
            solver.set_load((0.0, -1.0))
        with pytest.raises(ShapeMismatchError):
            solver.set_nodal_loads(np.zeros((2, 3)))
        np.testing.assert_array_equal(solver.get_load(), [0.0, 0.0, -1.0])

    def test_bad_force_densities_rejected(self):
        solver = make_chain_solver()
        with pytest.raises(ShapeMismatchError):
            solver.set_force_densities([1.0, 1.0, 1.0])
        with pytest.raises(ValueError):
            solver.set_force_densities([1.0, -1.0])
        with pytest.raises(ValueError):
            solver.set_force_densities([1.0, np.inf])
        np.testing.assert_array_equal(solver.force_densities, [1.0, 1.0])

    def test_failed_solve_keeps_previous_result(self):
        solver = make_chain_solver()
        good = solver.solve()

        solver.set_force_densities([0.0, 0.0])
        with pytest.raises(SingularSystemError):
            solver.solve()

        assert solver.result is good
        assert np.isclose(solver.sigma_fl(), 2.5)

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            SolverConfig(default_load=(0.0, -1.0))
        with pytest.raises(ValueError):
            SolverConfig(default_force_density=-1.0)
