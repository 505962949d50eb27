# tests/test_sweep.py
"""
Tests for the load-case sweep.
"""

import numpy as np

from mini_fdm import TopologyGraph, EquilibriumSolver
from mini_fdm.generative import GridParams, generate_grid
from mini_fdm.sweep import run_load_sweep


def make_solver():
    graph, x, y, z = generate_grid(GridParams(nx_nodes=4, ny_nodes=4, spacing=1.0))
    solver = EquilibriumSolver(graph)
    solver.set_boundary_conditions(x, y, z)
    return solver


def test_sweep_rows_and_columns():
    solver = make_solver()
    loads = [(0.0, 0.0, -s) for s in (0.0, 1.0, 2.0)]
    df = run_load_sweep(solver, loads)

    assert list(df.columns) == ['load_x', 'load_y', 'load_z', 'ok', 'sigma_fl',
                                'max_force', 'min_z', 'error']
    assert len(df) == 3
    assert df['ok'].all()
    np.testing.assert_allclose(df['load_z'], [0.0, -1.0, -2.0])

    # Flat supports: sag is linear in the load, ΣFL grows with it
    assert np.isclose(df['min_z'].iloc[0], 0.0)
    assert np.isclose(df['min_z'].iloc[2], 2 * df['min_z'].iloc[1])
    assert df['sigma_fl'].is_monotonic_increasing


def test_sweep_restores_solver_load():
    solver = make_solver()
    solver.set_load((0.1, 0.2, -0.3))
    run_load_sweep(solver, [(0.0, 0.0, -5.0)])
    np.testing.assert_array_equal(solver.get_load(), [0.1, 0.2, -0.3])


def test_sweep_restores_nodal_loads():
    solver = make_solver()
    nodal = np.zeros((16, 3))
    nodal[5] = [0.0, 0.0, -2.0]
    solver.set_nodal_loads(nodal)

    run_load_sweep(solver, [(0.0, 0.0, -1.0)])
    np.testing.assert_array_equal(solver.nodal_loads, nodal)


def test_sweep_records_singular_cases():
    graph = TopologyGraph(3, [0])
    graph.add_branch(0, 1)  # node 2 is isolated
    graph.build()
    solver = EquilibriumSolver(graph)
    solver.set_boundary_conditions([0, 1, 2], [0, 0, 0], [0, 0, 0])

    df = run_load_sweep(solver, [(0.0, 0.0, -1.0), (0.0, 0.0, -2.0)], show_progress=True)

    assert len(df) == 2
    assert not df['ok'].any()
    assert df['sigma_fl'].isna().all()
    assert all("Singular" in e for e in df['error'])


def test_sweep_keeps_last_result():
    solver = make_solver()
    before = solver.solve()

    df = run_load_sweep(solver, [(0.0, 0.0, -5.0)])

    assert solver.result is before
    assert solver.sigma_fl() == before.sigma_fl
    np.testing.assert_array_equal(solver.state(), before.state())
    # The sweep case itself saw five times the load
    assert np.isclose(df['min_z'].iloc[0], 5 * np.min(before.state_unknown()[:, 2]))


def test_sweep_before_any_solve_leaves_no_result():
    solver = make_solver()
    run_load_sweep(solver, [(0.0, 0.0, -1.0)])
    assert not solver.has_solution
    assert solver.sigma_fl() == 0.0
