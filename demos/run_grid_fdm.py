"""
GRID FORM FINDING DEMO
======================

PURPOSE:
--------
Form-find a regular grid network with the Force Density Method:
1. Generate a grid (topology, supports, starting positions)
2. Solve the equilibrium for a uniform load
3. Print the key figures (ΣFL, forces, maximum sag)
4. Optionally export the branch table and a load sweep to CSV

The defaults reproduce the classic setup: 6 x 6 nodes, 100 units apart,
four pinned corners, unit load in -z, force density 1 on every branch.

EXAMPLE USAGE:
--------------
    python demos/run_grid_fdm.py
    python demos/run_grid_fdm.py --nx 9 --ny 9 --supports edges --load 0 0 -5
    python demos/run_grid_fdm.py --csv artifacts/branches.csv --sweep 11
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import numpy as np

# Add parent directory to path so the demo runs from a source checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from mini_fdm import EquilibriumSolver
from mini_fdm.generative import GridParams, generate_grid
from mini_fdm.post import branch_table, summarize, support_reactions, compute_length_bins
from mini_fdm.sweep import run_load_sweep


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Form-find a regular grid with the Force Density Method',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python demos/run_grid_fdm.py --nx 6 --ny 6
  python demos/run_grid_fdm.py --topology triangulated --supports perimeter_2
        """
    )
    parser.add_argument('--nx', type=int, default=6, help='Nodes along X (default: 6)')
    parser.add_argument('--ny', type=int, default=6, help='Nodes along Y (default: 6)')
    parser.add_argument('--spacing', type=float, default=100.0, help='Node spacing (default: 100)')
    parser.add_argument('--topology', default='orthogonal',
                        choices=['orthogonal', 'braced', 'triangulated'])
    parser.add_argument('--supports', default='corners',
                        help="corners, edges or perimeter_<n> (default: corners)")
    parser.add_argument('--load', type=float, nargs=3, default=[0.0, 0.0, -1.0],
                        metavar=('PX', 'PY', 'PZ'), help='Uniform load (default: 0 0 -1)')
    parser.add_argument('--q', type=float, default=1.0, help='Force density of every branch')
    parser.add_argument('--csv', default=None, help='Write the branch table to this CSV file')
    parser.add_argument('--sweep', type=int, default=0,
                        help='Also sweep PZ from 0 to the given load in N steps')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    # ========================================================================
    # STEP 1: GENERATE THE GRID
    # ========================================================================
    params = GridParams(
        nx_nodes=args.nx,
        ny_nodes=args.ny,
        spacing=args.spacing,
        topology=args.topology,
        support_layout=args.supports,
    )
    graph, x, y, z = generate_grid(params)

    print("=" * 60)
    print("FORCE DENSITY METHOD - GRID FORM FINDING")
    print("=" * 60)
    print(f"Nodes:     {graph.n_nodes} ({graph.n_unknown} unknown, {graph.n_fixed} fixed)")
    print(f"Branches:  {graph.n_branches} ({params.topology})")
    print(f"Supports:  {list(graph.fixed)}")

    # ========================================================================
    # STEP 2: SOLVE
    # ========================================================================
    solver = EquilibriumSolver(graph)
    solver.set_boundary_conditions(x, y, z)
    solver.set_load(args.load)
    solver.set_force_densities(args.q)
    result = solver.solve()

    # ========================================================================
    # STEP 3: REPORT
    # ========================================================================
    summary = summarize(graph, result)
    reactions = support_reactions(graph, result)
    bins = compute_length_bins(result.lengths, tolerance=0.01 * args.spacing)

    print(f"\nLoad:           {solver.get_load()}")
    print(f"ΣFL:            {summary['sigma_fl']:.4f}")
    print(f"Total length:   {summary['total_length']:.2f}")
    print(f"Force range:    {summary['min_force']:.4f} .. {summary['max_force']:.4f}")
    print(f"Lowest z:       {summary['min_z']:.4f}")
    print(f"Residual:       {summary['residual']:.2e}")
    print(f"Length bins:    {len(bins)}")
    print(f"ΣReactions:     {reactions.sum(axis=0)}")

    if args.csv:
        os.makedirs(os.path.dirname(args.csv) or '.', exist_ok=True)
        branch_table(graph, result).to_csv(args.csv, index=False)
        print(f"\nBranch table written to {args.csv}")

    if args.sweep > 0:
        px, py, pz = args.load
        sweep_loads = [(px, py, s) for s in np.linspace(0.0, pz, args.sweep)]
        df = run_load_sweep(solver, sweep_loads, show_progress=True)
        print("\nLoad sweep:")
        print(df[['load_z', 'ok', 'sigma_fl', 'min_z']].to_string(index=False))
        if args.csv:
            sweep_path = os.path.splitext(args.csv)[0] + '_sweep.csv'
            df.to_csv(sweep_path, index=False)
            print(f"Sweep written to {sweep_path}")


if __name__ == '__main__':
    main()
