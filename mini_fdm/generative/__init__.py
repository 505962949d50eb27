# mini_fdm/generative - Parametric Network Generators
"""
GENERATIVE: Parametric Network Generators
=========================================

Turn a few parameters into a topology, supports and starting positions.

Available Generators:
--------------------
- grid: regular rectangular networks (orthogonal, braced, triangulated)

USAGE:
------
    from mini_fdm.generative import generate_grid, GridParams

    params = GridParams(nx_nodes=6, ny_nodes=6, spacing=100.0,
                        support_layout='corners')
    graph, x, y, z = generate_grid(params)
"""

from .grid import generate_grid, grid_faces, GridParams

__all__ = ['generate_grid', 'grid_faces', 'GridParams']
