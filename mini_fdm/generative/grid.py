# mini_fdm/generative/grid.py
"""
GRID GENERATOR: Regular Networks for Form Finding
=================================================

PURPOSE:
--------
Generate the topology and starting positions of a regular rectangular
network, ready to be handed to the EquilibriumSolver.

The generator creates:
1. A grid of nx_nodes x ny_nodes nodes in the xy-plane
2. Branch connectivity (orthogonal, braced or triangulated)
3. Support (fixed) nodes from a layout rule
4. Starting z-coordinates from a heightfield; only the values at fixed
   nodes matter, they become the support heights

NODE NUMBERING:
---------------
    index = iy * nx_nodes + ix

    6 -- 7 -- 8
    |    |    |
    3 -- 4 -- 5        (3 x 3 example)
    |    |    |
    0 -- 1 -- 2

BRANCH ORDER (orthogonal):
--------------------------
All horizontal branches row by row, then all vertical branches column by
column. Every branch points in +x or +y.
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Literal, Tuple

from ..kernel.topology import TopologyGraph


@dataclass
class GridParams:
    """
    Parameters defining a regular grid network.

    Geometry:
    ---------
    nx_nodes : int
        Number of nodes along X (>= 2)
    ny_nodes : int
        Number of nodes along Y (>= 2)
    spacing : float
        Distance between neighbouring nodes

    Topology:
    ---------
    topology : str
        - 'orthogonal': grid edges only
        - 'braced': grid edges + both diagonals in every cell
        - 'triangulated': grid edges + one alternating diagonal per cell

    Supports:
    ---------
    support_layout : str
        - 'corners': 4 corner nodes
        - 'edges': all perimeter nodes
        - 'perimeter_n': every n-th perimeter node (corners always included)

    Heights:
    --------
    heightfield : str
        - 'flat': every node at support_height
        - 'ridge': raised along the X centreline (y = depth/2)
        - 'saddle': hyperbolic paraboloid, high at x-edges, low at y-edges
    support_height : float
        Base height
    rise : float
        Height range added by 'ridge' and 'saddle'
    """
    # Geometry
    nx_nodes: int = 6
    ny_nodes: int = 6
    spacing: float = 100.0

    # Topology
    topology: Literal['orthogonal', 'braced', 'triangulated'] = 'orthogonal'

    # Supports
    support_layout: str = 'corners'

    # Heights
    heightfield: Literal['flat', 'ridge', 'saddle'] = 'flat'
    support_height: float = 0.0
    rise: float = 0.0

    def __post_init__(self):
        if self.nx_nodes < 2 or self.ny_nodes < 2:
            raise ValueError(
                f"Grid needs at least 2 nodes per side, got {self.nx_nodes} x {self.ny_nodes}"
            )
        if self.spacing <= 0:
            raise ValueError(f"spacing must be positive, got {self.spacing}")

    @property
    def n_nodes(self) -> int:
        return self.nx_nodes * self.ny_nodes


def _node_index(ix: int, iy: int, nx: int) -> int:
    """Convert grid indices to node index."""
    return iy * nx + ix


def _compute_heightfield(ix: int, iy: int, params: GridParams) -> float:
    """Z-coordinate at grid position (ix, iy)."""
    # Normalize to [-1, 1] over the footprint
    xn = 2 * ix / (params.nx_nodes - 1) - 1
    yn = 2 * iy / (params.ny_nodes - 1) - 1

    if params.heightfield == 'flat':
        return params.support_height

    elif params.heightfield == 'ridge':
        return params.support_height + params.rise * (1 - abs(yn))

    elif params.heightfield == 'saddle':
        z_normalized = (xn**2 - yn**2 + 1) / 2  # 0 to 1
        return params.support_height + params.rise * z_normalized

    else:
        raise ValueError(f"Unknown heightfield: {params.heightfield}")


def _orthogonal_pairs(params: GridParams) -> List[Tuple[int, int]]:
    nx, ny = params.nx_nodes, params.ny_nodes
    pairs = []

    # Horizontal
    for iy in range(ny):
        for ix in range(nx - 1):
            pairs.append((_node_index(ix, iy, nx), _node_index(ix + 1, iy, nx)))

    # Vertical
    for ix in range(nx):
        for iy in range(ny - 1):
            pairs.append((_node_index(ix, iy, nx), _node_index(ix, iy + 1, nx)))

    return pairs


def _diagonal_pairs(params: GridParams, alternate: bool) -> List[Tuple[int, int]]:
    nx, ny = params.nx_nodes, params.ny_nodes
    pairs = []

    for iy in range(ny - 1):
        for ix in range(nx - 1):
            bottom_left = _node_index(ix, iy, nx)
            bottom_right = _node_index(ix + 1, iy, nx)
            top_left = _node_index(ix, iy + 1, nx)
            top_right = _node_index(ix + 1, iy + 1, nx)

            if not alternate:
                pairs.append((bottom_left, top_right))
                pairs.append((bottom_right, top_left))
            elif (ix + iy) % 2 == 0:
                pairs.append((bottom_left, top_right))
            else:
                pairs.append((bottom_right, top_left))

    return pairs


def _branch_pairs(params: GridParams) -> List[Tuple[int, int]]:
    if params.topology == 'orthogonal':
        return _orthogonal_pairs(params)
    elif params.topology == 'braced':
        return _orthogonal_pairs(params) + _diagonal_pairs(params, alternate=False)
    elif params.topology == 'triangulated':
        return _orthogonal_pairs(params) + _diagonal_pairs(params, alternate=True)
    else:
        raise ValueError(f"Unknown topology: {params.topology}")


def _perimeter(params: GridParams) -> List[int]:
    """Perimeter nodes walked counter-clockwise from the origin corner."""
    nx, ny = params.nx_nodes, params.ny_nodes
    walk = []
    walk += [_node_index(ix, 0, nx) for ix in range(nx)]
    walk += [_node_index(nx - 1, iy, nx) for iy in range(1, ny)]
    walk += [_node_index(ix, ny - 1, nx) for ix in range(nx - 2, -1, -1)]
    walk += [_node_index(0, iy, nx) for iy in range(ny - 2, 0, -1)]
    return walk


def _get_support_nodes(params: GridParams) -> List[int]:
    """Fixed node indices (sorted) for params.support_layout."""
    nx, ny = params.nx_nodes, params.ny_nodes
    corners = {
        _node_index(0, 0, nx),
        _node_index(nx - 1, 0, nx),
        _node_index(0, ny - 1, nx),
        _node_index(nx - 1, ny - 1, nx),
    }
    layout = params.support_layout

    if layout == 'corners':
        return sorted(corners)

    elif layout == 'edges':
        return sorted(_perimeter(params))

    elif layout.startswith('perimeter_'):
        try:
            step = int(layout.split('_', 1)[1])
        except ValueError:
            raise ValueError(f"Unknown support_layout: {layout}") from None
        if step < 1:
            raise ValueError(f"perimeter step must be >= 1, got {step}")
        return sorted(set(_perimeter(params)[::step]) | corners)

    else:
        raise ValueError(f"Unknown support_layout: {layout}")


def generate_grid(
    params: GridParams
) -> Tuple[TopologyGraph, np.ndarray, np.ndarray, np.ndarray]:
    """
    Generate a built TopologyGraph and starting positions for a grid.

    Returns:
    --------
    graph : TopologyGraph
        Built graph with the supports of params.support_layout
    x, y, z : np.ndarray
        Starting positions per axis, original node order, shape (N,);
        pass them to EquilibriumSolver.set_boundary_conditions()

    Example:
    --------
    >>> graph, x, y, z = generate_grid(GridParams(nx_nodes=3, ny_nodes=3, spacing=1.0))
    >>> graph.n_nodes, graph.n_branches, list(graph.fixed)
    (9, 12, [0, 2, 6, 8])
    """
    nx, ny = params.nx_nodes, params.ny_nodes

    graph = TopologyGraph(params.n_nodes, _get_support_nodes(params))
    graph.add_branches(_branch_pairs(params))
    graph.build()

    x = np.zeros(params.n_nodes)
    y = np.zeros(params.n_nodes)
    z = np.zeros(params.n_nodes)
    for iy in range(ny):
        for ix in range(nx):
            i = _node_index(ix, iy, nx)
            x[i] = ix * params.spacing
            y[i] = iy * params.spacing
            z[i] = _compute_heightfield(ix, iy, params)

    return graph, x, y, z


def grid_faces(params: GridParams) -> np.ndarray:
    """
    Triangles covering the grid, two per cell, as node index triples.

    For the cell with corners p0 (bottom-left), p1 (bottom-right),
    p2 (top-right), p3 (top-left) the faces are (p0, p3, p2) and (p0, p2, p1).

    Returns:
    --------
    np.ndarray
        Shape (2 * (nx_nodes-1) * (ny_nodes-1), 3), dtype int
    """
    nx, ny = params.nx_nodes, params.ny_nodes
    faces = []
    for iy in range(ny - 1):
        for ix in range(nx - 1):
            p0 = _node_index(ix, iy, nx)
            p1 = p0 + 1
            p2 = p0 + 1 + nx
            p3 = p0 + nx
            faces.append((p0, p3, p2))
            faces.append((p0, p2, p1))
    return np.array(faces, dtype=int).reshape(-1, 3)
