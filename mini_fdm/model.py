# mini_fdm/model.py
"""
MODEL DEFINITIONS: Node3D and Branch
====================================

PURPOSE:
--------
Plain data types exchanged with whatever front end drives the solver:
- Node3D: a solved (or prescribed) point of the network
- Branch: a directed connection between two nodes

A BRANCH in the Force Density Method is an axial element (cable or strut).
Its "force density" q = force / length is prescribed, which makes the
equilibrium equations linear in the node coordinates.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Node3D:
    """
    A node (point) of the network in 3D space.

    Parameters:
    -----------
    id : int
        Node index in original order (0 to N-1)
    x, y, z : float
        Coordinates in the global system

    Examples:
    ---------
    >>> Node3D(0, 0.0, 0.0, 0.0)
    Node3D(id=0, x=0.0, y=0.0, z=0.0)
    """
    id: int
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Branch:
    """
    A directed branch from node ni to node nj.

    The id is the insertion position in the graph, which is also the row
    of the branch in the incidence matrix C:
        C[id, ni] = +1
        C[id, nj] = -1
    """
    id: int
    ni: int  # Start node ("from")
    nj: int  # End node ("to")
