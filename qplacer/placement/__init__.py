"""
Placement module for quadratic (analytical) cell placement.

This module provides:
- Problem model (static cells, floating cells, edges)
- Laplacian system construction
- Gauss-Seidel relaxation
- Manhattan wirelength evaluation
"""

from qplacer.placement.errors import (
    PlacerError,
    MalformedProblemError,
    SingularSystemError,
    NonConvergenceError,
)
from qplacer.placement.model import Coordinate, Edge, ConnectivityGraph, make_graph
from qplacer.placement.system_matrix import build_system, LinearSystem
from qplacer.placement.gauss_seidel import gauss_seidel, AxisSolution
from qplacer.placement.wirelength import manhattan_wirelength, edge_lengths

__all__ = [
    'PlacerError',
    'MalformedProblemError',
    'SingularSystemError',
    'NonConvergenceError',
    'Coordinate',
    'Edge',
    'ConnectivityGraph',
    'make_graph',
    'build_system',
    'LinearSystem',
    'gauss_seidel',
    'AxisSolution',
    'manhattan_wirelength',
    'edge_lengths',
]
