"""
Variational equations for orbit determination.

This package assembles the partial derivatives supplied by force and
derivative models into the matrices of the variational equations and
evaluates their right-hand side for a numerical integrator:

- Index bookkeeping for states and parameters
- State partial matrix (A) assembly, including central-body corrections
- Parameter partial matrix (B) assembly
- The variational equations engine and propagation helpers
"""

from .indices import VariationalIndexMap, determine_update_order
from .state_partials import StatePartialMatrixBuilder
from .parameter_partials import ParameterPartialMatrixBuilder
from .equations import VariationalEquations
from .propagator import (
    VariationalSolution,
    propagate_variational_equations,
    propagate_sensitivities,
)

__all__ = [
    # Indices
    'VariationalIndexMap',
    'determine_update_order',

    # Matrix assembly
    'StatePartialMatrixBuilder',
    'ParameterPartialMatrixBuilder',

    # Engine
    'VariationalEquations',

    # Propagation
    'VariationalSolution',
    'propagate_variational_equations',
    'propagate_sensitivities',
]
