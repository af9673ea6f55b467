"""
Algorithms for orbit sensitivity propagation.

- partials:    Interfaces and model variants of state-derivative partials
- variational: Assembly and propagation of the variational equations
"""

from .partials import (
    StateDerivativePartial,
    AccelerationPartial,
    CentralGravityPartial,
    CannonBallRadiationPressurePartial,
    ConstantMassRatePartial,
)
from .variational import (
    VariationalEquations,
    VariationalIndexMap,
    propagate_variational_equations,
    propagate_sensitivities,
)

__all__ = [
    # Partials
    'StateDerivativePartial',
    'AccelerationPartial',
    'CentralGravityPartial',
    'CannonBallRadiationPressurePartial',
    'ConstantMassRatePartial',

    # Variational equations
    'VariationalEquations',
    'VariationalIndexMap',
    'propagate_variational_equations',
    'propagate_sensitivities',
]
