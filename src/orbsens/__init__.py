"""
orbsens: state transition and sensitivity matrices for orbit determination.

Assembles the partial derivatives of force and derivative models into the
variational equations d/dt [Phi | S] = A [Phi | S] + [0 | B] and evaluates
them for numerical integration alongside the nominal trajectory.
"""

from .exceptions import StructuralError
from .models import (
    IntegratedStateType,
    ParameterType,
    EstimatableParameter,
    InitialStateParameter,
    EstimatableParameterSet,
)
from .algorithms import (
    StateDerivativePartial,
    AccelerationPartial,
    CentralGravityPartial,
    CannonBallRadiationPressurePartial,
    ConstantMassRatePartial,
    VariationalEquations,
    propagate_variational_equations,
    propagate_sensitivities,
)

__version__ = "0.1.0"

__all__ = [
    'StructuralError',
    'IntegratedStateType',
    'ParameterType',
    'EstimatableParameter',
    'InitialStateParameter',
    'EstimatableParameterSet',
    'StateDerivativePartial',
    'AccelerationPartial',
    'CentralGravityPartial',
    'CannonBallRadiationPressurePartial',
    'ConstantMassRatePartial',
    'VariationalEquations',
    'propagate_variational_equations',
    'propagate_sensitivities',
]
