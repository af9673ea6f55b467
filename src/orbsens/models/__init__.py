"""
Data model of the propagated states and estimated parameters.
"""

from .state_types import (
    IntegratedStateType,
    single_integration_size,
    differential_equation_order,
)
from .parameters import (
    ParameterType,
    ParameterIdentifier,
    EstimatableParameter,
    InitialStateParameter,
    EstimatableParameterSet,
)

__all__ = [
    'IntegratedStateType',
    'single_integration_size',
    'differential_equation_order',
    'ParameterType',
    'ParameterIdentifier',
    'EstimatableParameter',
    'InitialStateParameter',
    'EstimatableParameterSet',
]
