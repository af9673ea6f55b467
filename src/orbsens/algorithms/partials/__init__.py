"""
State-derivative partial providers.

This package provides the interfaces through which force and derivative models
supply partial derivatives to the variational equations, plus the model
variants shipped with the package:

- Point-mass gravity
- Cannon-ball radiation pressure
- Constant mass rate
"""

from .base import StateDerivativePartial, AccelerationPartial
from .gravity import CentralGravityPartial
from .radiation import CannonBallRadiationPressurePartial
from .mass import ConstantMassRatePartial

__all__ = [
    # Interfaces
    'StateDerivativePartial',
    'AccelerationPartial',

    # Model variants
    'CentralGravityPartial',
    'CannonBallRadiationPressurePartial',
    'ConstantMassRatePartial',
]
