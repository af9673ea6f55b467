"""
Partials of a constant mass-rate model.

The mass derivative of the body equals an (estimatable) constant rate, so the
only non-zero partial is the one w.r.t. that rate.
"""

from orbsens.algorithms.partials.base import StateDerivativePartial
from orbsens.models.parameters import ParameterType
from orbsens.models.state_types import IntegratedStateType


class ConstantMassRatePartial(StateDerivativePartial):
    """Partials of dm/dt = constant rate, for the mass state of ``body``."""

    def __init__(self, body):
        super().__init__(IntegratedStateType.MASS, body, body, 'constant_mass_rate')

    def update(self, current_time):
        pass

    def derivative_function_wrt_state(self, state_type, body):
        return None, 0

    def wrt_mass_rate(self, out):
        out[0, 0] = 1.0

    def get_parameter_partial_function(self, parameter):
        if (parameter.parameter_type is ParameterType.CONSTANT_MASS_RATE
                and parameter.associated_body == self.affected_body):
            return self.wrt_mass_rate, 1
        return None, 0
