"""
Estimated parameters and their placement in the sensitivity matrix.

An :class:`EstimatableParameterSet` is an ordered collection of parameters.
Parameters describing the initial state of a propagated entity (initial
dynamical state parameters) always occupy the leading columns of the
composite matrix [Phi | S], ordered by state type and then by declaration
order. All other (auxiliary) parameters follow, in declaration order.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Tuple

import numpy as np

from orbsens.exceptions import StructuralError
from orbsens.models.state_types import (
    STATE_TYPE_ORDER,
    IntegratedStateType,
    single_integration_size,
)


class ParameterType(Enum):
    """Kinds of estimatable parameters."""

    INITIAL_BODY_STATE = 'initial_body_state'
    INITIAL_ROTATIONAL_STATE = 'initial_rotational_body_state'
    INITIAL_MASS_STATE = 'initial_mass_state'
    INITIAL_CUSTOM_STATE = 'initial_custom_state'
    GRAVITATIONAL_PARAMETER = 'gravitational_parameter'
    RADIATION_PRESSURE_COEFFICIENT = 'radiation_pressure_coefficient'
    CONSTANT_DRAG_COEFFICIENT = 'constant_drag_coefficient'
    SPHERICAL_HARMONICS_COSINE_BLOCK = 'spherical_harmonics_cosine_coefficient_block'
    SPHERICAL_HARMONICS_SINE_BLOCK = 'spherical_harmonics_sine_coefficient_block'
    CONSTANT_MASS_RATE = 'constant_mass_rate'


#: dict: Parameter type used for the initial state of each integrated state type
INITIAL_STATE_PARAMETER_TYPES = {
    IntegratedStateType.TRANSLATIONAL: ParameterType.INITIAL_BODY_STATE,
    IntegratedStateType.ROTATIONAL: ParameterType.INITIAL_ROTATIONAL_STATE,
    IntegratedStateType.MASS: ParameterType.INITIAL_MASS_STATE,
    IntegratedStateType.CUSTOM: ParameterType.INITIAL_CUSTOM_STATE,
}


@dataclass(frozen=True)
class ParameterIdentifier:
    """
    Identity of an estimated parameter.

    Attributes
    ----------
    parameter_type : ParameterType
        Kind of parameter
    associated_body : str
        Body to which the parameter belongs (e.g. "Earth" for its
        gravitational parameter)
    secondary_identifier : str, optional
        Additional qualifier, used when a body has several parameters of the
        same type
    """
    parameter_type: ParameterType
    associated_body: str
    secondary_identifier: str = ''

    def __str__(self):
        name = f"{self.parameter_type.value} of {self.associated_body}"
        if self.secondary_identifier:
            name += f" ({self.secondary_identifier})"
        return name


@dataclass
class EstimatableParameter:
    """
    Parameter that is to be estimated.

    Attributes
    ----------
    parameter_type : ParameterType
        Kind of parameter
    associated_body : str
        Body to which the parameter belongs
    size : int
        Number of scalar entries (1 for a scalar parameter)
    value : float or ndarray, optional
        Current value of the parameter
    secondary_identifier : str
        Additional qualifier of the parameter identity
    """
    parameter_type: ParameterType
    associated_body: str
    size: int = 1
    value: Any = None
    secondary_identifier: str = ''

    def __post_init__(self):
        if self.size <= 0:
            raise ValueError(f"Parameter size must be positive, got {self.size} for {self.identifier}")

    @property
    def identifier(self):
        return ParameterIdentifier(self.parameter_type, self.associated_body, self.secondary_identifier)

    @property
    def is_initial_state(self):
        return False


class InitialStateParameter(EstimatableParameter):
    """
    Initial state of a propagated entity.

    The size is fixed by ``state_type``. ``central_body`` is the body w.r.t.
    which the state is propagated; when that body is itself propagated, the
    variational equations apply a chain-rule correction.
    """

    def __init__(self, associated_body, state_type=IntegratedStateType.TRANSLATIONAL,
                 central_body=None, value=None):
        self.state_type = state_type
        self.central_body = central_body
        self.associated_body = associated_body
        self.parameter_type = INITIAL_STATE_PARAMETER_TYPES[state_type]
        self.size = single_integration_size(state_type)
        self.secondary_identifier = ''
        if value is not None:
            value = np.asarray(value, dtype=np.float64)
            if value.shape != (self.size,):
                raise ValueError(
                    f"Initial {state_type.value} of {associated_body} must have {self.size} entries, "
                    f"got shape {value.shape}")
        self.value = value

    @property
    def is_initial_state(self):
        return True


class EstimatableParameterSet:
    """
    Ordered set of parameters to estimate, with their column placement.

    Parameters
    ----------
    parameters : iterable of EstimatableParameter
        Parameters to estimate. Initial state parameters are moved to the
        front (ordered by state type, then by their relative order in
        ``parameters``); auxiliary parameters keep their relative order.

    Raises
    ------
    StructuralError
        If two parameters share the same identity.
    """

    def __init__(self, parameters):
        parameters = list(parameters)

        initial_states = [p for p in parameters if p.is_initial_state]
        initial_states.sort(key=lambda p: STATE_TYPE_ORDER.index(p.state_type))
        auxiliary = [p for p in parameters if not p.is_initial_state]

        self._parameters = initial_states + auxiliary
        self._initial_state_parameters = initial_states
        self._auxiliary_parameters = auxiliary

        self._start_indices = {}
        column = 0
        for parameter in self._parameters:
            identifier = parameter.identifier
            if identifier in self._start_indices:
                raise StructuralError(f"Parameter {identifier} is included more than once")
            self._start_indices[identifier] = column
            column += parameter.size
        self._total_size = column
        self._initial_state_size = sum(p.size for p in initial_states)

    def __len__(self):
        return len(self._parameters)

    def __iter__(self) -> Iterator[Tuple[int, EstimatableParameter]]:
        """Iterate over (start column, parameter) pairs in column order."""
        for parameter in self._parameters:
            yield self._start_indices[parameter.identifier], parameter

    def __contains__(self, identifier):
        return identifier in self._start_indices

    @property
    def parameters(self) -> List[EstimatableParameter]:
        return list(self._parameters)

    @property
    def initial_state_parameters(self) -> List[InitialStateParameter]:
        return list(self._initial_state_parameters)

    @property
    def auxiliary_parameters(self) -> List[EstimatableParameter]:
        return list(self._auxiliary_parameters)

    @property
    def parameter_set_size(self):
        """Total number of parameter values (columns of [Phi | S])."""
        return self._total_size

    @property
    def initial_state_parameter_size(self):
        """Number of columns taken by initial dynamical state parameters."""
        return self._initial_state_size

    def start_index(self, identifier):
        """
        First column of a parameter in the composite matrix.

        Raises
        ------
        StructuralError
            If no parameter with this identity is in the set.
        """
        try:
            return self._start_indices[identifier]
        except KeyError:
            raise StructuralError(f"Parameter {identifier} is not in the estimated parameter set") from None

    def get_parameter(self, identifier):
        self.start_index(identifier)
        return next(p for p in self._parameters if p.identifier == identifier)

    def estimated_bodies(self) -> Dict[IntegratedStateType, List[str]]:
        """Ordered list of estimated entities per state type."""
        bodies = {}
        for parameter in self._initial_state_parameters:
            bodies.setdefault(parameter.state_type, []).append(parameter.associated_body)
        return bodies

    def central_bodies(self, state_type=IntegratedStateType.TRANSLATIONAL):
        """Central bodies of the entities of ``state_type``, in entity order."""
        return [p.central_body for p in self._initial_state_parameters if p.state_type == state_type]

    def initial_state_vector(self):
        """
        Concatenated values of all initial state parameters.

        Raises
        ------
        ValueError
            If an initial state parameter has no value.
        """
        values = []
        for parameter in self._initial_state_parameters:
            if parameter.value is None:
                raise ValueError(f"No value set for {parameter.identifier}")
            values.append(parameter.value)
        if not values:
            return np.zeros(0, dtype=np.float64)
        return np.concatenate(values)
