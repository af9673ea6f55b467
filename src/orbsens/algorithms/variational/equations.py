"""
Variational equations for the state transition and sensitivity matrices.

The state transition matrix Phi(t, t0) = dx(t)/dx(t0) and the sensitivity
matrix S(t) = dx(t)/dp are propagated together as the composite matrix
[Phi | S], which obeys the linear differential equation

    d/dt [Phi | S] = A(t) [Phi | S] + [0 | B(t)]

with A = df/dx the state partial matrix and B = df/dp the matrix of direct
partials w.r.t. the auxiliary parameters (Montenbruck & Gill, 2000, Eq. 7.45).
The initial values are Phi(t0) = I and S(t0) = 0.

:class:`VariationalEquations` evaluates this right-hand side for a numerical
integrator. A and B are assembled from the partial providers of the force and
derivative models and cached per time, so that repeated evaluations at an
identical (stage) time do not recompute them.
"""

import logging

import numpy as np

from orbsens.exceptions import StructuralError
from orbsens.algorithms.variational.indices import VariationalIndexMap
from orbsens.algorithms.variational.state_partials import StatePartialMatrixBuilder
from orbsens.algorithms.variational.parameter_partials import ParameterPartialMatrixBuilder

logger = logging.getLogger(__name__)


class VariationalEquations:
    """
    Right-hand side of the variational equations.

    Parameters
    ----------
    state_derivative_partials : dict
        Map from :class:`~orbsens.models.state_types.IntegratedStateType` to a
        list with, per propagated entity of that type (in the order of the
        initial state parameters in ``parameter_set``), the list of partial
        providers contributing to the entity's state derivative
    parameter_set : EstimatableParameterSet
        Parameters to estimate, including the initial states of all
        propagated entities

    Raises
    ------
    StructuralError
        If the partial providers and the estimated initial states do not
        describe the same set of propagated entities, or if the central body
        definitions of the propagated bodies contain a cycle.

    Notes
    -----
    The cached partials are recomputed whenever :meth:`update` is called with
    a time that differs from the previous one. Times are compared exactly:
    integrators re-query identical stage times exactly, and any different
    time (also an earlier one, e.g. for backward propagation) triggers a
    recomputation.
    """

    def __init__(self, state_derivative_partials, parameter_set):
        try:
            self._index_map = VariationalIndexMap(parameter_set)
            self._state_derivative_partials = self._check_state_derivative_partials(
                state_derivative_partials, self._index_map)
            self._state_partial_builder = StatePartialMatrixBuilder(
                self._state_derivative_partials, self._index_map)
            self._parameter_partial_builder = ParameterPartialMatrixBuilder(
                self._state_derivative_partials, self._index_map, parameter_set.auxiliary_parameters)
        except StructuralError as error:
            logger.error(f"Error when making variational equations object: {error}")
            raise

        # Each provider is refreshed once per update, even if listed several times
        self._partials = []
        seen = set()
        for entity_partials in self._state_derivative_partials.values():
            for partials in entity_partials:
                for partial in partials:
                    if id(partial) not in seen:
                        seen.add(id(partial))
                        self._partials.append(partial)

        self._total_state_size = self._index_map.total_state_size
        self._number_of_parameter_values = self._index_map.number_of_parameter_values
        self._current_time = None
        self._state_partial_matrix = np.zeros((self._total_state_size, self._total_state_size), dtype=np.float64)
        self._parameter_partial_matrix = np.zeros(
            (self._total_state_size, self._index_map.number_of_auxiliary_parameter_values), dtype=np.float64)

        logger.info(f"Variational equations set up for {self._total_state_size} propagated state entries and "
                    f"{self._number_of_parameter_values} parameter values "
                    f"({self._state_partial_builder.number_of_partial_blocks} state partial blocks, "
                    f"{self._parameter_partial_builder.number_of_partial_blocks} parameter partial blocks)")

    @staticmethod
    def _check_state_derivative_partials(state_derivative_partials, index_map):
        """Validate the partials map against the propagated entities; return a normalized copy."""
        estimated_bodies = index_map.estimated_bodies
        checked = {}

        for state_type, entity_partials in state_derivative_partials.items():
            if state_type not in estimated_bodies:
                raise StructuralError(f"Found no state to estimate of type {state_type.value}")
            bodies = estimated_bodies[state_type]
            if len(entity_partials) != len(bodies):
                raise StructuralError(
                    f"Input partial list size is inconsistent for {state_type.value}: "
                    f"{len(entity_partials)} entries for {len(bodies)} propagated entities")

            checked[state_type] = []
            for body, partials in zip(bodies, entity_partials):
                partials = list(partials)
                for partial in partials:
                    if partial.state_type != state_type or partial.affected_body != body:
                        raise StructuralError(
                            f"{partial!r} ({partial.state_type.value}) is listed for the "
                            f"{state_type.value} of {body}")
                checked[state_type].append(partials)

        for state_type in estimated_bodies:
            if state_type not in checked:
                raise StructuralError(f"No state derivative partials given for estimated {state_type.value}")

        return checked

    @property
    def index_map(self):
        return self._index_map

    @property
    def total_state_size(self):
        """Number of rows of [Phi | S] (and side of Phi)."""
        return self._total_state_size

    @property
    def number_of_parameter_values(self):
        """Number of columns of [Phi | S]."""
        return self._number_of_parameter_values

    def get_number_of_parameter_values(self):
        return self._number_of_parameter_values

    @property
    def current_time(self):
        """Time of the cached partials (None before the first update)."""
        return self._current_time

    @property
    def state_partial_matrix(self):
        """Copy of the cached state partial matrix A."""
        return self._state_partial_matrix.copy()

    @property
    def parameter_partial_matrix(self):
        """Copy of the cached parameter partial matrix B."""
        return self._parameter_partial_matrix.copy()

    def update(self, current_time):
        """
        Update all partials to ``current_time``.

        Refreshes every partial provider and rebuilds A and B, unless the
        partials are already evaluated at exactly this time.

        Parameters
        ----------
        current_time : float
            Time at which the partials are to be evaluated
        """
        if self._current_time is not None and self._current_time == current_time:
            return

        for partial in self._partials:
            partial.refresh(current_time)

        self._state_partial_matrix = self._state_partial_builder.build_state_derivative_partial_matrix()
        self._parameter_partial_matrix = self._parameter_partial_builder.build_parameter_partial_matrix()
        self._current_time = current_time

        logger.debug(f"Variational equation partials updated at t = {current_time}")

    def _check_composite_matrix(self, composite_matrix):
        composite_matrix = np.asarray(composite_matrix, dtype=np.float64)
        expected_shape = (self._total_state_size, self._number_of_parameter_values)
        if composite_matrix.shape != expected_shape:
            raise ValueError(f"Composite matrix must have shape {expected_shape}, got {composite_matrix.shape}")
        return composite_matrix

    def evaluate_derivative(self, current_time, composite_matrix):
        """
        Evaluate d/dt [Phi | S] at ``current_time``.

        Parameters
        ----------
        current_time : float
            Current time
        composite_matrix : array_like
            Current value of [Phi | S], shape
            (total_state_size, number_of_parameter_values)

        Returns
        -------
        ndarray
            A [Phi | S] + [0 | B], same shape as ``composite_matrix``
        """
        composite_matrix = self._check_composite_matrix(composite_matrix)
        self.update(current_time)

        derivative = self._state_partial_matrix @ composite_matrix
        if self._number_of_parameter_values > self._total_state_size:
            derivative[:, self._total_state_size:] += self._parameter_partial_matrix
        return derivative

    def evaluate_derivative_into(self, current_time, composite_matrix, out):
        """Evaluate d/dt [Phi | S] into the preallocated array ``out``."""
        composite_matrix = self._check_composite_matrix(composite_matrix)
        self.update(current_time)

        np.matmul(self._state_partial_matrix, composite_matrix, out=out)
        if self._number_of_parameter_values > self._total_state_size:
            out[:, self._total_state_size:] += self._parameter_partial_matrix
        return out

    def initial_composite_matrix(self):
        """[I | 0], the value of [Phi | S] at the initial epoch."""
        return np.eye(self._total_state_size, self._number_of_parameter_values, dtype=np.float64)

    def split_composite_matrix(self, composite_matrix):
        """
        Split [Phi | S] into its blocks.

        Returns
        -------
        tuple
            (state transition matrix, sensitivity matrix)
        """
        composite_matrix = self._check_composite_matrix(composite_matrix)
        return composite_matrix[:, :self._total_state_size], composite_matrix[:, self._total_state_size:]
