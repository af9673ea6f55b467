"""
Assembly of the state partial matrix A = d(state derivative)/d(state).

Every partial provider contributes blocks to the rows of the entity it
affects (the force-derivative rows; kinematic rows are skipped) and to the
columns of each propagated entity it depends on. Which provider writes to
which columns is fixed by the setup, so the list of (rows, columns, function)
entries is built once; each evaluation only calls the functions.
"""

import logging

import numpy as np

from orbsens.exceptions import StructuralError
from orbsens.models.state_types import (
    IntegratedStateType,
    kinematic_entries_per_entity,
    single_integration_size,
)

logger = logging.getLogger(__name__)


class StatePartialMatrixBuilder:
    """
    Builds the matrix of partials of all state derivatives w.r.t. all states.

    Parameters
    ----------
    state_derivative_partials : dict
        Per state type, one list of partial providers per propagated entity
        (in the order of ``index_map.estimated_bodies``)
    index_map : VariationalIndexMap
        Row and column placement of the propagated states
    """

    def __init__(self, state_derivative_partials, index_map):
        self._index_map = index_map
        self._entries = []

        estimated_bodies = index_map.estimated_bodies
        for state_type, entity_partials in state_derivative_partials.items():
            for entity_index, partials in enumerate(entity_partials):
                row_start, number_of_rows = index_map.derivative_rows(state_type, entity_index)
                for partial in partials:
                    for estimated_type, bodies in estimated_bodies.items():
                        for body_index, body in enumerate(bodies):
                            function, width = partial.derivative_function_wrt_state(estimated_type, body)
                            if width == 0:
                                continue
                            column_start, state_width = index_map.state_indices(estimated_type, body_index)
                            if width != state_width:
                                raise StructuralError(
                                    f"{partial!r} reports {width} columns for the {estimated_type.value} "
                                    f"of {body}, expected {state_width}")
                            self._entries.append((row_start, number_of_rows, column_start, width, function))

        self._kinematic_blocks = []
        for state_type, bodies in estimated_bodies.items():
            skipped = kinematic_entries_per_entity(state_type)
            if skipped == 0:
                continue
            for entity_index in range(len(bodies)):
                row_start, _ = index_map.state_indices(state_type, entity_index)
                self._kinematic_blocks.append((row_start, skipped))

        self._addition_indices = index_map.central_body_addition_indices
        self._translational_size = single_integration_size(IntegratedStateType.TRANSLATIONAL)

        size = index_map.total_state_size
        self._matrix = np.zeros((size, size), dtype=np.float64)
        logger.debug(f"State partial matrix of size {size} set up with {len(self._entries)} partial blocks "
                     f"and {len(self._addition_indices)} central body corrections")

    @property
    def number_of_partial_blocks(self):
        return len(self._entries)

    def build_state_derivative_partial_matrix(self):
        """
        Evaluate A from the current values of the partial providers.

        The providers must have been refreshed at the current time. The
        returned array is reused (overwritten) by the next call.

        Returns
        -------
        ndarray
            Square matrix with side ``total_state_size``
        """
        matrix = self._matrix
        matrix.fill(0.0)

        for row_start, number_of_rows, column_start, width, function in self._entries:
            function(matrix[row_start:row_start + number_of_rows, column_start:column_start + width])

        # Partials w.r.t. a body propagated w.r.t. a propagated central body
        # also act on the state of that central body (force rows only)
        size = self._translational_size
        for dependent_start, central_start in self._addition_indices:
            matrix[:, central_start:central_start + size] += matrix[:, dependent_start:dependent_start + size]

        for row_start, skipped in self._kinematic_blocks:
            matrix[row_start:row_start + skipped, row_start + skipped:row_start + 2 * skipped] += np.eye(skipped)

        return matrix
