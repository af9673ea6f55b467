"""
Assembly of the parameter partial matrix B = d(state derivative)/d(parameter).

Only auxiliary (non-state) parameters have columns in B. Whether a provider
depends on a parameter does not change during propagation, so the
(provider, parameter) pairs with a non-zero dependency are determined once at
construction; each evaluation only computes their current values.
"""

import logging

import numpy as np

from orbsens.exceptions import StructuralError

logger = logging.getLogger(__name__)


class ParameterPartialMatrixBuilder:
    """
    Builds the matrix of direct partials of state derivatives w.r.t. parameters.

    Parameters
    ----------
    state_derivative_partials : dict
        Per state type, one list of partial providers per propagated entity
    index_map : VariationalIndexMap
        Row and column placement of states and parameters
    auxiliary_parameters : list of EstimatableParameter
        Non-state parameters to estimate
    """

    def __init__(self, state_derivative_partials, index_map, auxiliary_parameters):
        self._index_map = index_map
        self._entries = []

        state_size = index_map.total_state_size
        dependent_parameters = set()
        for state_type, entity_partials in state_derivative_partials.items():
            for entity_index, partials in enumerate(entity_partials):
                row_start, number_of_rows = index_map.derivative_rows(state_type, entity_index)
                for partial in partials:
                    for parameter in auxiliary_parameters:
                        width = partial.parameter_dependency(parameter)
                        if width == 0:
                            continue
                        column_start, parameter_size = index_map.parameter_indices(parameter.identifier)
                        if width != parameter_size:
                            raise StructuralError(
                                f"{partial!r} reports {width} columns for {parameter.identifier}, "
                                f"which has size {parameter_size}")
                        scratch = np.zeros((number_of_rows, width), dtype=np.float64)
                        self._entries.append(
                            (row_start, number_of_rows, column_start - state_size, width, partial, parameter, scratch))
                        dependent_parameters.add(parameter.identifier)

        for parameter in auxiliary_parameters:
            if parameter.identifier not in dependent_parameters:
                logger.debug(f"No state derivative depends directly on {parameter.identifier}")

        self._matrix = np.zeros((state_size, index_map.number_of_auxiliary_parameter_values), dtype=np.float64)

    @property
    def number_of_partial_blocks(self):
        return len(self._entries)

    def build_parameter_partial_matrix(self):
        """
        Evaluate B from the current values of the partial providers.

        The providers must have been refreshed at the current time. Partials of
        several providers w.r.t. the same parameter accumulate. The returned
        array is reused (overwritten) by the next call.

        Returns
        -------
        ndarray
            Matrix of shape (total_state_size, number of auxiliary parameter values)
        """
        matrix = self._matrix
        matrix.fill(0.0)

        for row_start, number_of_rows, column_start, width, partial, parameter, scratch in self._entries:
            scratch.fill(0.0)
            partial.write_parameter_partial(parameter, scratch)
            matrix[row_start:row_start + number_of_rows, column_start:column_start + width] += scratch

        return matrix
