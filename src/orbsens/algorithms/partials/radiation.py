"""
Partials of the cannon-ball radiation pressure acceleration.

The acceleration points away from the radiation source,

    a = Cr * A * P / m * rho / |rho|,    rho = r_affected - r_source

with P the radiation pressure at the body (scaling with 1/|rho|^2).
"""

import numba
import numpy as np

from orbsens.algorithms.partials.base import AccelerationPartial
from orbsens.models.parameters import ParameterType


@numba.njit(cache=True)
def cannon_ball_position_partial(range_vector, coefficient, area, radiation_pressure, mass):
    """
    Partial of the cannon-ball acceleration w.r.t. the position of the body.

    Parameters
    ----------
    range_vector : ndarray
        Position of the body w.r.t. the radiation source
    coefficient : float
        Radiation pressure coefficient Cr
    area : float
        Reference area
    radiation_pressure : float
        Current radiation pressure at the body
    mass : float
        Mass of the body

    Returns
    -------
    ndarray
        3x3 partial derivative matrix
    """
    range_norm = np.sqrt(range_vector[0]**2 + range_vector[1]**2 + range_vector[2]**2)
    range_inverse = 1.0 / range_norm
    scale = coefficient * area * radiation_pressure / mass

    partial = np.empty((3, 3), dtype=np.float64)
    for i in range(3):
        for j in range(3):
            partial[i, j] = -3.0 * scale * range_vector[i] * range_vector[j] * range_inverse / (range_norm * range_norm)
        partial[i, i] += scale * range_inverse
    return partial


@numba.njit(cache=True)
def cannon_ball_coefficient_partial(radiation_pressure, area, mass, vector_to_source):
    """Partial of the cannon-ball acceleration w.r.t. the radiation pressure coefficient."""
    norm = np.sqrt(vector_to_source[0]**2 + vector_to_source[1]**2 + vector_to_source[2]**2)
    return -radiation_pressure * area / mass * vector_to_source / norm


class CannonBallRadiationPressurePartial(AccelerationPartial):
    """
    Partials of the cannon-ball radiation pressure acceleration.

    Parameters
    ----------
    affected_body : str
        Body undergoing the acceleration
    source_body : str
        Body emitting the radiation
    affected_position_function, source_position_function : callable
        Return the current positions of the two bodies
    area_function : callable
        Returns the reference area of ``affected_body``
    coefficient_function : callable
        Returns the current radiation pressure coefficient
    radiation_pressure_function : callable
        Returns the current radiation pressure at ``affected_body``
    mass_function : callable
        Returns the current mass of ``affected_body``
    """

    def __init__(self, affected_body, source_body, affected_position_function, source_position_function,
                 area_function, coefficient_function, radiation_pressure_function, mass_function):
        super().__init__(affected_body, source_body, 'cannon_ball_radiation_pressure')
        self._affected_position = affected_position_function
        self._source_position = source_position_function
        self._area = area_function
        self._coefficient = coefficient_function
        self._radiation_pressure = radiation_pressure_function
        self._mass = mass_function
        self._range_vector = np.zeros(3, dtype=np.float64)
        self._position_partial = np.zeros((3, 3), dtype=np.float64)

    def update(self, current_time):
        self._range_vector = (
            np.asarray(self._affected_position(), dtype=np.float64)
            - np.asarray(self._source_position(), dtype=np.float64))
        self._position_partial = cannon_ball_position_partial(
            self._range_vector, float(self._coefficient()), float(self._area()),
            float(self._radiation_pressure()), float(self._mass()))

    def partial_wrt_position_of_affected(self):
        return self._position_partial

    def wrt_radiation_pressure_coefficient(self, out):
        out[:, 0] = cannon_ball_coefficient_partial(
            float(self._radiation_pressure()), float(self._area()), float(self._mass()), -self._range_vector)

    def get_parameter_partial_function(self, parameter):
        if (parameter.parameter_type is ParameterType.RADIATION_PRESSURE_COEFFICIENT
                and parameter.associated_body == self.affected_body):
            return self.wrt_radiation_pressure_coefficient, 1
        return None, 0
