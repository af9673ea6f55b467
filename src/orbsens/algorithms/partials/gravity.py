"""
Partials of point-mass gravitational accelerations.

The acceleration exerted on the affected body by a point mass is

    a = -mu * r / |r|^3,    r = r_affected - r_influencing

so that

    da/dr_affected = mu / |r|^3 * (3 r r^T / |r|^2 - I)
    da/dr_influencing = -da/dr_affected
    da/dmu = -r / |r|^3
"""

import numba
import numpy as np

from orbsens.algorithms.partials.base import AccelerationPartial
from orbsens.models.parameters import ParameterType


@numba.njit(cache=True)
def point_mass_gravity_position_partial(relative_position, mu):
    """
    Partial of point-mass gravity w.r.t. the position of the attracted body.

    Parameters
    ----------
    relative_position : ndarray
        Position of the attracted body w.r.t. the attracting body
    mu : float
        Gravitational parameter of the attracting body

    Returns
    -------
    ndarray
        3x3 partial derivative matrix
    """
    r2 = relative_position[0]**2 + relative_position[1]**2 + relative_position[2]**2
    r = np.sqrt(r2)
    r3 = r2 * r
    r5 = r3 * r2

    partial = np.empty((3, 3), dtype=np.float64)
    for i in range(3):
        for j in range(3):
            partial[i, j] = 3.0 * mu * relative_position[i] * relative_position[j] / r5
        partial[i, i] -= mu / r3
    return partial


@numba.njit(cache=True)
def point_mass_gravity_mu_partial(relative_position):
    """Partial of point-mass gravity w.r.t. the gravitational parameter."""
    r2 = relative_position[0]**2 + relative_position[1]**2 + relative_position[2]**2
    r3 = r2 * np.sqrt(r2)
    return -relative_position / r3


class CentralGravityPartial(AccelerationPartial):
    """
    Partials of the point-mass gravity exerted by ``influencing_body``.

    Parameters
    ----------
    affected_body : str
        Body undergoing the acceleration
    influencing_body : str
        Body exerting the acceleration
    affected_position_function : callable
        Returns the current position of ``affected_body``
    influencing_position_function : callable
        Returns the current position of ``influencing_body``
    gravitational_parameter_function : callable
        Returns the current gravitational parameter of ``influencing_body``
    """

    def __init__(self, affected_body, influencing_body, affected_position_function,
                 influencing_position_function, gravitational_parameter_function):
        super().__init__(affected_body, influencing_body, 'point_mass_gravity')
        self._affected_position = affected_position_function
        self._influencing_position = influencing_position_function
        self._gravitational_parameter = gravitational_parameter_function
        self._relative_position = np.zeros(3, dtype=np.float64)
        self._position_partial = np.zeros((3, 3), dtype=np.float64)

    def update(self, current_time):
        self._relative_position = (
            np.asarray(self._affected_position(), dtype=np.float64)
            - np.asarray(self._influencing_position(), dtype=np.float64))
        self._position_partial = point_mass_gravity_position_partial(
            self._relative_position, float(self._gravitational_parameter()))

    def partial_wrt_position_of_affected(self):
        return self._position_partial

    def wrt_gravitational_parameter(self, out):
        out[:, 0] = point_mass_gravity_mu_partial(self._relative_position)

    def get_parameter_partial_function(self, parameter):
        if (parameter.parameter_type is ParameterType.GRAVITATIONAL_PARAMETER
                and parameter.associated_body == self.influencing_body):
            return self.wrt_gravitational_parameter, 1
        return None, 0
