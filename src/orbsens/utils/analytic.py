"""
Analytic state transition matrices.

Reference solutions used to verify numerically propagated variational
equations. The linearized relative motion about a circular Keplerian orbit is
described exactly by the Hill-Clohessy-Wiltshire (HCW) equations in the
rotating radial/along-track/cross-track frame; rotating the HCW state
transition matrix back to the inertial frame gives the two-body state
transition matrix of the circular orbit.
"""

import numpy as np


def hcw_stm(n, dt):
    """
    Analytical HCW state transition matrix.

    Relative state convention is [x, y, z, dx, dy, dz] with x radial,
    y along-track and z cross-track.

    Parameters
    ----------
    n : float
        Mean motion of the reference orbit [rad/s]
    dt : float
        Time interval [s]

    Returns
    -------
    ndarray
        6x6 state transition matrix
    """
    nt = n * dt
    c = np.cos(nt)
    s = np.sin(nt)

    return np.array([
        [4 - 3*c,      0, 0,  s/n,        2*(1 - c)/n,     0],
        [6*(s - nt),   1, 0, -2*(1 - c)/n, (4*s - 3*nt)/n, 0],
        [0,            0, c,  0,           0,              s/n],
        [3*n*s,        0, 0,  c,           2*s,            0],
        [-6*n*(1 - c), 0, 0, -2*s,         4*c - 3,        0],
        [0,            0, -n*s, 0,         0,              c],
    ])


def _inertial_to_hill(n, t):
    """
    6x6 map from inertial perturbations to rotating-frame (Hill) perturbations.

    The reference orbit lies in the inertial x-y plane and passes through the
    +x axis at t = 0.
    """
    theta = n * t
    c = np.cos(theta)
    s = np.sin(theta)

    rotation = np.array([
        [c, s, 0.0],
        [-s, c, 0.0],
        [0.0, 0.0, 1.0],
    ])
    rotation_rate = n * np.array([
        [-s, c, 0.0],
        [-c, -s, 0.0],
        [0.0, 0.0, 0.0],
    ])

    transformation = np.zeros((6, 6))
    transformation[:3, :3] = rotation
    transformation[3:, :3] = rotation_rate
    transformation[3:, 3:] = rotation
    return transformation


def circular_two_body_stm(mu, radius, dt):
    """
    Inertial-frame two-body state transition matrix of a circular orbit.

    Parameters
    ----------
    mu : float
        Gravitational parameter of the central body [km^3/s^2]
    radius : float
        Orbit radius [km]
    dt : float
        Time since the reference orbit crossed the +x axis [s]

    Returns
    -------
    ndarray
        6x6 matrix d(state(dt))/d(state(0)) for the circular orbit in the x-y
        plane with initial state [radius, 0, 0, 0, sqrt(mu/radius), 0]
    """
    n = np.sqrt(mu / radius**3)
    return (np.linalg.inv(_inertial_to_hill(n, dt)) @ hcw_stm(n, dt) @ _inertial_to_hill(n, 0.0))


def circular_orbit_state(mu, radius, t):
    """Inertial state of the circular reference orbit at time ``t``."""
    n = np.sqrt(mu / radius**3)
    v = n * radius
    c = np.cos(n * t)
    s = np.sin(n * t)
    return np.array([radius * c, radius * s, 0.0, -v * s, v * c, 0.0])
