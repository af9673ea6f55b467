"""
Physical constants and default settings.

Lengths are in km and times in s unless noted otherwise. Constants are stored
as numpy float64 values for consistency in numerical computations.

References
----------
- IERS Conventions (2010), Table 1.1
- NASA JPL Solar System Dynamics (https://ssd.jpl.nasa.gov/)
"""

import numpy as np

# Gravitational parameters
#-------------------------

#: float: Gravitational parameter of the Earth (km^3 s^-2)
MU_EARTH = np.float64(398600.4418)

# Radiation pressure
#-------------------

#: float: Astronomical unit (km)
AU = np.float64(149597870.7)

#: float: Solar radiation pressure at 1 AU (N m^-2)
SOLAR_RADIATION_PRESSURE_1AU = np.float64(4.56e-6)

# Integration defaults
#---------------------

#: float: Default relative tolerance of the integrator
DEFAULT_RTOL = 1e-12

#: float: Default absolute tolerance of the integrator
DEFAULT_ATOL = 1e-12

#: str: Default integration method passed to scipy.integrate.solve_ivp
DEFAULT_METHOD = 'DOP853'
