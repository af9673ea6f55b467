import numpy as np

from orbsens.algorithms.partials.gravity import CentralGravityPartial
from orbsens.algorithms.partials.mass import ConstantMassRatePartial
from orbsens.algorithms.partials.radiation import CannonBallRadiationPressurePartial
from orbsens.models.parameters import EstimatableParameter, ParameterType
from orbsens.models.state_types import IntegratedStateType
from orbsens.utils.constants import AU, MU_EARTH, SOLAR_RADIATION_PRESSURE_1AU

AREA = 4.0
MASS = 500.0
COEFFICIENT = 1.3


def _central_difference(function, x, step):
    columns = []
    for i in range(len(x)):
        dx = np.zeros_like(x)
        dx[i] = step
        columns.append((function(x + dx) - function(x - dx)) / (2 * step))
    return np.column_stack(columns)


def gravity_acceleration(position, mu=MU_EARTH):
    return -mu * position / np.linalg.norm(position)**3


def radiation_pressure(range_vector):
    return SOLAR_RADIATION_PRESSURE_1AU * (AU / np.linalg.norm(range_vector))**2


def radiation_acceleration(position, source, coefficient=COEFFICIENT):
    range_vector = position - source
    return (coefficient * AREA * radiation_pressure(range_vector) / MASS
            * range_vector / np.linalg.norm(range_vector))


def test_gravity_position_partial():
    position = np.array([6778.0, 1200.0, -350.0])
    partial = CentralGravityPartial('Sat', 'Earth', lambda: position, lambda: np.zeros(3), lambda: MU_EARTH)
    partial.refresh(0.0)

    expected = _central_difference(gravity_acceleration, position, 1e-3)
    np.testing.assert_allclose(partial.partial_wrt_position_of_affected(), expected, rtol=1e-6, atol=1e-14)
    np.testing.assert_allclose(partial.partial_wrt_position_of_influencing(),
                               -partial.partial_wrt_position_of_affected())


def test_gravity_partial_is_symmetric():
    position = np.array([-4000.0, 5000.0, 2500.0])
    partial = CentralGravityPartial('Sat', 'Earth', lambda: position, lambda: np.zeros(3), lambda: MU_EARTH)
    partial.refresh(0.0)
    matrix = partial.partial_wrt_position_of_affected()
    np.testing.assert_allclose(matrix, matrix.T)
    np.testing.assert_allclose(np.trace(matrix), 0.0, atol=1e-18)


def test_gravity_state_blocks():
    position = np.array([7000.0, 0.0, 0.0])
    moon_position = np.array([384400.0, 0.0, 0.0])
    partial = CentralGravityPartial('Sat', 'Moon', lambda: position, lambda: moon_position, lambda: 4902.8)
    partial.refresh(0.0)

    affected, width = partial.derivative_function_wrt_state(IntegratedStateType.TRANSLATIONAL, 'Sat')
    assert width == 6
    block = np.ones((3, 6))
    affected(block)
    np.testing.assert_allclose(block[:, :3], 1.0 + partial.partial_wrt_position_of_affected())
    np.testing.assert_array_equal(block[:, 3:], np.ones((3, 3)))

    influencing, width = partial.derivative_function_wrt_state(IntegratedStateType.TRANSLATIONAL, 'Moon')
    assert width == 6
    block = np.zeros((3, 6))
    influencing(block)
    np.testing.assert_allclose(block[:, :3], -partial.partial_wrt_position_of_affected())

    assert partial.derivative_function_wrt_state(IntegratedStateType.TRANSLATIONAL, 'Earth') == (None, 0)
    assert partial.derivative_function_wrt_state(IntegratedStateType.MASS, 'Sat') == (None, 0)


def test_gravity_parameter_partial():
    position = np.array([6778.0, 1200.0, -350.0])
    partial = CentralGravityPartial('Sat', 'Earth', lambda: position, lambda: np.zeros(3), lambda: MU_EARTH)
    partial.refresh(0.0)

    earth_mu = EstimatableParameter(ParameterType.GRAVITATIONAL_PARAMETER, 'Earth')
    moon_mu = EstimatableParameter(ParameterType.GRAVITATIONAL_PARAMETER, 'Moon')
    assert partial.parameter_dependency(earth_mu) == 1
    assert partial.parameter_dependency(moon_mu) == 0

    out = np.zeros((3, 1))
    partial.write_parameter_partial(earth_mu, out)
    expected = (gravity_acceleration(position, MU_EARTH + 1.0) - gravity_acceleration(position, MU_EARTH - 1.0)) / 2
    np.testing.assert_allclose(out[:, 0], expected, rtol=1e-9)

    untouched = np.full((3, 1), 7.0)
    partial.write_parameter_partial(moon_mu, untouched)
    np.testing.assert_array_equal(untouched, np.full((3, 1), 7.0))


def test_radiation_position_partial():
    position = np.array([7000.0, -1500.0, 300.0])
    source = np.array([AU, 0.0, 0.0])
    partial = CannonBallRadiationPressurePartial(
        'Sat', 'Sun', lambda: position, lambda: source, lambda: AREA, lambda: COEFFICIENT,
        lambda: radiation_pressure(position - source), lambda: MASS)
    partial.refresh(0.0)

    expected = _central_difference(lambda r: radiation_acceleration(r, source), position, 1000.0)
    np.testing.assert_allclose(partial.partial_wrt_position_of_affected(), expected, rtol=1e-5, atol=1e-24)


def test_radiation_coefficient_partial():
    position = np.array([7000.0, -1500.0, 300.0])
    source = np.array([AU, 2.0e7, 0.0])
    partial = CannonBallRadiationPressurePartial(
        'Sat', 'Sun', lambda: position, lambda: source, lambda: AREA, lambda: COEFFICIENT,
        lambda: radiation_pressure(position - source), lambda: MASS)
    partial.refresh(0.0)

    cr = EstimatableParameter(ParameterType.RADIATION_PRESSURE_COEFFICIENT, 'Sat')
    assert partial.parameter_dependency(cr) == 1
    assert partial.parameter_dependency(EstimatableParameter(ParameterType.RADIATION_PRESSURE_COEFFICIENT, 'Moon')) == 0

    out = np.zeros((3, 1))
    partial.write_parameter_partial(cr, out)
    np.testing.assert_allclose(out[:, 0], radiation_acceleration(position, source) / COEFFICIENT, rtol=1e-12)


def test_refresh_is_memoized():
    calls = []

    def position():
        calls.append(1)
        return np.array([7000.0, 0.0, 0.0])

    partial = CentralGravityPartial('Sat', 'Earth', position, lambda: np.zeros(3), lambda: MU_EARTH)
    partial.refresh(1.0)
    partial.refresh(1.0)
    assert len(calls) == 1
    assert partial.current_time == 1.0

    partial.refresh(2.0)
    assert len(calls) == 2

    partial.reset_time()
    partial.refresh(2.0)
    assert len(calls) == 3


def test_mass_rate_partial():
    partial = ConstantMassRatePartial('Sat')
    assert partial.state_type is IntegratedStateType.MASS
    assert partial.derivative_function_wrt_state(IntegratedStateType.MASS, 'Sat') == (None, 0)

    rate = EstimatableParameter(ParameterType.CONSTANT_MASS_RATE, 'Sat')
    out = np.zeros((1, 1))
    partial.write_parameter_partial(rate, out)
    assert out[0, 0] == 1.0
    assert partial.parameter_dependency(EstimatableParameter(ParameterType.CONSTANT_MASS_RATE, 'Other')) == 0
