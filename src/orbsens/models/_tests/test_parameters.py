import numpy as np
import pytest

from orbsens.exceptions import StructuralError
from orbsens.models.parameters import (
    EstimatableParameter,
    EstimatableParameterSet,
    InitialStateParameter,
    ParameterIdentifier,
    ParameterType,
)
from orbsens.models.state_types import (
    IntegratedStateType,
    derivative_entries_per_entity,
    differential_equation_order,
    kinematic_entries_per_entity,
    single_integration_size,
)


def test_state_type_sizes():
    assert single_integration_size(IntegratedStateType.TRANSLATIONAL) == 6
    assert differential_equation_order(IntegratedStateType.TRANSLATIONAL) == 2
    assert kinematic_entries_per_entity(IntegratedStateType.TRANSLATIONAL) == 3
    assert derivative_entries_per_entity(IntegratedStateType.TRANSLATIONAL) == 3

    assert single_integration_size(IntegratedStateType.ROTATIONAL) == 7
    assert kinematic_entries_per_entity(IntegratedStateType.ROTATIONAL) == 0
    assert kinematic_entries_per_entity(IntegratedStateType.MASS) == 0
    assert derivative_entries_per_entity(IntegratedStateType.MASS) == 1


def test_unknown_state_type():
    with pytest.raises(ValueError):
        single_integration_size('translational_state')


def test_initial_states_lead_the_parameter_set():
    drag = EstimatableParameter(ParameterType.CONSTANT_DRAG_COEFFICIENT, 'Sat', value=2.2)
    mass = InitialStateParameter('Sat', IntegratedStateType.MASS, value=[500.0])
    sat = InitialStateParameter('Sat', central_body='Earth', value=np.arange(6.0))
    moon = InitialStateParameter('Moon', central_body='Earth', value=np.ones(6))
    mu = EstimatableParameter(ParameterType.GRAVITATIONAL_PARAMETER, 'Earth', value=398600.4418)

    parameter_set = EstimatableParameterSet([drag, mass, sat, mu, moon])

    assert [p.identifier for p in parameter_set.parameters] == [
        sat.identifier, moon.identifier, mass.identifier, drag.identifier, mu.identifier]
    assert parameter_set.parameter_set_size == 6 + 6 + 1 + 1 + 1
    assert parameter_set.initial_state_parameter_size == 13

    starts = [start for start, _ in parameter_set]
    assert starts == [0, 6, 12, 13, 14]
    assert parameter_set.start_index(mu.identifier) == 14

    assert parameter_set.estimated_bodies() == {
        IntegratedStateType.TRANSLATIONAL: ['Sat', 'Moon'],
        IntegratedStateType.MASS: ['Sat'],
    }
    assert parameter_set.central_bodies() == ['Earth', 'Earth']
    assert parameter_set.auxiliary_parameters == [drag, mu]

    np.testing.assert_array_equal(
        parameter_set.initial_state_vector(),
        np.concatenate([np.arange(6.0), np.ones(6), [500.0]]))


def test_duplicate_parameter():
    with pytest.raises(StructuralError):
        EstimatableParameterSet([
            EstimatableParameter(ParameterType.RADIATION_PRESSURE_COEFFICIENT, 'Sat'),
            EstimatableParameter(ParameterType.RADIATION_PRESSURE_COEFFICIENT, 'Sat'),
        ])


def test_unknown_parameter():
    parameter_set = EstimatableParameterSet([InitialStateParameter('Sat', central_body='Earth')])
    identifier = ParameterIdentifier(ParameterType.GRAVITATIONAL_PARAMETER, 'Earth')

    assert identifier not in parameter_set
    with pytest.raises(StructuralError):
        parameter_set.start_index(identifier)


def test_invalid_parameter_values():
    with pytest.raises(ValueError):
        EstimatableParameter(ParameterType.SPHERICAL_HARMONICS_COSINE_BLOCK, 'Earth', size=0)
    with pytest.raises(ValueError):
        InitialStateParameter('Sat', value=np.zeros(3))

    parameter_set = EstimatableParameterSet([InitialStateParameter('Sat')])
    with pytest.raises(ValueError):
        parameter_set.initial_state_vector()


def test_vector_parameter_size():
    cosine_block = EstimatableParameter(
        ParameterType.SPHERICAL_HARMONICS_COSINE_BLOCK, 'Earth', size=4, secondary_identifier='2,0-3,2')
    parameter_set = EstimatableParameterSet([cosine_block, InitialStateParameter('Sat')])

    assert parameter_set.parameter_set_size == 10
    assert parameter_set.start_index(cosine_block.identifier) == 6
    assert parameter_set.get_parameter(cosine_block.identifier) is cosine_block
    assert 'Earth' in str(cosine_block.identifier)
