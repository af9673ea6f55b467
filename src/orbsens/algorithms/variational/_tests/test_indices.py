import pytest

from orbsens.algorithms.variational.indices import VariationalIndexMap, determine_update_order
from orbsens.exceptions import StructuralError
from orbsens.models.parameters import (
    EstimatableParameter,
    EstimatableParameterSet,
    InitialStateParameter,
    ParameterIdentifier,
    ParameterType,
)
from orbsens.models.state_types import IntegratedStateType


def test_update_order_follows_central_bodies():
    order = determine_update_order(['A', 'B', 'D'], ['B', 'D', 'Earth'])
    assert order == ['D', 'B', 'A']


def test_update_order_of_independent_bodies():
    order = determine_update_order(['Sat1', 'Sat2', 'Moon'], ['Earth', 'Moon', 'Earth'])
    assert order.index('Moon') < order.index('Sat2')
    assert sorted(order) == ['Moon', 'Sat1', 'Sat2']


def test_update_order_cycle():
    with pytest.raises(StructuralError, match='Cyclic'):
        determine_update_order(['A', 'B', 'C'], ['B', 'C', 'A'])


def test_update_order_self_reference():
    with pytest.raises(StructuralError):
        determine_update_order(['A'], ['A'])


def test_update_order_length_mismatch():
    with pytest.raises(ValueError):
        determine_update_order(['A', 'B'], ['Earth'])


def _mixed_parameter_set():
    return EstimatableParameterSet([
        EstimatableParameter(ParameterType.RADIATION_PRESSURE_COEFFICIENT, 'Sat'),
        InitialStateParameter('Sat', central_body='Moon'),
        InitialStateParameter('Sat', IntegratedStateType.MASS),
        InitialStateParameter('Moon', central_body='Earth'),
        EstimatableParameter(ParameterType.SPHERICAL_HARMONICS_COSINE_BLOCK, 'Moon', size=3),
    ])


def test_state_and_parameter_indices():
    index_map = VariationalIndexMap(_mixed_parameter_set())

    assert index_map.total_state_size == 13
    assert index_map.number_of_parameter_values == 17
    assert index_map.number_of_auxiliary_parameter_values == 4
    assert index_map.state_type_start_indices == {
        IntegratedStateType.TRANSLATIONAL: 0,
        IntegratedStateType.MASS: 12,
    }

    assert index_map.state_indices(IntegratedStateType.TRANSLATIONAL, 1) == (6, 6)
    assert index_map.body_state_indices(IntegratedStateType.TRANSLATIONAL, 'Moon') == (6, 6)
    assert index_map.state_indices(IntegratedStateType.MASS, 0) == (12, 1)

    assert index_map.derivative_rows(IntegratedStateType.TRANSLATIONAL, 0) == (3, 3)
    assert index_map.derivative_rows(IntegratedStateType.TRANSLATIONAL, 1) == (9, 3)
    assert index_map.derivative_rows(IntegratedStateType.MASS, 0) == (12, 1)

    cr = ParameterIdentifier(ParameterType.RADIATION_PRESSURE_COEFFICIENT, 'Sat')
    cosine = ParameterIdentifier(ParameterType.SPHERICAL_HARMONICS_COSINE_BLOCK, 'Moon')
    assert index_map.parameter_indices(cr) == (13, 1)
    assert index_map.parameter_indices(cosine) == (14, 3)


def test_unknown_entities_and_parameters():
    index_map = VariationalIndexMap(_mixed_parameter_set())

    with pytest.raises(StructuralError):
        index_map.state_indices(IntegratedStateType.TRANSLATIONAL, 2)
    with pytest.raises(StructuralError):
        index_map.state_indices(IntegratedStateType.ROTATIONAL, 0)
    with pytest.raises(StructuralError):
        index_map.body_state_indices(IntegratedStateType.MASS, 'Moon')
    with pytest.raises(StructuralError):
        index_map.parameter_indices(ParameterIdentifier(ParameterType.GRAVITATIONAL_PARAMETER, 'Earth'))


def test_central_body_addition_indices():
    parameter_set = EstimatableParameterSet([
        InitialStateParameter('A', central_body='B'),
        InitialStateParameter('B', central_body='D'),
        InitialStateParameter('D', central_body='Earth'),
        InitialStateParameter('Sat', central_body='Earth'),
    ])
    index_map = VariationalIndexMap(parameter_set)

    assert index_map.update_order.index('D') < index_map.update_order.index('B') < index_map.update_order.index('A')
    # A's columns go into B's before B's go into D's
    assert index_map.central_body_addition_indices == [(0, 6), (6, 12)]


def test_cycle_in_parameter_set():
    parameter_set = EstimatableParameterSet([
        InitialStateParameter('A', central_body='B'),
        InitialStateParameter('B', central_body='A'),
    ])
    with pytest.raises(StructuralError):
        VariationalIndexMap(parameter_set)
