"""
Types of numerically integrated states.

Each state type has a fixed number of entries per propagated entity and a
differential equation order. For second-order dynamics (translational state)
the leading entries of each entity are related to the trailing ones by a
purely kinematic relation (d(position)/dt = velocity); the number of these
kinematic entries is ``size - size // order``.
"""

from enum import Enum


class IntegratedStateType(Enum):
    """Dynamical categories that can be propagated and estimated."""

    TRANSLATIONAL = 'translational_state'
    ROTATIONAL = 'rotational_state'
    MASS = 'body_mass_state'
    CUSTOM = 'custom_state'


# (entries per entity, differential equation order)
_STATE_TYPE_PROPERTIES = {
    IntegratedStateType.TRANSLATIONAL: (6, 2),
    IntegratedStateType.ROTATIONAL: (7, 1),
    IntegratedStateType.MASS: (1, 1),
    IntegratedStateType.CUSTOM: (1, 1),
}

#: tuple: Ordering of state types in the state vector and composite matrix
STATE_TYPE_ORDER = tuple(IntegratedStateType)


def single_integration_size(state_type):
    """
    Number of state entries of a single propagated entity.

    Parameters
    ----------
    state_type : IntegratedStateType
        Type of the state

    Returns
    -------
    int
        Size of the state of one entity (e.g. 6 for translational state)
    """
    try:
        return _STATE_TYPE_PROPERTIES[state_type][0]
    except KeyError:
        raise ValueError(f"Unknown integrated state type: {state_type!r}") from None


def differential_equation_order(state_type):
    """Order of the differential equation governing ``state_type``."""
    try:
        return _STATE_TYPE_PROPERTIES[state_type][1]
    except KeyError:
        raise ValueError(f"Unknown integrated state type: {state_type!r}") from None


def kinematic_entries_per_entity(state_type):
    """
    Number of leading entries per entity whose derivative is kinematic.

    These rows are not affected by force-model partials: they are identity
    sub-blocks in the state partial matrix and zero in the parameter partial
    matrix. Zero for first-order state types.
    """
    size = single_integration_size(state_type)
    return size - size // differential_equation_order(state_type)


def derivative_entries_per_entity(state_type):
    """Number of entries per entity whose derivative comes from force models."""
    return single_integration_size(state_type) - kinematic_entries_per_entity(state_type)
