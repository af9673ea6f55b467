"""
Row and column bookkeeping for the variational equations.

The composite matrix [Phi | S] has one row per propagated state entry and one
column per estimated parameter value. Rows are grouped by state type (in
:data:`~orbsens.models.state_types.STATE_TYPE_ORDER`), then by entity, so the
rows of the initial-state columns coincide with the columns of the initial
state parameters. This module translates entities and parameters into these
ranges and determines the order in which central-body chain-rule corrections
are applied.
"""

import logging

from orbsens.exceptions import StructuralError
from orbsens.models.state_types import (
    STATE_TYPE_ORDER,
    IntegratedStateType,
    kinematic_entries_per_entity,
    single_integration_size,
)

logger = logging.getLogger(__name__)


def determine_update_order(bodies, central_bodies):
    """
    Order propagated bodies so that each comes after its central body.

    Only central bodies that are themselves propagated impose an ordering;
    bodies propagated w.r.t. a fixed origin are free.

    Parameters
    ----------
    bodies : list of str
        Propagated bodies
    central_bodies : list of str
        Central (reference) body of each entry of ``bodies``

    Returns
    -------
    list of str
        ``bodies`` in update order

    Raises
    ------
    StructuralError
        If a body is, directly or through other propagated bodies, defined
        relative to itself.
    """
    if len(bodies) != len(central_bodies):
        raise ValueError(f"Got {len(bodies)} propagated bodies but {len(central_bodies)} central bodies")
    if len(set(bodies)) != len(bodies):
        raise StructuralError(f"Propagated bodies are not unique: {bodies}")

    central_of = dict(zip(bodies, central_bodies))
    order = []
    resolved = set()

    for body in bodies:
        # Walk up the chain of propagated central bodies until an origin (or a
        # body already placed) is reached
        chain = []
        current = body
        while current in central_of and current not in resolved:
            if current in chain:
                cycle = ' -> '.join(chain[chain.index(current):] + [current])
                raise StructuralError(f"Cyclic central body definition: {cycle}")
            chain.append(current)
            current = central_of[current]

        for entry in reversed(chain):
            order.append(entry)
            resolved.add(entry)

    return order


class VariationalIndexMap:
    """
    Placement of propagated states and estimated parameters in [Phi | S].

    Parameters
    ----------
    parameter_set : EstimatableParameterSet
        Parameters to estimate; its initial state parameters define the
        propagated entities

    Attributes
    ----------
    total_state_size : int
        Number of propagated state entries (rows of [Phi | S])
    number_of_parameter_values : int
        Number of estimated parameter values (columns of [Phi | S])
    state_type_start_indices : dict
        First row of each propagated state type
    update_order : list of str
        Translationally propagated bodies, central bodies first
    """

    def __init__(self, parameter_set):
        self._estimated_bodies = parameter_set.estimated_bodies()

        self.state_type_start_indices = {}
        row = 0
        for state_type in STATE_TYPE_ORDER:
            if state_type in self._estimated_bodies:
                self.state_type_start_indices[state_type] = row
                row += single_integration_size(state_type) * len(self._estimated_bodies[state_type])
        self.total_state_size = row
        self.number_of_parameter_values = parameter_set.parameter_set_size

        if parameter_set.initial_state_parameter_size != self.total_state_size:
            raise StructuralError(
                f"Initial state parameters span {parameter_set.initial_state_parameter_size} columns, "
                f"but the propagated state has {self.total_state_size} entries")

        self._parameter_indices = {}
        for start_index, parameter in parameter_set:
            self._parameter_indices[parameter.identifier] = (start_index, parameter.size)

        translational_bodies = self._estimated_bodies.get(IntegratedStateType.TRANSLATIONAL, [])
        central_bodies = parameter_set.central_bodies(IntegratedStateType.TRANSLATIONAL)
        self.update_order = determine_update_order(translational_bodies, central_bodies)
        self._central_body_addition_indices = self._set_central_body_addition_indices(
            translational_bodies, central_bodies)

    def _set_central_body_addition_indices(self, bodies, central_bodies):
        central_of = dict(zip(bodies, central_bodies))
        addition_indices = []
        for body in reversed(self.update_order):
            central_body = central_of[body]
            if central_body in central_of:
                addition_indices.append((
                    self.body_state_indices(IntegratedStateType.TRANSLATIONAL, body)[0],
                    self.body_state_indices(IntegratedStateType.TRANSLATIONAL, central_body)[0]))
                logger.debug(f"{body} is propagated w.r.t. propagated body {central_body}")
        return addition_indices

    @property
    def estimated_bodies(self):
        """Ordered list of propagated entities per state type."""
        return {state_type: list(bodies) for state_type, bodies in self._estimated_bodies.items()}

    @property
    def central_body_addition_indices(self):
        """
        Column pairs (dependent start, central start) for chain-rule corrections.

        Listed in reverse update order: a body's columns are complete before
        they are added to those of its own central body.
        """
        return list(self._central_body_addition_indices)

    @property
    def number_of_auxiliary_parameter_values(self):
        return self.number_of_parameter_values - self.total_state_size

    def number_of_entities(self, state_type):
        return len(self._estimated_bodies.get(state_type, []))

    def state_indices(self, state_type, entity_index):
        """
        Rows of an entity's state.

        Parameters
        ----------
        state_type : IntegratedStateType
            Type of the state
        entity_index : int
            Index of the entity among the propagated entities of ``state_type``

        Returns
        -------
        tuple
            (row_start, width)

        Raises
        ------
        StructuralError
            If no such entity is propagated.
        """
        count = self.number_of_entities(state_type)
        if not 0 <= entity_index < count:
            raise StructuralError(
                f"No propagated entity {entity_index} of type {state_type.value} ({count} propagated)")
        width = single_integration_size(state_type)
        return self.state_type_start_indices[state_type] + entity_index * width, width

    def body_state_indices(self, state_type, body):
        """Rows of the state of ``body``, as (row_start, width)."""
        bodies = self._estimated_bodies.get(state_type, [])
        if body not in bodies:
            raise StructuralError(f"{body} has no propagated {state_type.value}")
        return self.state_indices(state_type, bodies.index(body))

    def derivative_rows(self, state_type, entity_index):
        """
        Rows of an entity's state that receive model partials.

        The kinematic rows of second-order states are skipped.

        Returns
        -------
        tuple
            (row_start, number_of_rows)
        """
        row_start, width = self.state_indices(state_type, entity_index)
        skipped = kinematic_entries_per_entity(state_type)
        return row_start + skipped, width - skipped

    def parameter_indices(self, identifier):
        """
        Columns of an estimated parameter, as (column_start, width).

        Raises
        ------
        StructuralError
            If the parameter is not estimated.
        """
        try:
            return self._parameter_indices[identifier]
        except KeyError:
            raise StructuralError(f"Parameter {identifier} is not in the estimated parameter set") from None
