"""
Interfaces of state-derivative partial providers.

A partial provider belongs to one (affected entity, influencing entity, model)
triple and supplies the partial derivatives of the affected entity's state
derivative w.r.t. the states of propagated entities and w.r.t. estimated
parameters. The variational equations only use the interfaces defined here;
the concrete force-model variants live in the sibling modules.

All partials are evaluated at the time passed to the last :meth:`refresh`
call. Providers are expected to read the current states of the bodies from
functions supplied at construction, so the environment must be updated before
``refresh`` is called.
"""

from abc import ABC, abstractmethod

import numpy as np

from orbsens.models.state_types import IntegratedStateType


class StateDerivativePartial(ABC):
    """
    Base class for partials of a state derivative model.

    Parameters
    ----------
    state_type : IntegratedStateType
        Type of the state whose derivative this model contributes to
    affected_body : str
        Entity whose state derivative is computed
    influencing_body : str
        Entity exerting the effect (may equal ``affected_body`` for models
        without an external body, e.g. a mass rate)
    model_type : str
        Name of the model family (e.g. "point_mass_gravity")
    """

    def __init__(self, state_type, affected_body, influencing_body, model_type):
        self.state_type = state_type
        self.affected_body = affected_body
        self.influencing_body = influencing_body
        self.model_type = model_type
        self._current_time = None
        self._parameter_partial_functions = {}

    def __repr__(self):
        return (f"{type(self).__name__}(affected_body={self.affected_body!r}, "
                f"influencing_body={self.influencing_body!r}, model_type={self.model_type!r})")

    @property
    def current_time(self):
        return self._current_time

    def refresh(self, current_time):
        """
        Bring the partials up to date at ``current_time``.

        Recomputes only when ``current_time`` differs from the time of the
        previous refresh (exact comparison).
        """
        if not self._current_time == current_time:
            self.update(current_time)
            self._current_time = current_time

    def reset_time(self):
        """Force recomputation on the next :meth:`refresh`."""
        self._current_time = None

    @abstractmethod
    def update(self, current_time):
        """Recompute the cached partials at ``current_time``."""

    @abstractmethod
    def derivative_function_wrt_state(self, state_type, body):
        """
        Function adding the partial w.r.t. the state of a propagated entity.

        Parameters
        ----------
        state_type : IntegratedStateType
            Type of the state w.r.t. which the partial is taken
        body : str
            Entity w.r.t. whose state the partial is taken

        Returns
        -------
        tuple
            (function, width). ``function(block)`` adds the partial into a
            block with one row per derivative entry of this model and
            ``width`` columns. ``(None, 0)`` when there is no dependency.
        """

    def get_parameter_partial_function(self, parameter):
        """
        Function computing the partial w.r.t. an estimated parameter.

        Returns ``(None, 0)`` for parameters the model does not depend on;
        subclasses override this for the parameters they support.

        Parameters
        ----------
        parameter : EstimatableParameter
            Parameter w.r.t. which the partial is to be taken

        Returns
        -------
        tuple
            (function, width). ``function(out)`` writes the partial into
            ``out``, an array of shape (derivative rows, width).
        """
        return None, 0

    def parameter_dependency(self, parameter):
        """
        Number of columns of the partial w.r.t. ``parameter`` (0 if none).

        A non-zero result registers the partial function so that it can be
        retrieved with :meth:`write_parameter_partial`.
        """
        function, width = self.get_parameter_partial_function(parameter)
        if width > 0:
            self._parameter_partial_functions[parameter.identifier] = function
        return width

    def write_parameter_partial(self, parameter, out):
        """
        Write the current partial w.r.t. ``parameter`` into ``out``.

        ``out`` is left untouched if the model does not depend on the
        parameter.
        """
        function = self._parameter_partial_functions.get(parameter.identifier)
        if function is None:
            if self.parameter_dependency(parameter) == 0:
                return
            function = self._parameter_partial_functions[parameter.identifier]
        function(out)


class AccelerationPartial(StateDerivativePartial):
    """
    Partials of an acceleration exerted on ``affected_body`` by ``influencing_body``.

    Contributes three rows (the velocity-derivative rows of the translational
    state) and six columns (position and velocity) per propagated body.
    Subclasses provide the 3x3 partial w.r.t. the position of the affected
    body; the partial w.r.t. the position of the influencing body defaults to
    its negation, which holds for models depending only on the relative
    position of the two bodies.
    """

    #: bool: Whether the acceleration depends on the velocity of the bodies
    is_velocity_dependent = False

    def __init__(self, affected_body, influencing_body, model_type):
        super().__init__(IntegratedStateType.TRANSLATIONAL, affected_body, influencing_body, model_type)

    @abstractmethod
    def partial_wrt_position_of_affected(self):
        """3x3 partial of the acceleration w.r.t. the affected body's position."""

    def partial_wrt_position_of_influencing(self):
        """3x3 partial of the acceleration w.r.t. the influencing body's position."""
        return -self.partial_wrt_position_of_affected()

    def partial_wrt_velocity_of_affected(self):
        return np.zeros((3, 3), dtype=np.float64)

    def partial_wrt_velocity_of_influencing(self):
        return -self.partial_wrt_velocity_of_affected()

    def wrt_position_of_affected_body(self, block, add_contribution=True):
        """
        Add (or subtract) the partial w.r.t. the affected body's position.

        Parameters
        ----------
        block : ndarray
            3x3 view into the partial matrix, modified in place
        add_contribution : bool, optional
            Add the partial when True, subtract it otherwise
        """
        if add_contribution:
            block += self.partial_wrt_position_of_affected()
        else:
            block -= self.partial_wrt_position_of_affected()

    def wrt_position_of_influencing_body(self, block, add_contribution=True):
        """Add (or subtract) the partial w.r.t. the influencing body's position."""
        if add_contribution:
            block += self.partial_wrt_position_of_influencing()
        else:
            block -= self.partial_wrt_position_of_influencing()

    def wrt_velocity_of_affected_body(self, block, add_contribution=True):
        if add_contribution:
            block += self.partial_wrt_velocity_of_affected()
        else:
            block -= self.partial_wrt_velocity_of_affected()

    def wrt_velocity_of_influencing_body(self, block, add_contribution=True):
        if add_contribution:
            block += self.partial_wrt_velocity_of_influencing()
        else:
            block -= self.partial_wrt_velocity_of_influencing()

    def _wrt_state_of_affected_body(self, block):
        self.wrt_position_of_affected_body(block[:, :3])
        if self.is_velocity_dependent:
            self.wrt_velocity_of_affected_body(block[:, 3:])

    def _wrt_state_of_influencing_body(self, block):
        self.wrt_position_of_influencing_body(block[:, :3])
        if self.is_velocity_dependent:
            self.wrt_velocity_of_influencing_body(block[:, 3:])

    def derivative_function_wrt_state(self, state_type, body):
        if state_type is not IntegratedStateType.TRANSLATIONAL:
            return None, 0
        if body == self.affected_body:
            return self._wrt_state_of_affected_body, 6
        if body == self.influencing_body:
            return self._wrt_state_of_influencing_body, 6
        return None, 0
