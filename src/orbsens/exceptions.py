"""
Exceptions raised by the sensitivity-propagation engine.
"""


class StructuralError(ValueError):
    """
    Inconsistency in the static structure of a variational-equations setup.

    Raised at construction time when the estimated states, the parameter set
    and the list of state-derivative partials do not describe the same system
    (missing state type, entity-count mismatch, dependency cycle among central
    bodies, unknown entity or parameter). No partially built object is
    returned when this is raised.
    """
