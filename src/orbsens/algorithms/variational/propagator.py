"""
Numerical propagation of the variational equations.

This module integrates the composite matrix [Phi | S] with
scipy.integrate.solve_ivp, in one of two modes:

- coupled: the nominal state and [Phi | S] are integrated together, the
  nominal state derivative being supplied by the caller
- decoupled: only [Phi | S] is integrated, the nominal state being known from
  a separate (earlier) propagation and pushed into the environment by the
  caller at each evaluation time

In both modes the optional ``update_environment`` callback is called before
the variational equations are evaluated, so that the partial providers read
the nominal state at the current time.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
from scipy.integrate import solve_ivp

from orbsens.utils.constants import DEFAULT_ATOL, DEFAULT_METHOD, DEFAULT_RTOL

logger = logging.getLogger(__name__)


@dataclass
class VariationalSolution:
    """
    Result of a propagation of the variational equations.

    Attributes
    ----------
    t : ndarray
        Output times, shape (n_times,)
    state_transition_matrices : ndarray
        Phi at each output time, shape (n_times, n, n)
    sensitivity_matrices : ndarray
        S at each output time, shape (n_times, n, n_auxiliary)
    states : ndarray or None
        Nominal state at each output time, shape (n_times, n); only set for
        coupled propagation
    sol : OdeResult
        Raw solution object returned by solve_ivp
    """
    t: np.ndarray
    state_transition_matrices: np.ndarray
    sensitivity_matrices: np.ndarray
    states: Optional[np.ndarray] = None
    sol: Any = None

    @property
    def final_state_transition_matrix(self):
        return self.state_transition_matrices[-1]

    @property
    def final_sensitivity_matrix(self):
        return self.sensitivity_matrices[-1]


def _initial_composite(variational_equations, initial_composite):
    if initial_composite is None:
        return variational_equations.initial_composite_matrix()
    initial_composite = np.array(initial_composite, dtype=np.float64)
    expected_shape = (variational_equations.total_state_size, variational_equations.number_of_parameter_values)
    if initial_composite.shape != expected_shape:
        raise ValueError(f"Initial composite matrix must have shape {expected_shape}, got {initial_composite.shape}")
    return initial_composite


def _solve(ode_func, t_span, y0, t_eval, rtol, atol, method, solve_kwargs):
    sol = solve_ivp(
        ode_func,
        [t_span[0], t_span[-1]],
        y0,
        t_eval=t_eval,
        rtol=rtol,
        atol=atol,
        method=method,
        **solve_kwargs
    )
    if not sol.success:
        logger.error(f"Propagation of variational equations failed: {sol.message}")
        raise RuntimeError(f"Propagation of variational equations failed: {sol.message}")

    logger.debug(f"Variational equations propagated from t = {t_span[0]} to t = {t_span[-1]} "
                 f"with {sol.nfev} function evaluations")
    return sol


def _split_history(composite_history, state_size, number_of_parameter_values):
    composite_history = composite_history.reshape(-1, state_size, number_of_parameter_values)
    return composite_history[:, :, :state_size], composite_history[:, :, state_size:]


def propagate_variational_equations(variational_equations, state_derivative_function, initial_state, t_span,
                                    update_environment=None, t_eval=None, initial_composite=None,
                                    rtol=DEFAULT_RTOL, atol=DEFAULT_ATOL, method=DEFAULT_METHOD,
                                    **solve_kwargs):
    """
    Propagate the nominal state together with [Phi | S].

    Parameters
    ----------
    variational_equations : VariationalEquations
        Right-hand side of the variational equations
    state_derivative_function : callable
        ``f(t, state)`` returning the derivative of the nominal state
    initial_state : array_like
        Nominal state at ``t_span[0]``, in the row order of the variational
        equations (shape (total_state_size,))
    t_span : array_like
        Time span [t_start, t_end]; may be decreasing or of zero length
    update_environment : callable, optional
        ``update_environment(t, state)`` called before each evaluation, to
        make the current nominal state available to the partial providers
    t_eval : array_like, optional
        Times at which to store the solution (see solve_ivp)
    initial_composite : array_like, optional
        [Phi | S] at ``t_span[0]``; [I | 0] by default
    rtol, atol : float, optional
        Integrator tolerances
    method : str, optional
        Integration method ('RK45', 'DOP853', 'Radau', ...)
    **solve_kwargs
        Additional keyword arguments passed to scipy.integrate.solve_ivp

    Returns
    -------
    VariationalSolution
        States, state transition and sensitivity matrices at the output times

    Raises
    ------
    RuntimeError
        If the integrator fails.
    """
    state_size = variational_equations.total_state_size
    number_of_parameter_values = variational_equations.number_of_parameter_values

    initial_state = np.asarray(initial_state, dtype=np.float64)
    if initial_state.shape != (state_size,):
        raise ValueError(f"Initial state must have shape ({state_size},), got {initial_state.shape}")
    composite0 = _initial_composite(variational_equations, initial_composite)

    y0 = np.concatenate([initial_state, composite0.ravel()])

    def ode_func(t, y):
        state = y[:state_size]
        if update_environment is not None:
            update_environment(t, state)

        dy = np.empty_like(y)
        dy[:state_size] = state_derivative_function(t, state)
        variational_equations.evaluate_derivative_into(
            t, y[state_size:].reshape(state_size, number_of_parameter_values),
            dy[state_size:].reshape(state_size, number_of_parameter_values))
        return dy

    logger.info(f"Propagating state and variational equations from t = {t_span[0]} to t = {t_span[-1]}")
    sol = _solve(ode_func, t_span, y0, t_eval, rtol, atol, method, solve_kwargs)

    history = sol.y.T
    state_transition_matrices, sensitivity_matrices = _split_history(
        history[:, state_size:], state_size, number_of_parameter_values)

    return VariationalSolution(
        t=sol.t,
        state_transition_matrices=state_transition_matrices,
        sensitivity_matrices=sensitivity_matrices,
        states=history[:, :state_size],
        sol=sol,
    )


def propagate_sensitivities(variational_equations, t_span, update_environment=None, t_eval=None,
                            initial_composite=None, rtol=DEFAULT_RTOL, atol=DEFAULT_ATOL,
                            method=DEFAULT_METHOD, **solve_kwargs):
    """
    Propagate [Phi | S] along a separately propagated nominal trajectory.

    Parameters
    ----------
    variational_equations : VariationalEquations
        Right-hand side of the variational equations
    t_span : array_like
        Time span [t_start, t_end]
    update_environment : callable, optional
        ``update_environment(t)`` called before each evaluation, setting the
        nominal state at ``t`` (e.g. from a dense output of the nominal
        propagation)
    t_eval, initial_composite, rtol, atol, method, **solve_kwargs
        As for :func:`propagate_variational_equations`

    Returns
    -------
    VariationalSolution
        State transition and sensitivity matrices at the output times
        (``states`` is None)
    """
    state_size = variational_equations.total_state_size
    number_of_parameter_values = variational_equations.number_of_parameter_values

    y0 = _initial_composite(variational_equations, initial_composite).ravel()

    def ode_func(t, y):
        if update_environment is not None:
            update_environment(t)

        dy = np.empty_like(y)
        variational_equations.evaluate_derivative_into(
            t, y.reshape(state_size, number_of_parameter_values),
            dy.reshape(state_size, number_of_parameter_values))
        return dy

    logger.info(f"Propagating variational equations from t = {t_span[0]} to t = {t_span[-1]}")
    sol = _solve(ode_func, t_span, y0, t_eval, rtol, atol, method, solve_kwargs)

    state_transition_matrices, sensitivity_matrices = _split_history(
        sol.y.T, state_size, number_of_parameter_values)

    return VariationalSolution(
        t=sol.t,
        state_transition_matrices=state_transition_matrices,
        sensitivity_matrices=sensitivity_matrices,
        sol=sol,
    )
