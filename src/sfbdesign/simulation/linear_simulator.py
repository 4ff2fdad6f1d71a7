# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Linear Simulator

Time response of a continuous-time StateSpaceModel to piecewise-constant
inputs on a uniform grid:

    x[k+1] = Ad x[k] + Bd u[k]
    y[k]   = C x[k] + D u[k]

with (Ad, Bd) from exact zero-order-hold discretization. The input
sample u[k] is held over [t_k, t_{k+1}).

Simulation is a pure function of its arguments: identical calls return
bit-identical trajectories.

Usage
-----
>>> from sfbdesign.simulation import make_time_grid, simulate
>>>
>>> t = make_time_grid(0.0, 2.0, 0.001)
>>> u = N * np.ones_like(t)
>>> traj = simulate(plant.closed_loop(K), u, t)
>>> traj.outputs[-1]
array([1.])
"""

from typing import List, Optional, Tuple

import numpy as np

from sfbdesign.config import NumericalTolerances, resolve_tolerances
from sfbdesign.exceptions import (
    DimensionError,
    NumericalToleranceWarning,
    UnsupportedGridError,
    emit_warning,
)
from sfbdesign.simulation.discretization import discretize_zoh
from sfbdesign.systems.state_space_model import StateSpaceModel
from sfbdesign.types.core import InputTrajectory, StateVector, TimePoints
from sfbdesign.types.trajectories import SimulationTrajectory

SIMULATION_METHODS = ("zoh",)


def make_time_grid(start: float, stop: float, step: float) -> TimePoints:
    """
    Uniform grid start, start + step, ..., up to and including stop when
    (stop - start) is a multiple of step.

    Examples
    --------
    >>> make_time_grid(0.0, 2.0, 0.001).shape
    (2001,)
    """
    start, stop, step = float(start), float(stop), float(step)
    if not step > 0 or not np.isfinite(step):
        raise ValueError(f"step must be a positive finite number, got {step}")
    if not stop > start:
        raise ValueError(f"stop must be greater than start, got start={start}, stop={stop}")
    num_steps = int(np.floor((stop - start) / step + 1e-9))
    return start + step * np.arange(num_steps + 1)


def validate_time_grid(
    time: TimePoints,
    tolerances: Optional[NumericalTolerances] = None,
) -> Tuple[np.ndarray, float]:
    """
    Check a simulation grid and return it with its step.

    Raises:
        UnsupportedGridError: If the grid has fewer than 2 points, is not
            strictly increasing, or its steps deviate from the mean step by
            more than grid_rtol (relative) and more than the rounding of the
            time values
    """
    tol = resolve_tolerances(tolerances)
    t = np.asarray(time, dtype=np.float64)

    if t.ndim != 1:
        raise UnsupportedGridError(f"Time grid must be 1-D, got shape {t.shape}")
    if t.shape[0] < 2:
        raise UnsupportedGridError(f"Time grid needs at least 2 points, got {t.shape[0]}")
    if not np.all(np.isfinite(t)):
        raise UnsupportedGridError("Time grid contains non-finite values")

    steps = np.diff(t)
    if np.any(steps <= 0):
        raise UnsupportedGridError("Time grid must be strictly increasing")

    dt = (t[-1] - t[0]) / (t.shape[0] - 1)
    # Steps cannot be resolved more finely than the spacing of the time values
    allowed = max(tol.grid_rtol * dt, 4 * np.spacing(np.max(np.abs(t))))
    deviation = float(np.max(np.abs(steps - dt)))
    if deviation > allowed:
        raise UnsupportedGridError(
            f"Time grid must be uniform: step deviates from mean {dt:.6g} by "
            f"{deviation / dt:.3e} (relative)"
        )
    return t, float(dt)


def _prepare_inputs(inputs: Optional[InputTrajectory], n_points: int, nu: int) -> np.ndarray:
    if inputs is None:
        return np.zeros((n_points, nu))

    U = np.asarray(inputs, dtype=np.float64)
    if U.ndim == 1:
        if nu != 1:
            raise DimensionError(
                f"1-D input trajectory given for a model with {nu} inputs; "
                f"pass shape ({n_points}, {nu})"
            )
        U = U.reshape(-1, 1)
    if U.ndim != 2 or U.shape != (n_points, nu):
        raise DimensionError(f"Inputs must have shape ({n_points}, {nu}), got {U.shape}")
    return U


def simulate(
    model: StateSpaceModel,
    inputs: Optional[InputTrajectory],
    time: TimePoints,
    x0: Optional[StateVector] = None,
    method: str = "zoh",
    discretization: str = "augmented",
    tolerances: Optional[NumericalTolerances] = None,
) -> SimulationTrajectory:
    """
    Simulate a continuous-time model under zero-order-hold inputs.

    Args:
        model: Continuous-time model (A, B, C, D)
        inputs: (N,) for single-input models or (N, nu); None for zero input
        time: Uniform, strictly increasing grid (N,)
        x0: Initial state (nx,), zero if None
        method: Input interpolation, only 'zoh'
        discretization: ZOH formula, 'augmented' (default) or 'inverse'
        tolerances: Numerical thresholds (defaults if None)

    Returns:
        SimulationTrajectory with states and outputs at every grid point
        and any numerical diagnostics in its warnings field

    Raises:
        UnsupportedGridError: Malformed time grid
        DimensionError: Input or x0 shape mismatch
        ValueError: Unknown method

    Examples
    --------
    >>> t = make_time_grid(0.0, 2.0, 0.001)
    >>> r, d = reference_and_disturbance(t, 1.0, -0.1 * N)
    >>> traj = simulate(augmented, stack_inputs(d, r), t)
    >>> y = traj.outputs[:, 0]
    """
    if method not in SIMULATION_METHODS:
        raise ValueError(f"method must be one of {SIMULATION_METHODS}, got '{method}'")

    t, dt = validate_time_grid(time, tolerances)
    n_points = t.shape[0]
    nx, nu = model.num_states, model.num_inputs

    U = _prepare_inputs(inputs, n_points, nu)

    if x0 is None:
        x = np.zeros(nx)
    else:
        x = np.asarray(x0, dtype=np.float64).ravel()
        if x.shape[0] != nx:
            raise DimensionError(f"x0 must have length {nx}, got {x.shape[0]}")

    Ad, Bd = discretize_zoh(model.A, model.B, dt, method=discretization, tolerances=tolerances)

    X = np.empty((n_points, nx))
    X[0] = x
    for k in range(n_points - 1):
        X[k + 1] = Ad @ X[k] + Bd @ U[k]

    Y = X @ model.C.T + U @ model.D.T

    messages: List[str] = []
    finite = np.all(np.isfinite(X), axis=1)
    if not np.all(finite):
        first = int(np.argmin(finite))
        emit_warning(
            messages,
            f"State trajectory overflows to non-finite values from t = {t[first]:.6g} "
            f"(index {first})",
            NumericalToleranceWarning,
        )

    return SimulationTrajectory(
        time=t.copy(),
        states=X,
        outputs=Y,
        inputs=U.copy(),
        dt=dt,
        method=method,
        warnings=tuple(messages),
    )


__all__ = ["SIMULATION_METHODS", "make_time_grid", "validate_time_grid", "simulate"]
