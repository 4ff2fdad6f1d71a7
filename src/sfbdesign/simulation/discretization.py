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
Zero-Order-Hold Discretization

Exact discretization of dx/dt = Ax + Bu for inputs held constant over
each step h:

    Ad = exp(Ah)
    Bd = ∫₀ʰ exp(Aτ) dτ B

Two methods are provided:

- 'augmented' (default): one matrix exponential of the block matrix

      exp([[A, B], [0, 0]] h) = [[Ad, Bd], [0, I]]

  Valid for any A, including singular ones (integrator poles at the
  origin, which every integrator-augmented model has).

- 'inverse': Bd = A⁻¹(Ad - I)B, only for nonsingular A.

Usage
-----
>>> from sfbdesign.simulation import discretize_zoh, discretize
>>>
>>> Ad, Bd = discretize_zoh(A, B, dt=0.001)
>>> discrete_model = discretize(plant, dt=0.001)
"""

from typing import Optional, Tuple

import numpy as np
from scipy.linalg import expm, svd, solve

from sfbdesign.config import NumericalTolerances, resolve_tolerances
from sfbdesign.exceptions import DimensionError, SingularMatrixError
from sfbdesign.systems.state_space_model import StateSpaceModel
from sfbdesign.types.core import InputMatrix, StateMatrix

ZOH_METHODS = ("augmented", "inverse")


def _validate_step(dt: float) -> float:
    dt = float(dt)
    if not np.isfinite(dt) or dt <= 0:
        raise ValueError(f"dt must be a positive finite number, got {dt}")
    return dt


def discretize_zoh(
    A: StateMatrix,
    B: InputMatrix,
    dt: float,
    method: str = "augmented",
    tolerances: Optional[NumericalTolerances] = None,
) -> Tuple[StateMatrix, InputMatrix]:
    """
    Zero-order-hold discretization of (A, B).

    Args:
        A: State matrix (nx, nx)
        B: Input matrix (nx, nu)
        dt: Sampling period h > 0
        method: 'augmented' or 'inverse'
        tolerances: Singularity threshold for the 'inverse' method

    Returns:
        (Ad, Bd)

    Raises:
        ValueError: If dt <= 0 or the method is unknown
        DimensionError: If A is not square or B does not have nx rows
        SingularMatrixError: If method='inverse' and A is singular

    Examples
    --------
    >>> # Double integrator: Ad = [[1, h], [0, 1]], Bd = [[h²/2], [h]]
    >>> Ad, Bd = discretize_zoh([[0, 1], [0, 0]], [[0], [1]], dt=0.1)
    """
    dt = _validate_step(dt)
    if method not in ZOH_METHODS:
        raise ValueError(f"method must be one of {ZOH_METHODS}, got '{method}'")

    A_np = np.asarray(A, dtype=np.float64)
    B_np = np.asarray(B, dtype=np.float64)
    if A_np.ndim != 2 or A_np.shape[0] != A_np.shape[1]:
        raise DimensionError(f"A must be square, got shape {A_np.shape}")
    nx = A_np.shape[0]
    if B_np.ndim != 2 or B_np.shape[0] != nx:
        raise DimensionError(f"B must have {nx} rows, got shape {B_np.shape}")
    nu = B_np.shape[1]

    if method == "augmented":
        M = np.zeros((nx + nu, nx + nu))
        M[:nx, :nx] = A_np * dt
        M[:nx, nx:] = B_np * dt
        E = expm(M)
        return E[:nx, :nx], E[:nx, nx:]

    tol = resolve_tolerances(tolerances)
    s = svd(A_np, compute_uv=False)
    if s[0] == 0.0 or s[-1] <= tol.singular_tol * s[0]:
        raise SingularMatrixError(
            "A is singular; use method='augmented' for models with poles at the origin"
        )
    Ad = expm(A_np * dt)
    Bd = solve(A_np, (Ad - np.eye(nx)) @ B_np)
    return Ad, Bd


def discretize(
    model: StateSpaceModel,
    dt: float,
    method: str = "augmented",
    tolerances: Optional[NumericalTolerances] = None,
) -> StateSpaceModel:
    """
    Discrete-time model (Ad, Bd, C, D) under zero-order hold.

    The returned StateSpaceModel holds discrete-time matrices; its
    continuous-time helpers (dc_gain, is_stable) do not apply to it.
    """
    Ad, Bd = discretize_zoh(model.A, model.B, dt, method=method, tolerances=tolerances)
    return StateSpaceModel(Ad, Bd, model.C, model.D)


__all__ = ["ZOH_METHODS", "discretize_zoh", "discretize"]
