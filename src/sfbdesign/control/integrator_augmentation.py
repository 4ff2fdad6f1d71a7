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
Integrator Augmentation

Adds an integral-of-error state w to a plant so constant disturbances
and reference offsets are rejected:

    ẇ = Cx - r = y - r
    u = -Kx - kᵢw + d

Closed loop with inputs [d, r]:

    d/dt [x]   [A - BK   -Bkᵢ] [x]   [B   0] [d]
         [w] = [C         0  ] [w] + [0  -I] [r]

    y = [C  0] [x; w]

kᵢ is a caller-supplied tuning parameter, typically found by sweeping
values and judging the step response (see sfbdesign.design.workflows).

Usage
-----
>>> from sfbdesign.control import augment_with_integrator
>>>
>>> augmented = augment_with_integrator(plant, K, ki=200000.0)
>>> augmented.num_states   # nx + 1
3
>>> augmented.num_inputs   # [d, r]
2
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from sfbdesign.exceptions import DimensionError, NonzeroFeedthroughWarning, emit_warning
from sfbdesign.systems.state_space_model import StateSpaceModel
from sfbdesign.types.core import GainMatrix, MatrixLike


@dataclass(frozen=True, eq=False)
class AugmentedModel(StateSpaceModel):
    """
    Closed-loop model with integral action.

    State is [x; w] (nx + ny), input is [d; r] (nu + ny), output is y = Cx.

    Attributes
    ----------
    feedback_gain : GainMatrix
        State feedback K (nu, nx) folded into A
    integral_gain : np.ndarray
        Integral gain kᵢ (nu, ny) folded into A
    plant_states : int
        Number of plant states nx; the integrator states follow them
    """

    feedback_gain: Optional[GainMatrix] = None
    integral_gain: Optional[np.ndarray] = None
    plant_states: int = 0

    def __post_init__(self) -> None:
        super().__post_init__()
        for name in ("feedback_gain", "integral_gain"):
            value = getattr(self, name)
            if value is not None:
                arr = np.array(value, dtype=np.float64)
                arr.setflags(write=False)
                object.__setattr__(self, name, arr)

    @property
    def integrator_states(self) -> int:
        """Number of integrator states (ny of the plant)."""
        return self.num_states - self.plant_states

    def split_state(self, x: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Split [x; w] (or a time-major trajectory of it) into (x, w)."""
        x = np.asarray(x)
        return x[..., : self.plant_states], x[..., self.plant_states :]


def _coerce_feedback_gain(K: MatrixLike, nu: int, nx: int) -> np.ndarray:
    K_np = np.asarray(K, dtype=np.float64)
    if K_np.ndim == 1 and nu == 1:
        K_np = K_np.reshape(1, -1)
    if K_np.shape != (nu, nx):
        raise DimensionError(f"K must be ({nu}, {nx}), got {K_np.shape}")
    return K_np


def _coerce_integral_gain(ki: Union[float, MatrixLike], nu: int, ny: int) -> np.ndarray:
    ki_np = np.asarray(ki, dtype=np.float64)
    if ki_np.ndim == 0:
        if nu != ny:
            raise DimensionError(
                f"Scalar integral gain needs as many inputs as outputs, got nu={nu}, ny={ny}"
            )
        return float(ki_np) * np.eye(nu)
    if ki_np.ndim == 1 and ki_np.size == nu * ny:
        ki_np = ki_np.reshape(nu, ny)
    if ki_np.shape != (nu, ny):
        raise DimensionError(f"ki must be scalar or ({nu}, {ny}), got {ki_np.shape}")
    return ki_np


def integrator_plant(plant: StateSpaceModel) -> StateSpaceModel:
    """
    Open-loop plant with integrator states, inputs [u, r].

        d/dt [x]   [A  0] [x]   [B] u   [ 0]
             [w] = [C  0] [w] + [0]   + [-I] r

    Placing nx + ny poles on this model through the u channel
    (``place_poles(..., input_index=0)`` for a single input) yields the
    combined gain [K, kᵢ] directly.

    Args:
        plant: Plant model (A, B, C, D)

    Returns:
        StateSpaceModel with nx + ny states and nu + ny inputs
    """
    A, B, C = plant.A, plant.B, plant.C
    nx, nu, ny = plant.num_states, plant.num_inputs, plant.num_outputs

    if not plant.is_strictly_proper:
        emit_warning(
            None,
            "Plant has nonzero D; the integrator state ignores the direct feedthrough term",
            NonzeroFeedthroughWarning,
        )

    A_a = np.block([[A, np.zeros((nx, ny))], [C, np.zeros((ny, ny))]])
    B_a = np.block(
        [[B, np.zeros((nx, ny))], [np.zeros((ny, nu)), -np.eye(ny)]]
    )
    C_a = np.hstack([C, np.zeros((ny, ny))])

    return StateSpaceModel(A_a, B_a, C_a, np.zeros((ny, nu + ny)))


def augment_with_integrator(
    plant: StateSpaceModel,
    K: GainMatrix,
    ki: Union[float, MatrixLike],
) -> AugmentedModel:
    """
    Close the loop u = -Kx - kᵢw + d around the integrator-augmented plant.

    Args:
        plant: Plant model (A, B, C, D); D should be zero
        K: State feedback gain (nu, nx), e.g. from place_poles
        ki: Integral gain, scalar (nu == ny) or (nu, ny)

    Returns:
        AugmentedModel with inputs [d, r] and output y = Cx

    Raises:
        DimensionError: If K or ki have the wrong shape

    Examples
    --------
    >>> result = place_poles(plant, ClosedLoopSpec.from_damping(0.7, 40.0))
    >>> augmented = augment_with_integrator(plant, result['gain'], 200000.0)
    >>> augmented.is_stable()
    True
    """
    nx, nu, ny = plant.num_states, plant.num_inputs, plant.num_outputs
    K_np = _coerce_feedback_gain(K, nu, nx)
    ki_np = _coerce_integral_gain(ki, nu, ny)

    if not plant.is_strictly_proper:
        emit_warning(
            None,
            "Plant has nonzero D; it is dropped from the augmented closed loop",
            NonzeroFeedthroughWarning,
        )

    A, B, C = plant.A, plant.B, plant.C
    A_cl = np.block([[A - B @ K_np, -B @ ki_np], [C, np.zeros((ny, ny))]])
    B_cl = np.block(
        [[B, np.zeros((nx, ny))], [np.zeros((ny, nu)), -np.eye(ny)]]
    )
    C_cl = np.hstack([C, np.zeros((ny, ny))])
    D_cl = np.zeros((ny, nu + ny))

    return AugmentedModel(
        A_cl,
        B_cl,
        C_cl,
        D_cl,
        feedback_gain=K_np,
        integral_gain=ki_np,
        plant_states=nx,
    )


__all__ = ["AugmentedModel", "integrator_plant", "augment_with_integrator"]
