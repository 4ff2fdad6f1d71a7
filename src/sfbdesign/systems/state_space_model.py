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
State-Space Model

Immutable continuous-time LTI model:

    ẋ = Ax + Bu
    y = Cx + Du

The model validates its dimensions once at construction and stores
read-only float64 copies of the matrices. Every derived model (closed
loop, augmented, discretized) is a new instance; the source is never
mutated.

Analysis methods are thin delegations to the pure functions in
sfbdesign.control.classical_control_functions.

Usage
-----
>>> import numpy as np
>>> from sfbdesign.systems import StateSpaceModel
>>>
>>> # DC motor joint: J θ'' + b θ' = u with J = 10, b = 0.1
>>> plant = StateSpaceModel(
...     A=[[0.0, 1.0], [0.0, -0.01]],
...     B=[0.0, 0.1],
...     C=[1.0, 0.0],
... )
>>> plant.num_states, plant.num_inputs, plant.num_outputs
(2, 1, 1)
>>> plant.is_controllable()
True
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

from sfbdesign.exceptions import DimensionError
from sfbdesign.types.core import (
    ControllabilityMatrix,
    FeedthroughMatrix,
    GainMatrix,
    InputMatrix,
    ObservabilityMatrix,
    OutputMatrix,
    PoleArray,
    StateMatrix,
)

if TYPE_CHECKING:
    from sfbdesign.config import NumericalTolerances
    from sfbdesign.types.control_classical import ControllabilityInfo


def _to_real_array(value, name: str) -> np.ndarray:
    """Copy ``value`` into a finite float64 array."""
    arr = np.array(value)
    if np.iscomplexobj(arr):
        raise ValueError(f"{name} must be real, got complex entries")
    try:
        arr = arr.astype(np.float64)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be numeric: {e}") from e
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} contains non-finite entries")
    return arr


def _freeze(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class StateSpaceModel:
    """
    Continuous-time state-space model: dx/dt = Ax + Bu, y = Cx + Du

    Shapes are coerced where unambiguous:
    - scalar A becomes (1, 1)
    - 1-D B of length nx becomes a column (nx, 1)
    - 1-D C of length nx becomes a row (1, nx)
    - D defaults to zeros (ny, nu); a scalar D is broadcast

    Attributes
    ----------
    A : StateMatrix
        State matrix (nx, nx)
    B : InputMatrix
        Input matrix (nx, nu)
    C : OutputMatrix
        Output matrix (ny, nx)
    D : FeedthroughMatrix
        Feedthrough matrix (ny, nu)

    Raises
    ------
    DimensionError
        If A is not square, empty, or B, C, D are inconsistent with it
    ValueError
        If any entry is complex or non-finite
    """

    A: StateMatrix
    B: InputMatrix
    C: OutputMatrix
    D: Optional[FeedthroughMatrix] = None

    def __post_init__(self) -> None:
        A = _to_real_array(self.A, "A")
        if A.ndim < 2 and A.size == 1:
            A = A.reshape(1, 1)
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise DimensionError(f"A must be square, got shape {A.shape}")
        nx = A.shape[0]
        if nx < 1:
            raise DimensionError("A must have at least one state")

        B = _to_real_array(self.B, "B")
        if B.ndim == 0:
            B = B.reshape(1, 1)
        elif B.ndim == 1:
            if B.shape[0] != nx:
                raise DimensionError(f"B must have {nx} rows, got 1-D array of length {B.shape[0]}")
            B = B.reshape(nx, 1)
        if B.ndim != 2 or B.shape[0] != nx:
            raise DimensionError(f"B must have {nx} rows, got shape {B.shape}")
        if B.shape[1] < 1:
            raise DimensionError("B must have at least one input column")
        nu = B.shape[1]

        C = _to_real_array(self.C, "C")
        if C.ndim == 0:
            C = C.reshape(1, 1)
        elif C.ndim == 1:
            if C.shape[0] != nx:
                raise DimensionError(f"C must have {nx} columns, got 1-D array of length {C.shape[0]}")
            C = C.reshape(1, nx)
        if C.ndim != 2 or C.shape[1] != nx:
            raise DimensionError(f"C must have {nx} columns, got shape {C.shape}")
        if C.shape[0] < 1:
            raise DimensionError("C must have at least one output row")
        ny = C.shape[0]

        if self.D is None:
            D = np.zeros((ny, nu))
        else:
            D = _to_real_array(self.D, "D")
            if D.ndim == 0:
                D = np.full((ny, nu), float(D))
            elif D.size == ny * nu and D.ndim == 1:
                D = D.reshape(ny, nu)
            if D.shape != (ny, nu):
                raise DimensionError(f"D must be ({ny}, {nu}), got {D.shape}")

        object.__setattr__(self, "A", _freeze(A))
        object.__setattr__(self, "B", _freeze(B))
        object.__setattr__(self, "C", _freeze(C))
        object.__setattr__(self, "D", _freeze(D))

    # ========================================================================
    # Dimensions
    # ========================================================================

    @property
    def num_states(self) -> int:
        """Number of state variables (nx)."""
        return self.A.shape[0]

    @property
    def num_inputs(self) -> int:
        """Number of inputs (nu)."""
        return self.B.shape[1]

    @property
    def num_outputs(self) -> int:
        """Number of outputs (ny)."""
        return self.C.shape[0]

    @property
    def is_strictly_proper(self) -> bool:
        """True if D is identically zero."""
        return not np.any(self.D)

    # ========================================================================
    # Structural Analysis
    # ========================================================================

    def controllability_matrix(self) -> ControllabilityMatrix:
        """
        Controllability matrix [B, AB, A²B, ..., Aⁿ⁻¹B] of shape (nx, nx*nu).
        """
        from sfbdesign.control.classical_control_functions import build_controllability_matrix

        return build_controllability_matrix(self.A, self.B)

    def controllability(
        self, tolerances: Optional["NumericalTolerances"] = None
    ) -> "ControllabilityInfo":
        """
        Full controllability analysis (rank, singular values, conditioning).

        Emits NearSingularWarning when the smallest nonzero singular value
        of the controllability matrix is within tolerance of zero.
        """
        from sfbdesign.control.classical_control_functions import analyze_controllability

        return analyze_controllability(self.A, self.B, tolerances=tolerances)

    def is_controllable(self, tolerances: Optional["NumericalTolerances"] = None) -> bool:
        """True iff the numerical rank of the controllability matrix equals nx."""
        return self.controllability(tolerances)["is_controllable"]

    def observability_matrix(self) -> ObservabilityMatrix:
        """Observability matrix [C; CA; ...; CAⁿ⁻¹] of shape (nx*ny, nx)."""
        from sfbdesign.control.classical_control_functions import build_observability_matrix

        return build_observability_matrix(self.A, self.C)

    def is_observable(self, tolerances: Optional["NumericalTolerances"] = None) -> bool:
        """True iff the numerical rank of the observability matrix equals nx."""
        from sfbdesign.control.classical_control_functions import analyze_observability

        return analyze_observability(self.A, self.C, tolerances=tolerances)["is_observable"]

    def dc_gain(self, tolerances: Optional["NumericalTolerances"] = None) -> np.ndarray:
        """
        Steady-state gain C(-A)⁻¹B + D of shape (ny, nu).

        Raises
        ------
        SingularMatrixError
            If A is singular (e.g. an integrator pole at the origin)
        """
        from sfbdesign.control.classical_control_functions import compute_dc_gain

        return compute_dc_gain(self, tolerances=tolerances)

    def poles(self) -> PoleArray:
        """Eigenvalues of A."""
        return np.linalg.eigvals(self.A)

    def is_stable(self, tolerances: Optional["NumericalTolerances"] = None) -> bool:
        """True if every pole has real part below -stability_tol."""
        from sfbdesign.control.classical_control_functions import analyze_stability

        return analyze_stability(self.A, system_type="continuous", tolerances=tolerances)[
            "is_stable"
        ]

    # ========================================================================
    # Derived Models
    # ========================================================================

    def closed_loop(self, K: GainMatrix) -> "StateSpaceModel":
        """
        Closed-loop model under u = -Kx + v: (A - BK, B, C, D).

        The new input v is the external (reference/feedforward) input.

        Raises
        ------
        DimensionError
            If K is not (nu, nx)
        """
        K = np.atleast_2d(_to_real_array(K, "K"))
        if K.shape != (self.num_inputs, self.num_states):
            raise DimensionError(
                f"K must be ({self.num_inputs}, {self.num_states}), got {K.shape}"
            )
        return StateSpaceModel(self.A - self.B @ K, self.B, self.C, self.D)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(nx={self.num_states}, nu={self.num_inputs}, "
            f"ny={self.num_outputs})"
        )


__all__ = ["StateSpaceModel"]
