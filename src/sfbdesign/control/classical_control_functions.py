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
Classical Control Theory Functions

Pure stateless functions for state-feedback design and analysis:

**Control Design:**
- Pole placement - Ackermann's formula (single input)
- DC gain and feedforward gain

**System Analysis:**
- Stability analysis - eigenvalue-based
- Controllability - SVD rank test with conditioning diagnostics
- Observability - SVD rank test

All functions are pure (no side effects, no state) and work like scipy.
Non-fatal conditioning problems are reported through the warnings module
and attached to the returned result.

Mathematical Background
-----------------------
Controllability: rank([B AB A²B ... Aⁿ⁻¹B]) = n
Observability:   rank([C; CA; CA²; ...; CAⁿ⁻¹]) = n

Rank is the number of singular values above rank_tol * σ_max.

Ackermann (single input):
    α(s) = Π(s - pᵢ) = sⁿ + a_{n-1}sⁿ⁻¹ + ... + a₀
    α(A) = Aⁿ + a_{n-1}Aⁿ⁻¹ + ... + a₀I
    K = [0 ... 0 1] 𝒞⁻¹ α(A)

DC gain and feedforward:
    G(0) = C(-A)⁻¹B + D
    N = G(0)⁻¹   so that y → r for a constant reference r

Stability:
    Continuous: All Re(λ) < 0 (left half-plane)
    Discrete:   All |λ| < 1 (inside unit circle)

Usage
-----
>>> import numpy as np
>>> from sfbdesign.systems import StateSpaceModel
>>> from sfbdesign.control import ClosedLoopSpec, place_poles, feedforward_gain
>>>
>>> plant = StateSpaceModel([[0, 1], [0, -0.01]], [0, 0.1], [1, 0])
>>> result = place_poles(plant, ClosedLoopSpec.from_damping(0.7, 18.0))
>>> K = result['gain']
>>> print(f"Gain: {K}")
>>>
>>> closed = plant.closed_loop(K)
>>> N = feedforward_gain(closed)
>>>
>>> # Stability analysis
>>> stability = analyze_stability(closed.A, system_type='continuous')
>>> print(f"Stable: {stability['is_stable']}")
"""

from typing import List, Optional, Tuple, Union

import numpy as np
from scipy import linalg
from scipy.optimize import linear_sum_assignment

from sfbdesign.config import NumericalTolerances, resolve_tolerances
from sfbdesign.control.closed_loop_spec import ClosedLoopSpec, characteristic_coefficients
from sfbdesign.exceptions import (
    DimensionError,
    NearSingularWarning,
    NonzeroFeedthroughWarning,
    NumericalToleranceWarning,
    SingularMatrixError,
    UncontrollableSystemError,
    emit_warning,
)
from sfbdesign.systems.state_space_model import StateSpaceModel
from sfbdesign.types.control_classical import (
    ControllabilityInfo,
    ObservabilityInfo,
    PolePlacementResult,
    StabilityInfo,
)
from sfbdesign.types.core import (
    ControllabilityMatrix,
    InputMatrix,
    ObservabilityMatrix,
    OutputMatrix,
    PoleLike,
    StateMatrix,
)

# ============================================================================
# Numerical Utilities (Internal)
# ============================================================================


def _check_pair(A: np.ndarray, M: np.ndarray, name: str, axis: int) -> int:
    """Validate A square and M sharing its dimension along ``axis``."""
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise DimensionError(f"A must be square, got shape {A.shape}")
    nx = A.shape[0]
    if M.ndim != 2 or M.shape[axis] != nx:
        side = "rows" if axis == 0 else "columns"
        raise DimensionError(f"{name} must have {nx} {side}, got shape {M.shape}")
    return nx


def _numerical_rank(M: np.ndarray, rank_tol: float) -> Tuple[int, np.ndarray]:
    """Rank from singular values relative to the largest one."""
    s = linalg.svd(M, compute_uv=False)
    if s.size == 0 or s[0] == 0.0:
        return 0, s
    return int(np.sum(s > rank_tol * s[0])), s


def _evaluate_matrix_polynomial(coeffs: np.ndarray, A: np.ndarray) -> np.ndarray:
    """Horner evaluation of c₀Aⁿ + c₁Aⁿ⁻¹ + ... + cₙI."""
    nx = A.shape[0]
    identity = np.eye(nx)
    result = coeffs[0] * identity
    for c in coeffs[1:]:
        result = result @ A + c * identity
    return result


def _match_poles(achieved: np.ndarray, desired: np.ndarray) -> np.ndarray:
    """Reorder achieved eigenvalues to the closest desired pole (optimal assignment)."""
    cost = np.abs(achieved[:, None] - desired[None, :])
    rows, cols = linear_sum_assignment(cost)
    ordered = np.empty_like(desired)
    ordered[cols] = achieved[rows]
    return ordered


# ============================================================================
# Structural Matrices
# ============================================================================


def build_controllability_matrix(A: StateMatrix, B: InputMatrix) -> ControllabilityMatrix:
    """
    Build 𝒞 = [B, AB, A²B, ..., Aⁿ⁻¹B] of shape (nx, nx*nu).

    Raises:
        DimensionError: If A is not square or B does not have nx rows
    """
    A_np = np.asarray(A, dtype=np.float64)
    B_np = np.asarray(B, dtype=np.float64)
    nx = _check_pair(A_np, B_np, "B", axis=0)
    nu = B_np.shape[1]

    C = np.zeros((nx, nx * nu))
    C[:, :nu] = B_np

    AB = B_np.copy()
    for i in range(1, nx):
        AB = A_np @ AB
        C[:, i * nu : (i + 1) * nu] = AB

    return C


def build_observability_matrix(A: StateMatrix, C: OutputMatrix) -> ObservabilityMatrix:
    """
    Build O = [C; CA; CA²; ...; CAⁿ⁻¹] of shape (nx*ny, nx).

    Raises:
        DimensionError: If A is not square or C does not have nx columns
    """
    A_np = np.asarray(A, dtype=np.float64)
    C_np = np.asarray(C, dtype=np.float64)
    nx = _check_pair(A_np, C_np, "C", axis=1)
    ny = C_np.shape[0]

    O = np.zeros((nx * ny, nx))
    O[:ny, :] = C_np

    CA = C_np.copy()
    for i in range(1, nx):
        CA = CA @ A_np
        O[i * ny : (i + 1) * ny, :] = CA

    return O


# ============================================================================
# Stability Analysis
# ============================================================================


def analyze_stability(
    A: StateMatrix,
    system_type: str = "continuous",
    tolerances: Optional[NumericalTolerances] = None,
) -> StabilityInfo:
    """
    Analyze system stability via eigenvalue analysis.

    Stability criteria:
        Continuous (dx/dt = Ax): All Re(λ) < 0 (left half-plane)
        Discrete (x[k+1] = Ax): All |λ| < 1 (inside unit circle)

    Args:
        A: State matrix (nx, nx)
        system_type: 'continuous' or 'discrete'
        tolerances: Numerical thresholds; stability_tol sets the marginal
            band (defaults if None)

    Returns:
        StabilityInfo containing eigenvalues, magnitudes, spectral radius,
        stability margin and the three stability flags

    Examples
    --------
    >>> # Closed-loop DC motor, ζ = 0.7, ωₙ = 18
    >>> A_cl = np.array([[0, 1], [-324, -25.2]])
    >>> stability = analyze_stability(A_cl, system_type='continuous')
    >>> print(stability['is_stable'])  # True
    >>> print(stability['stability_margin'])  # 12.6
    >>>
    >>> # Open-loop plant has an integrator pole at the origin
    >>> A = np.array([[0, 1], [0, -0.01]])
    >>> print(analyze_stability(A)['is_marginally_stable'])  # True
    >>>
    >>> # ZOH-discretized model
    >>> stability = analyze_stability(Ad, system_type='discrete')
    """
    A_np = np.asarray(A)

    if A_np.ndim != 2 or A_np.shape[0] != A_np.shape[1]:
        raise DimensionError(f"A must be square matrix, got shape {A_np.shape}")

    tolerance = resolve_tolerances(tolerances).stability_tol

    eigenvalues = np.linalg.eigvals(A_np)
    magnitudes = np.abs(eigenvalues)
    spectral_radius = float(np.max(magnitudes))

    if system_type == "continuous":
        max_real = float(np.max(np.real(eigenvalues)))
        stability_margin = -max_real
        is_stable = max_real < -tolerance
        is_marginally_stable = abs(max_real) <= tolerance
        is_unstable = max_real > tolerance
    elif system_type == "discrete":
        stability_margin = 1.0 - spectral_radius
        is_stable = spectral_radius < 1.0 - tolerance
        is_marginally_stable = abs(spectral_radius - 1.0) <= tolerance
        is_unstable = spectral_radius > 1.0 + tolerance
    else:
        raise ValueError(f"system_type must be 'continuous' or 'discrete', got '{system_type}'")

    result: StabilityInfo = {
        "eigenvalues": eigenvalues,
        "magnitudes": magnitudes,
        "spectral_radius": spectral_radius,
        "stability_margin": float(stability_margin),
        "is_stable": bool(is_stable),
        "is_marginally_stable": bool(is_marginally_stable),
        "is_unstable": bool(is_unstable),
    }

    return result


# ============================================================================
# Controllability Analysis
# ============================================================================


def analyze_controllability(
    A: StateMatrix,
    B: InputMatrix,
    tolerances: Optional[NumericalTolerances] = None,
) -> ControllabilityInfo:
    """
    Test controllability of linear system (A, B).

    A system is controllable if all states can be driven to any desired
    value in finite time using appropriate control inputs.

    Controllability test:
        rank(𝒞) = n, where 𝒞 = [B, AB, A²B, ..., Aⁿ⁻¹B]

    The rank counts singular values above ``rank_tol * σ_max``. When the
    smallest singular value that still counts lies below
    ``near_singular_tol * σ_max``, the verdict is fragile: a
    NearSingularWarning is emitted and recorded in ``warnings``.

    Args:
        A: State matrix (nx, nx)
        B: Input matrix (nx, nu)
        tolerances: Numerical thresholds (defaults if None)

    Returns:
        ControllabilityInfo

    Raises:
        DimensionError: If A is not square or B does not have nx rows

    Examples
    --------
    >>> # DC motor joint
    >>> A = np.array([[0, 1], [0, -0.01]])
    >>> B = np.array([[0], [0.1]])
    >>> info = analyze_controllability(A, B)
    >>> print(info['is_controllable'])  # True
    >>> print(info['rank'])  # 2
    >>>
    >>> # Unreachable mode: second state has no input path
    >>> A = np.diag([-1.0, -2.0])
    >>> B = np.array([[1.0], [0.0]])
    >>> info = analyze_controllability(A, B)
    >>> print(info['is_controllable'])  # False
    >>> print(info['rank'])  # 1
    """
    tol = resolve_tolerances(tolerances)
    messages: List[str] = []

    ctrb = build_controllability_matrix(A, B)
    nx = ctrb.shape[0]

    rank, s = _numerical_rank(ctrb, tol.rank_tol)
    is_controllable = rank == nx

    near_singular = False
    if rank > 0:
        smallest = s[rank - 1]
        near_singular = bool(smallest < tol.near_singular_tol * s[0])
        if near_singular:
            emit_warning(
                messages,
                f"Controllability matrix is near singular: smallest nonzero singular "
                f"value {smallest:.3e} vs largest {s[0]:.3e}",
                NearSingularWarning,
            )

    condition_number = float(s[0] / s[nx - 1]) if is_controllable else float("inf")

    result: ControllabilityInfo = {
        "controllability_matrix": ctrb,
        "rank": rank,
        "is_controllable": bool(is_controllable),
        "singular_values": s,
        "condition_number": condition_number,
        "near_singular": near_singular,
        "warnings": messages,
    }

    return result


# ============================================================================
# Observability Analysis
# ============================================================================


def analyze_observability(
    A: StateMatrix,
    C: OutputMatrix,
    tolerances: Optional[NumericalTolerances] = None,
) -> ObservabilityInfo:
    """
    Test observability of linear system (A, C).

    Observability test:
        rank(O) = n, where O = [C; CA; CA²; ...; CAⁿ⁻¹]

    Args:
        A: State matrix (nx, nx)
        C: Output matrix (ny, nx)
        tolerances: Numerical thresholds (defaults if None)

    Returns:
        ObservabilityInfo

    Examples
    --------
    >>> # Position measurement of the DC motor joint
    >>> A = np.array([[0, 1], [0, -0.01]])
    >>> C = np.array([[1, 0]])
    >>> print(analyze_observability(A, C)['is_observable'])  # True
    >>>
    >>> # Velocity only: the absolute angle is invisible
    >>> C = np.array([[0, 1]])
    >>> print(analyze_observability(A, C)['is_observable'])  # False

    Notes
    -----
    - Dual to controllability: (A, C) observable ⟺ (A', C') controllable
    """
    tol = resolve_tolerances(tolerances)

    obsv = build_observability_matrix(A, C)
    nx = obsv.shape[1]
    rank, s = _numerical_rank(obsv, tol.rank_tol)

    result: ObservabilityInfo = {
        "observability_matrix": obsv,
        "rank": rank,
        "is_observable": bool(rank == nx),
        "singular_values": s,
    }

    return result


# ============================================================================
# Pole Placement
# ============================================================================


def place_poles(
    model: StateSpaceModel,
    desired_poles: Union[PoleLike, ClosedLoopSpec],
    input_index: Optional[int] = None,
    tolerances: Optional[NumericalTolerances] = None,
) -> PolePlacementResult:
    """
    Place closed-loop poles with Ackermann's formula.

    Computes K such that eig(A - BK) equals the desired poles, for the
    control law u = -Kx.

    Algorithm:
        1. α(s) = Π(s - pᵢ) with real coefficients
        2. α(A) by Horner evaluation
        3. K = eₙᵀ 𝒞⁻¹ α(A), from the linear solve 𝒞ᵀz = eₙ
        4. Imaginary residue of K above imaginary_residue_tol is reported
           and discarded
        5. eig(A - BK) is matched against the desired poles; a relative
           mismatch above placement_rtol is reported

    Args:
        model: Plant (A, B, C, D)
        desired_poles: Pole list of length nx, or a ClosedLoopSpec
        input_index: Input column used for a single-input reduction when
            nu > 1; the other rows of K are zero
        tolerances: Numerical thresholds (defaults if None)

    Returns:
        PolePlacementResult. A non-empty ``warnings`` list means the gain
        is numerically suspect.

    Raises:
        DimensionError: Wrong number of poles, or nu > 1 without input_index
        UncontrollableSystemError: (A, B) not controllable
        ComplexGainError: Poles not closed under complex conjugation

    Examples
    --------
    >>> plant = StateSpaceModel([[0, 1], [0, -0.01]], [0, 0.1], [1, 0])
    >>> result = place_poles(plant, [-12.6 + 12.8546j, -12.6 - 12.8546j])
    >>> result['characteristic_polynomial']
    array([  1. ,  25.2, 324. ])
    >>>
    >>> # Two-input plant, design through the first input only
    >>> result = place_poles(mimo_plant, [-1, -2], input_index=0)

    Notes
    -----
    Accuracy degrades with the conditioning of 𝒞 (large n, widely
    separated pole magnitudes). Generalized multi-input placement is not
    provided; pick an input with ``input_index``.
    """
    tol = resolve_tolerances(tolerances)
    messages: List[str] = []

    A = model.A
    B = model.B
    nx = model.num_states
    nu = model.num_inputs

    if input_index is None:
        if nu > 1:
            raise DimensionError(
                f"Pole placement supports a single input; plant has {nu} inputs. "
                f"Pass input_index to select one."
            )
        column = 0
    else:
        column = int(input_index)
        if not 0 <= column < nu:
            raise DimensionError(f"input_index must be in [0, {nu}), got {input_index}")
    b = B[:, [column]]

    if isinstance(desired_poles, ClosedLoopSpec):
        poles = desired_poles.poles.copy()
    else:
        poles = np.atleast_1d(np.asarray(desired_poles, dtype=np.complex128)).ravel()
    if poles.shape[0] != nx:
        raise DimensionError(f"Expected {nx} desired poles, got {poles.shape[0]}")
    if not np.all(np.isfinite(poles)):
        raise ValueError(f"Desired poles must be finite, got {poles}")

    if not model.is_strictly_proper:
        emit_warning(
            messages,
            "Plant has nonzero D; the state feedback gain does not account for "
            "the direct feedthrough term",
            NonzeroFeedthroughWarning,
        )

    ctrb_info = analyze_controllability(A, b, tolerances=tol)
    messages.extend(ctrb_info["warnings"])
    if not ctrb_info["is_controllable"]:
        raise UncontrollableSystemError(ctrb_info["rank"], nx)

    coeffs = characteristic_coefficients(poles, tol.conjugate_tol)
    alpha_A = _evaluate_matrix_polynomial(coeffs, A)

    e_n = np.zeros(nx)
    e_n[-1] = 1.0
    try:
        z = linalg.solve(ctrb_info["controllability_matrix"].T, e_n)
    except linalg.LinAlgError as e:
        raise SingularMatrixError(f"Controllability matrix could not be inverted: {e}") from e
    k = z @ alpha_A

    k_scale = float(np.max(np.abs(k)))
    imaginary_residue = float(np.max(np.abs(k.imag)) / k_scale) if k_scale > 0 else 0.0
    if imaginary_residue > tol.imaginary_residue_tol:
        emit_warning(
            messages,
            f"Feedback gain has relative imaginary residue {imaginary_residue:.3e}; "
            f"the controllability matrix may be ill-conditioned",
            NumericalToleranceWarning,
        )

    K = np.zeros((nu, nx))
    K[column, :] = k.real

    achieved = _match_poles(np.linalg.eigvals(A - B @ K), poles)
    errors = np.abs(achieved - poles) / np.maximum(np.abs(poles), 1.0)
    max_pole_error = float(np.max(errors))
    if max_pole_error > tol.placement_rtol:
        emit_warning(
            messages,
            f"Closed-loop poles deviate from the requested ones by {max_pole_error:.3e} "
            f"(relative); the gain should not be trusted",
            NumericalToleranceWarning,
        )

    result: PolePlacementResult = {
        "gain": K,
        "desired_poles": poles,
        "closed_loop_eigenvalues": achieved,
        "characteristic_polynomial": coeffs.real.copy(),
        "max_pole_error": max_pole_error,
        "imaginary_residue": imaginary_residue,
        "controllability_condition_number": ctrb_info["condition_number"],
        "input_index": input_index,
        "warnings": messages,
    }

    return result


# ============================================================================
# DC Gain and Feedforward
# ============================================================================


def _dc_gain_terms(
    model: StateSpaceModel, tol: NumericalTolerances
) -> Tuple[np.ndarray, np.ndarray]:
    """Return ((-A)⁻¹B, C(-A)⁻¹B + D)."""
    s = linalg.svd(model.A, compute_uv=False)
    if s[0] == 0.0 or s[-1] <= tol.singular_tol * s[0]:
        raise SingularMatrixError(
            f"A is singular (smallest singular value {s[-1]:.3e}); "
            f"the DC gain is undefined"
        )
    X = linalg.solve(-model.A, model.B)
    return X, model.C @ X + model.D


def compute_dc_gain(
    model: StateSpaceModel,
    tolerances: Optional[NumericalTolerances] = None,
) -> np.ndarray:
    """
    Steady-state gain G(0) = C(-A)⁻¹B + D of shape (ny, nu).

    Args:
        model: Continuous-time model
        tolerances: Numerical thresholds (defaults if None)

    Raises:
        SingularMatrixError: If A is numerically singular

    Examples
    --------
    >>> closed = plant.closed_loop(K)
    >>> compute_dc_gain(closed)  # [[0.1 / 324]] for the DC motor design
    """
    tol = resolve_tolerances(tolerances)
    _, dc = _dc_gain_terms(model, tol)
    return dc


def feedforward_gain(
    closed_loop_model: StateSpaceModel,
    tolerances: Optional[NumericalTolerances] = None,
) -> Union[float, np.ndarray]:
    """
    Reference feedforward N = G(0)⁻¹ of the closed loop.

    With u = -Kx + N r, the output settles at y = r for a constant r.

    Args:
        closed_loop_model: Closed-loop model (A - BK, B, C, D)
        tolerances: Numerical thresholds (defaults if None)

    Returns:
        float for SISO, (nu, ny) matrix for square MIMO

    Raises:
        SingularMatrixError: If the closed-loop A is singular or G(0) is
            (numerically) zero/singular
        DimensionError: If G(0) is not square
    """
    tol = resolve_tolerances(tolerances)
    X, dc = _dc_gain_terms(closed_loop_model, tol)

    ny, nu = dc.shape
    if ny != nu:
        raise DimensionError(f"Feedforward requires a square DC gain, got shape {dc.shape}")

    scale = np.linalg.norm(closed_loop_model.C, 2) * np.linalg.norm(X, 2) + np.linalg.norm(
        closed_loop_model.D, 2
    )
    s = linalg.svd(dc, compute_uv=False)
    if scale == 0.0 or s[-1] <= tol.singular_tol * scale:
        raise SingularMatrixError(
            f"Closed-loop DC gain is singular (smallest singular value {s[-1]:.3e}); "
            f"no feedforward gain exists"
        )

    if ny == 1:
        return float(1.0 / dc[0, 0])
    return linalg.inv(dc)


# ============================================================================
# Export All
# ============================================================================

__all__ = [
    # Structural matrices
    "build_controllability_matrix",
    "build_observability_matrix",
    # Analysis
    "analyze_stability",
    "analyze_controllability",
    "analyze_observability",
    # Design
    "place_poles",
    "compute_dc_gain",
    "feedforward_gain",
]
