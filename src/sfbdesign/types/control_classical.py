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
Classical Control Theory Types

Result types for state-feedback design and analysis:
- Stability, controllability, and observability analysis
- Pole placement (Ackermann's formula)

These types provide structured return values from the design functions.
Every result that can carry numerical diagnostics has a ``warnings`` list
holding the messages that were also emitted through the warnings module.

Mathematical Background
----------------------
Pole placement (single input):
    Desired polynomial: α(s) = (s - p₁)(s - p₂)...(s - pₙ)
    Ackermann:          K = [0 ... 0 1] C⁻¹ α(A)
    where C = [B, AB, ..., Aⁿ⁻¹B] is the controllability matrix

Usage
-----
>>> from sfbdesign.types.control_classical import PolePlacementResult
>>>
>>> result: PolePlacementResult = place_poles(plant, [-2, -3])
>>> K = result['gain']
>>> if result['warnings']:
...     print("Design is ill-conditioned")
"""

from typing import List, Optional

import numpy as np
from typing_extensions import TypedDict

from .core import ControllabilityMatrix, GainMatrix, ObservabilityMatrix, PoleArray

# ============================================================================
# Stability Analysis Types
# ============================================================================


class StabilityInfo(TypedDict):
    """
    Stability analysis result dictionary.

    Stability Criteria:
    - Continuous: All Re(λ) < 0 (left half-plane)
    - Discrete: All |λ| < 1 (inside unit circle)

    Fields
    ------
    eigenvalues : np.ndarray
        Eigenvalues of system matrix (complex)
    magnitudes : np.ndarray
        Absolute values |λ| of eigenvalues
    spectral_radius : float
        Maximum |λ|
    stability_margin : float
        Continuous: -max(Re(λ)); Discrete: 1 - max(|λ|). Positive = stable
    is_stable : bool
        True if system is asymptotically stable
    is_marginally_stable : bool
        True if the dominant eigenvalue lies on the boundary
    is_unstable : bool
        True if any eigenvalue is strictly outside the stable region
    """

    eigenvalues: np.ndarray
    magnitudes: np.ndarray
    spectral_radius: float
    stability_margin: float
    is_stable: bool
    is_marginally_stable: bool
    is_unstable: bool


class ControllabilityInfo(TypedDict, total=False):
    """
    Controllability analysis result.

    Rank is computed from singular values relative to the largest one,
    never by exact equality.

    Fields
    ------
    controllability_matrix : ControllabilityMatrix
        C = [B, AB, A²B, ..., Aⁿ⁻¹B] of shape (nx, nx*nu)
    rank : int
        Numerical rank of the controllability matrix
    is_controllable : bool
        True if rank == nx
    singular_values : np.ndarray
        Singular values of C, descending
    condition_number : float
        sigma_max / sigma_min (inf if rank deficient)
    near_singular : bool
        True if the smallest nonzero singular value is within
        near_singular_tol of zero
    warnings : List[str]
        Diagnostics emitted during the test

    Examples
    --------
    >>> info: ControllabilityInfo = analyze_controllability(A, B)
    >>> info['is_controllable']
    True
    >>> info['rank']
    2
    """

    controllability_matrix: ControllabilityMatrix
    rank: int
    is_controllable: bool
    singular_values: np.ndarray
    condition_number: float
    near_singular: bool
    warnings: List[str]


class ObservabilityInfo(TypedDict, total=False):
    """
    Observability analysis result.

    Fields
    ------
    observability_matrix : ObservabilityMatrix
        O = [C; CA; CA²; ...; CAⁿ⁻¹] of shape (nx*ny, nx)
    rank : int
        Numerical rank of the observability matrix
    is_observable : bool
        True if rank == nx
    singular_values : np.ndarray
        Singular values of O, descending
    """

    observability_matrix: ObservabilityMatrix
    rank: int
    is_observable: bool
    singular_values: np.ndarray


# ============================================================================
# Pole Placement Types
# ============================================================================


class PolePlacementResult(TypedDict):
    """
    Pole placement (Ackermann) result.

    Fields
    ------
    gain : GainMatrix
        Real feedback gain K (nu, nx); use u = -K x
    desired_poles : PoleArray
        Requested closed-loop poles
    closed_loop_eigenvalues : PoleArray
        Eigenvalues of (A - BK), ordered to match desired_poles
    characteristic_polynomial : np.ndarray
        Real coefficients [1, a_{n-1}, ..., a_0] of α(s)
    max_pole_error : float
        max |λ_achieved - λ_desired| / max(1, |λ_desired|)
    imaginary_residue : float
        Relative imaginary part discarded from K
    controllability_condition_number : float
        Condition number of the controllability matrix used
    input_index : Optional[int]
        Input column used for a single-input reduction (None if nu == 1)
    warnings : List[str]
        Conditioning diagnostics; a non-empty list means K should not be
        trusted without further checks

    Examples
    --------
    >>> result = place_poles(plant, ClosedLoopSpec.from_damping(0.7, 18.0))
    >>> result['gain']
    array([[3240. ,  251.9]])
    """

    gain: GainMatrix
    desired_poles: PoleArray
    closed_loop_eigenvalues: PoleArray
    characteristic_polynomial: np.ndarray
    max_pole_error: float
    imaginary_residue: float
    controllability_condition_number: float
    input_index: Optional[int]
    warnings: List[str]


__all__ = [
    "StabilityInfo",
    "ControllabilityInfo",
    "ObservabilityInfo",
    "PolePlacementResult",
]
