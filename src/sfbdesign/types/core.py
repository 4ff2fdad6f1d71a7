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
Core Types - Fundamental Building Blocks

Semantic aliases for the arrays that flow through the design functions:
- Vectors (state, output)
- Matrices (A, B, C, D, gains, controllability)
- Pole sets and time grids

Design Philosophy
----------------
- **Semantic Clarity**: Names convey mathematical meaning
- **NumPy Only**: All numerical work is done on float64/complex128 arrays
- **Type Safety**: Enable static type checking

Usage
-----
>>> from sfbdesign.types.core import StateMatrix, InputMatrix, GainMatrix
>>>
>>> def closed_loop_matrix(A: StateMatrix, B: InputMatrix, K: GainMatrix) -> StateMatrix:
...     return A - B @ K
"""

from typing import Sequence, Union

import numpy as np
from numpy.typing import ArrayLike

# ============================================================================
# Basic Array Types
# ============================================================================

MatrixLike = Union[ArrayLike, Sequence[Sequence[float]]]
"""Anything np.asarray turns into a 2-D real matrix."""

# ============================================================================
# Vector Types
# ============================================================================

StateVector = np.ndarray
"""State vector x (nx,)."""

OutputVector = np.ndarray
"""Output vector y (ny,)."""

# ============================================================================
# Matrix Types - Semantic Naming by Role
# ============================================================================

StateMatrix = np.ndarray
"""
State matrix A (nx, nx).

Continuous: ẋ = Ax + Bu
Discrete:   x[k+1] = Ad x[k] + Bd u[k]
"""

InputMatrix = np.ndarray
"""Input matrix B (nx, nu)."""

OutputMatrix = np.ndarray
"""Output matrix C (ny, nx)."""

FeedthroughMatrix = np.ndarray
"""Direct feedthrough matrix D (ny, nu). Zero for strictly proper plants."""

GainMatrix = np.ndarray
"""
State feedback gain K (nu, nx).

Control law u = -K x places the eigenvalues of (A - BK).
"""

ControllabilityMatrix = np.ndarray
"""
Controllability matrix (nx, nx*nu).

C = [B, AB, A²B, ..., A^(n-1)B]
"""

ObservabilityMatrix = np.ndarray
"""
Observability matrix (nx*ny, nx).

O = [C; CA; CA²; ...; CA^(n-1)]
"""

# ============================================================================
# Poles and Time
# ============================================================================

PoleArray = np.ndarray
"""Complex pole locations (n,), conjugate pairs adjacent or not."""

PoleLike = Union[ArrayLike, Sequence[complex]]
"""Anything np.asarray turns into a 1-D complex array of poles."""

TimePoints = np.ndarray
"""Uniform time grid (N,)."""

InputTrajectory = np.ndarray
"""Input samples, time-major (N, nu). One row per grid point."""


__all__ = [
    "MatrixLike",
    "StateVector",
    "OutputVector",
    "StateMatrix",
    "InputMatrix",
    "OutputMatrix",
    "FeedthroughMatrix",
    "GainMatrix",
    "ControllabilityMatrix",
    "ObservabilityMatrix",
    "PoleArray",
    "PoleLike",
    "TimePoints",
    "InputTrajectory",
]
