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
Errors and Warnings

Typed failures and non-fatal diagnostics raised by the design and
simulation functions.

Errors (fatal to the requested operation):
- DimensionError: incompatible matrix or signal shapes
- UncontrollableSystemError: pole placement on an uncontrollable plant
- SingularMatrixError: DC gain / feedforward undefined
- ComplexGainError: desired poles not closed under conjugation
- UnsupportedGridError: malformed simulation time grid

Warnings (non-fatal, also attached to the returned result):
- NumericalToleranceWarning: gain or placement accuracy is suspect
- NearSingularWarning: controllability matrix close to rank deficient
- NonzeroFeedthroughWarning: feedback design on a plant with D != 0

Usage
-----
>>> import warnings
>>> from sfbdesign.exceptions import NearSingularWarning
>>>
>>> # Escalate conditioning warnings to errors during an automated sweep
>>> with warnings.catch_warnings():
...     warnings.simplefilter("error", NearSingularWarning)
...     result = place_poles(plant, poles)
"""

import warnings
from typing import List, Optional, Type

import numpy as np


class ControlDesignError(Exception):
    """Base class for all failures raised by sfbdesign."""

    pass


class DimensionError(ControlDesignError, ValueError):
    """Raised when matrix or signal shapes are incompatible."""

    pass


class UncontrollableSystemError(ControlDesignError):
    """Raised when pole placement is requested on an uncontrollable plant."""

    def __init__(self, rank: int, nx: int):
        self.rank = rank
        self.nx = nx
        super().__init__(
            f"System is not controllable: controllability matrix has rank {rank}, "
            f"expected {nx}"
        )


class SingularMatrixError(ControlDesignError, np.linalg.LinAlgError):
    """Raised when a matrix that must be inverted is (numerically) singular."""

    pass


class ComplexGainError(ControlDesignError, ValueError):
    """Raised when desired poles would produce a non-real feedback gain."""

    pass


class UnsupportedGridError(ControlDesignError, ValueError):
    """Raised when a simulation time grid is not strictly increasing and uniform."""

    pass


class ControlDesignWarning(UserWarning):
    """Base class for non-fatal numerical diagnostics."""

    pass


class NumericalToleranceWarning(ControlDesignWarning):
    """Gain residue or placement error exceeded its tolerance."""

    pass


class NearSingularWarning(ControlDesignWarning):
    """Smallest nonzero singular value is within tolerance of zero."""

    pass


class NonzeroFeedthroughWarning(ControlDesignWarning):
    """Feedback design requested on a plant with a nonzero D matrix."""

    pass


def emit_warning(
    messages: Optional[List[str]],
    message: str,
    category: Type[ControlDesignWarning],
    stacklevel: int = 3,
) -> None:
    """
    Emit a diagnostic and record it on a result.

    The message goes through the standard warnings machinery and is
    appended to ``messages`` so callers that only inspect results see it too.

    Args:
        messages: Result warning list to append to (ignored if None)
        message: Human readable diagnostic
        category: Warning subclass
        stacklevel: Passed to warnings.warn
    """
    if messages is not None:
        messages.append(f"{category.__name__}: {message}")
    warnings.warn(message, category, stacklevel=stacklevel)


__all__ = [
    "ControlDesignError",
    "DimensionError",
    "UncontrollableSystemError",
    "SingularMatrixError",
    "ComplexGainError",
    "UnsupportedGridError",
    "ControlDesignWarning",
    "NumericalToleranceWarning",
    "NearSingularWarning",
    "NonzeroFeedthroughWarning",
    "emit_warning",
]
