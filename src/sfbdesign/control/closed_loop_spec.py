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
Closed-Loop Specification

Desired closed-loop dynamics for pole placement, given either as an
explicit pole list or as a dominant second-order pair (ζ, ωₙ):

    s² + 2ζωₙs + ωₙ² = 0
    p₁,₂ = -ζωₙ ± jωₙ√(1 - ζ²)      (ζ < 1)

Usage
-----
>>> from sfbdesign.control import ClosedLoopSpec
>>>
>>> spec = ClosedLoopSpec.from_damping(0.7, 18.0)
>>> spec.poles
array([-12.6+12.85457117j, -12.6-12.85457117j])
>>> spec.characteristic_polynomial()
array([  1. ,  25.2, 324. ])
>>>
>>> # Third-order plant: dominant pair plus a fast real pole
>>> spec3 = ClosedLoopSpec.from_damping(0.7, 18.0, additional_poles=[-100.0])
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from sfbdesign.config import DEFAULT_TOLERANCES
from sfbdesign.exceptions import ComplexGainError, DimensionError
from sfbdesign.types.core import PoleArray, PoleLike


def characteristic_coefficients(poles: PoleLike, conjugate_tol: float) -> np.ndarray:
    """
    Coefficients [1, a_{n-1}, ..., a_0] of α(s) = Π(s - pᵢ).

    The coefficients are returned complex (imaginary parts untouched) so the
    caller can measure how much residue reaches the gain. A pole set that is
    not closed under conjugation leaves an imaginary part larger than
    ``conjugate_tol`` relative to the largest coefficient.

    Raises
    ------
    ComplexGainError
        If the poles are not closed under complex conjugation
    """
    p = np.atleast_1d(np.asarray(poles, dtype=np.complex128))
    coeffs = np.poly(p).astype(np.complex128)

    scale = np.max(np.abs(coeffs))
    residue = np.max(np.abs(coeffs.imag))
    if residue > conjugate_tol * scale:
        raise ComplexGainError(
            f"Desired poles are not closed under complex conjugation "
            f"(relative imaginary part {residue / scale:.3e} in the characteristic "
            f"polynomial): {p}"
        )
    return coeffs


@dataclass(frozen=True, eq=False)
class ClosedLoopSpec:
    """
    Desired closed-loop pole set.

    Attributes
    ----------
    poles : PoleArray
        Complex poles (n,); conjugate pairs must appear together
    damping_ratio : Optional[float]
        ζ of the dominant pair when built with from_damping
    natural_frequency : Optional[float]
        ωₙ of the dominant pair when built with from_damping
    """

    poles: PoleArray
    damping_ratio: Optional[float] = None
    natural_frequency: Optional[float] = None

    def __post_init__(self):
        p = np.array(self.poles, dtype=np.complex128).ravel()
        if p.size == 0:
            raise DimensionError("ClosedLoopSpec needs at least one pole")
        if not np.all(np.isfinite(p)):
            raise ValueError(f"Poles must be finite, got {p}")
        p.setflags(write=False)
        object.__setattr__(self, "poles", p)

    @classmethod
    def from_damping(
        cls,
        damping_ratio: float,
        natural_frequency: float,
        additional_poles: Optional[PoleLike] = None,
    ) -> "ClosedLoopSpec":
        """
        Build the pole set from a damping ratio and natural frequency.

        Args:
            damping_ratio: ζ > 0
            natural_frequency: ωₙ > 0 (rad/s)
            additional_poles: Extra poles appended after the dominant pair
                (for plants of order > 2)

        Raises:
            ValueError: If ζ <= 0 or ωₙ <= 0
        """
        zeta = float(damping_ratio)
        wn = float(natural_frequency)
        if not zeta > 0:
            raise ValueError(f"damping_ratio must be positive, got {damping_ratio}")
        if not wn > 0:
            raise ValueError(f"natural_frequency must be positive, got {natural_frequency}")

        sigma = -zeta * wn
        if zeta < 1.0:
            wd = wn * np.sqrt(1.0 - zeta**2)
            pair = [complex(sigma, wd), complex(sigma, -wd)]
        else:
            spread = wn * np.sqrt(zeta**2 - 1.0)
            pair = [complex(sigma + spread, 0.0), complex(sigma - spread, 0.0)]

        poles = np.array(pair, dtype=np.complex128)
        if additional_poles is not None:
            extra = np.atleast_1d(np.asarray(additional_poles, dtype=np.complex128))
            poles = np.concatenate([poles, extra])

        return cls(poles, damping_ratio=zeta, natural_frequency=wn)

    @property
    def order(self) -> int:
        """Number of poles."""
        return self.poles.shape[0]

    def __len__(self) -> int:
        return self.order

    def characteristic_polynomial(self, conjugate_tol: Optional[float] = None) -> np.ndarray:
        """
        Real coefficients [1, a_{n-1}, ..., a_0] of the desired polynomial.

        Raises
        ------
        ComplexGainError
            If the poles are not closed under complex conjugation
        """
        if conjugate_tol is None:
            conjugate_tol = DEFAULT_TOLERANCES.conjugate_tol
        return characteristic_coefficients(self.poles, conjugate_tol).real.copy()

    def __repr__(self) -> str:
        if self.damping_ratio is not None:
            return (
                f"ClosedLoopSpec(zeta={self.damping_ratio}, wn={self.natural_frequency}, "
                f"order={self.order})"
            )
        return f"ClosedLoopSpec(poles={self.poles})"


__all__ = ["ClosedLoopSpec", "characteristic_coefficients"]
