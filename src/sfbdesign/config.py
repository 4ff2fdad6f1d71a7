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
Numerical Tolerances

Configuration of every threshold used by the rank tests, pole placement
checks, DC gain inversion and time grid validation.

All relative tolerances are measured against the largest singular value
(or largest magnitude) of the quantity being tested.

Usage
-----
>>> from sfbdesign.config import DEFAULT_TOLERANCES
>>>
>>> strict = DEFAULT_TOLERANCES.with_overrides(placement_rtol=1e-9)
>>> result = place_poles(plant, poles, tolerances=strict)
"""

from dataclasses import dataclass, fields, replace
from typing import Optional


@dataclass(frozen=True)
class NumericalTolerances:
    """
    Thresholds for numerical diagnostics.

    Attributes
    ----------
    rank_tol : float
        Singular values below rank_tol * sigma_max count as zero
    near_singular_tol : float
        Smallest nonzero singular value below near_singular_tol * sigma_max
        triggers NearSingularWarning
    conjugate_tol : float
        Relative imaginary part allowed in the desired characteristic
        polynomial before ComplexGainError is raised
    imaginary_residue_tol : float
        Relative imaginary residue of K tolerated silently
    placement_rtol : float
        Relative error between achieved and desired poles tolerated silently
    singular_tol : float
        Relative threshold for treating A or a DC gain matrix as singular
    grid_rtol : float
        Relative deviation of time steps from the mean step
    stability_tol : float
        Band around the stability boundary (Re = 0 or |z| = 1) inside which
        a pole counts as marginal
    """

    rank_tol: float = 1e-10
    near_singular_tol: float = 1e-8
    conjugate_tol: float = 1e-8
    imaginary_residue_tol: float = 1e-9
    placement_rtol: float = 1e-6
    singular_tol: float = 1e-12
    grid_rtol: float = 1e-9
    stability_tol: float = 1e-10

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not value > 0:
                raise ValueError(f"Tolerance '{f.name}' must be positive, got {value}")

    def with_overrides(self, **overrides) -> "NumericalTolerances":
        """Return a copy with the given tolerances replaced."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown tolerance(s): {sorted(unknown)}")
        return replace(self, **overrides)


DEFAULT_TOLERANCES = NumericalTolerances()


def resolve_tolerances(tolerances: Optional[NumericalTolerances]) -> NumericalTolerances:
    """Return ``tolerances`` or the defaults when None."""
    return DEFAULT_TOLERANCES if tolerances is None else tolerances


__all__ = ["NumericalTolerances", "DEFAULT_TOLERANCES", "resolve_tolerances"]
