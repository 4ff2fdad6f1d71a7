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
System Analysis Wrapper

Thin wrapper around the analysis functions in classical_control_functions.
Accepts either a StateSpaceModel or raw matrices.

Usage
-----
>>> from sfbdesign.control import SystemAnalysis
>>>
>>> analyzer = SystemAnalysis()
>>> stability = analyzer.stability(plant.closed_loop(K))
>>> print(f"Stable: {stability['is_stable']}")
>>>
>>> # Raw matrices work too
>>> ctrl_info = analyzer.controllability(A, B)
"""

from typing import Optional, Union

import numpy as np

from sfbdesign.config import NumericalTolerances, resolve_tolerances
from sfbdesign.systems.state_space_model import StateSpaceModel
from sfbdesign.types.control_classical import (
    ControllabilityInfo,
    ObservabilityInfo,
    StabilityInfo,
)
from sfbdesign.types.core import InputMatrix, OutputMatrix, StateMatrix


class SystemAnalysis:
    """
    System analysis wrapper.

    Attributes
    ----------
    tolerances : NumericalTolerances
        Thresholds for the rank tests

    Examples
    --------
    >>> analyzer = SystemAnalysis()
    >>> ctrl_info = analyzer.controllability(plant)
    >>> if not ctrl_info['is_controllable']:
    ...     print(f"Controllable subspace dimension: {ctrl_info['rank']}")
    >>>
    >>> obs_info = analyzer.observability(plant)
    """

    def __init__(self, tolerances: Optional[NumericalTolerances] = None):
        self.tolerances = resolve_tolerances(tolerances)

    def stability(
        self,
        A: Union[StateMatrix, StateSpaceModel],
        system_type: str = "continuous",
    ) -> StabilityInfo:
        """
        Eigenvalue stability analysis.

        Routes to classical_control_functions.analyze_stability().

        Args:
            A: State matrix or model
            system_type: 'continuous' or 'discrete'
        """
        from sfbdesign.control.classical_control_functions import analyze_stability

        if isinstance(A, StateSpaceModel):
            A = A.A
        return analyze_stability(A, system_type, tolerances=self.tolerances)

    def controllability(
        self,
        A: Union[StateMatrix, StateSpaceModel],
        B: Optional[InputMatrix] = None,
    ) -> ControllabilityInfo:
        """
        Controllability rank test with conditioning diagnostics.

        Routes to classical_control_functions.analyze_controllability().

        Args:
            A: State matrix, or a model (then B is taken from it)
            B: Input matrix (required with a raw A)
        """
        from sfbdesign.control.classical_control_functions import analyze_controllability

        if isinstance(A, StateSpaceModel):
            A, B = A.A, A.B
        elif B is None:
            raise ValueError("B is required when A is a matrix")
        return analyze_controllability(A, B, tolerances=self.tolerances)

    def observability(
        self,
        A: Union[StateMatrix, StateSpaceModel],
        C: Optional[OutputMatrix] = None,
    ) -> ObservabilityInfo:
        """
        Observability rank test.

        Routes to classical_control_functions.analyze_observability().
        """
        from sfbdesign.control.classical_control_functions import analyze_observability

        if isinstance(A, StateSpaceModel):
            A, C = A.A, A.C
        elif C is None:
            raise ValueError("C is required when A is a matrix")
        return analyze_observability(A, C, tolerances=self.tolerances)

    def dc_gain(self, model: StateSpaceModel) -> np.ndarray:
        """Steady-state gain C(-A)⁻¹B + D."""
        from sfbdesign.control.classical_control_functions import compute_dc_gain

        return compute_dc_gain(model, tolerances=self.tolerances)


__all__ = ["SystemAnalysis"]
