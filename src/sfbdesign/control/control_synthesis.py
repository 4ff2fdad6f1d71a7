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
Control Synthesis Wrapper

Thin wrapper around the state-feedback design functions.

Holds a single NumericalTolerances setting and routes every call to the
pure functions in classical_control_functions and integrator_augmentation,
so a batch of designs shares the same thresholds without passing them
to each call.

Design Philosophy
-----------------
- Composition not inheritance
- Thin wrapper (no caching, tolerances only)
- Routes to pure functions

Usage
-----
>>> from sfbdesign.config import DEFAULT_TOLERANCES
>>> from sfbdesign.control import ControlSynthesis, ClosedLoopSpec
>>>
>>> synthesis = ControlSynthesis(DEFAULT_TOLERANCES.with_overrides(placement_rtol=1e-8))
>>> result = synthesis.place_poles(plant, ClosedLoopSpec.from_damping(0.7, 18.0))
>>> K = result['gain']
>>> N = synthesis.feedforward_gain(plant.closed_loop(K))
"""

from typing import Optional, Union

import numpy as np

from sfbdesign.config import NumericalTolerances, resolve_tolerances
from sfbdesign.control.closed_loop_spec import ClosedLoopSpec
from sfbdesign.systems.state_space_model import StateSpaceModel
from sfbdesign.types.control_classical import PolePlacementResult
from sfbdesign.types.core import GainMatrix, MatrixLike, PoleLike


class ControlSynthesis:
    """
    Control synthesis wrapper.

    Attributes
    ----------
    tolerances : NumericalTolerances
        Thresholds applied to every routed call

    Examples
    --------
    >>> synthesis = ControlSynthesis()
    >>> result = synthesis.place_poles(plant, [-12.6 + 12.85j, -12.6 - 12.85j])
    >>> augmented = synthesis.augment_with_integrator(plant, result['gain'], 2e5)
    """

    def __init__(self, tolerances: Optional[NumericalTolerances] = None):
        self.tolerances = resolve_tolerances(tolerances)

    def place_poles(
        self,
        model: StateSpaceModel,
        desired_poles: Union[PoleLike, ClosedLoopSpec],
        input_index: Optional[int] = None,
    ) -> PolePlacementResult:
        """
        Ackermann pole placement.

        Routes to classical_control_functions.place_poles().

        See Also
        --------
        sfbdesign.control.classical_control_functions.place_poles
        """
        from sfbdesign.control.classical_control_functions import place_poles

        return place_poles(model, desired_poles, input_index=input_index, tolerances=self.tolerances)

    def dc_gain(self, model: StateSpaceModel) -> np.ndarray:
        """Steady-state gain C(-A)⁻¹B + D."""
        from sfbdesign.control.classical_control_functions import compute_dc_gain

        return compute_dc_gain(model, tolerances=self.tolerances)

    def feedforward_gain(self, closed_loop_model: StateSpaceModel) -> Union[float, np.ndarray]:
        """
        Reference feedforward gain 1 / G(0) of a closed-loop model.

        Routes to classical_control_functions.feedforward_gain().
        """
        from sfbdesign.control.classical_control_functions import feedforward_gain

        return feedforward_gain(closed_loop_model, tolerances=self.tolerances)

    def integrator_plant(self, plant: StateSpaceModel) -> StateSpaceModel:
        """Open-loop plant with integrator states, inputs [u, r]."""
        from sfbdesign.control.integrator_augmentation import integrator_plant

        return integrator_plant(plant)

    def augment_with_integrator(
        self,
        plant: StateSpaceModel,
        K: GainMatrix,
        ki: Union[float, MatrixLike],
    ):
        """
        Closed loop with integral action, inputs [d, r].

        Routes to integrator_augmentation.augment_with_integrator().
        """
        from sfbdesign.control.integrator_augmentation import augment_with_integrator

        return augment_with_integrator(plant, K, ki)

    def __repr__(self) -> str:
        return f"ControlSynthesis(tolerances={self.tolerances})"


__all__ = ["ControlSynthesis"]
