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
State-Feedback Design and Analysis
==================================

Pole placement (Ackermann), DC gain and feedforward computation,
integrator augmentation, and structural analysis (stability,
controllability, observability).

Control Synthesis
-----------------
>>> from sfbdesign.control import ClosedLoopSpec, place_poles, feedforward_gain
>>>
>>> # Functional interface
>>> result = place_poles(plant, ClosedLoopSpec.from_damping(0.7, 18.0))
>>> K = result['gain']
>>> N = feedforward_gain(plant.closed_loop(K))
>>>
>>> # Integral action
>>> augmented = augment_with_integrator(plant, K, ki=200000.0)
>>>
>>> # Object-oriented interface
>>> synth = ControlSynthesis()
>>> result = synth.place_poles(plant, [-2.0, -3.0])

System Analysis
---------------
>>> from sfbdesign.control import (
...     SystemAnalysis,
...     analyze_stability,
...     analyze_controllability,
...     analyze_observability,
... )
>>>
>>> stability = analyze_stability(A)
>>> ctrl = analyze_controllability(A, B)
>>> obs = analyze_observability(A, C)

Authors
-------
Gil Benezer

License
-------
GNU Affero General Public License v3.0
"""

# Specification
from .closed_loop_spec import ClosedLoopSpec

# Functional interface
from .classical_control_functions import (
    analyze_controllability,
    analyze_observability,
    analyze_stability,
    build_controllability_matrix,
    build_observability_matrix,
    compute_dc_gain,
    feedforward_gain,
    place_poles,
)
from .integrator_augmentation import AugmentedModel, augment_with_integrator, integrator_plant

# Classes
from .control_synthesis import ControlSynthesis
from .system_analysis import SystemAnalysis

# Export public API
__all__ = [
    # Classes
    "ClosedLoopSpec",
    "AugmentedModel",
    "ControlSynthesis",
    "SystemAnalysis",
    # Control design functions
    "place_poles",
    "compute_dc_gain",
    "feedforward_gain",
    "integrator_plant",
    "augment_with_integrator",
    # Analysis functions
    "analyze_stability",
    "analyze_controllability",
    "analyze_observability",
    "build_controllability_matrix",
    "build_observability_matrix",
]
