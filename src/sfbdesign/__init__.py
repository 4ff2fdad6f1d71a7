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
StateFeedbackDesign
===================

Numerical state-feedback design for LTI plants:

- Controllability analysis with conditioning diagnostics
- Pole placement (Ackermann) and reference feedforward
- Integrator augmentation for disturbance rejection
- Exact zero-order-hold simulation

>>> from sfbdesign import StateSpaceModel, ClosedLoopSpec, place_poles
>>>
>>> plant = StateSpaceModel([[0, 1], [0, -0.01]], [0, 0.1], [1, 0])
>>> result = place_poles(plant, ClosedLoopSpec.from_damping(0.7, 18.0))
"""

__version__ = "0.1.0"

from .config import DEFAULT_TOLERANCES, NumericalTolerances
from .control import (
    AugmentedModel,
    ClosedLoopSpec,
    ControlSynthesis,
    SystemAnalysis,
    analyze_controllability,
    analyze_observability,
    analyze_stability,
    augment_with_integrator,
    compute_dc_gain,
    feedforward_gain,
    integrator_plant,
    place_poles,
)
from .exceptions import (
    ComplexGainError,
    ControlDesignError,
    ControlDesignWarning,
    DimensionError,
    NearSingularWarning,
    NonzeroFeedthroughWarning,
    NumericalToleranceWarning,
    SingularMatrixError,
    UncontrollableSystemError,
    UnsupportedGridError,
)
from .simulation import discretize, discretize_zoh, make_time_grid, simulate
from .systems import StateSpaceModel

__all__ = [
    "__version__",
    # Configuration
    "NumericalTolerances",
    "DEFAULT_TOLERANCES",
    # Models
    "StateSpaceModel",
    "AugmentedModel",
    "ClosedLoopSpec",
    # Design and analysis
    "ControlSynthesis",
    "SystemAnalysis",
    "place_poles",
    "compute_dc_gain",
    "feedforward_gain",
    "integrator_plant",
    "augment_with_integrator",
    "analyze_stability",
    "analyze_controllability",
    "analyze_observability",
    # Simulation
    "discretize_zoh",
    "discretize",
    "make_time_grid",
    "simulate",
    # Errors and warnings
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
]
