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
Simulation
==========

Zero-order-hold discretization and time response of linear models.

>>> from sfbdesign.simulation import make_time_grid, simulate, reference_and_disturbance
>>>
>>> t = make_time_grid(0.0, 2.0, 0.001)
>>> r, d = reference_and_disturbance(t, 1.0, -1600.0)
>>> traj = simulate(augmented, stack_inputs(d, r), t)
"""

from .discretization import ZOH_METHODS, discretize, discretize_zoh
from .input_signals import (
    disturbance_onset_index,
    reference_and_disturbance,
    stack_inputs,
    step_signal,
)
from .linear_simulator import SIMULATION_METHODS, make_time_grid, simulate, validate_time_grid

__all__ = [
    # Discretization
    "ZOH_METHODS",
    "discretize_zoh",
    "discretize",
    # Simulation
    "SIMULATION_METHODS",
    "make_time_grid",
    "validate_time_grid",
    "simulate",
    # Input signals
    "step_signal",
    "disturbance_onset_index",
    "reference_and_disturbance",
    "stack_inputs",
]
