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
Input Signals

Piecewise-constant reference and disturbance trajectories sampled on a
simulation grid. A disturbance switched on at a fraction of the horizon
starts at index trunc(N * fraction); samples before it are zero.

Usage
-----
>>> t = make_time_grid(0.0, 2.0, 0.001)
>>> r, d = reference_and_disturbance(t, reference_level=1.0, disturbance_level=-1600.0)
>>> disturbance_onset_index(t)
1000
>>> u = stack_inputs(d, r)    # (2001, 2), input order [d, r]
"""

from typing import Tuple

import numpy as np

from sfbdesign.exceptions import DimensionError
from sfbdesign.types.core import InputTrajectory, TimePoints


def _num_points(time: TimePoints) -> int:
    t = np.asarray(time)
    if t.ndim != 1:
        raise DimensionError(f"time must be 1-D, got shape {t.shape}")
    return t.shape[0]


def step_signal(time: TimePoints, level: float = 1.0, start_index: int = 0) -> np.ndarray:
    """Zero before ``start_index``, ``level`` from it onward."""
    n = _num_points(time)
    if not 0 <= start_index <= n:
        raise ValueError(f"start_index must be in [0, {n}], got {start_index}")
    signal = np.zeros(n)
    signal[start_index:] = level
    return signal


def disturbance_onset_index(time: TimePoints, fraction: float = 0.5) -> int:
    """Index at which a disturbance starting at ``fraction`` of the horizon turns on."""
    if not 0.0 <= fraction <= 1.0:
        raise ValueError(f"fraction must be in [0, 1], got {fraction}")
    return int(_num_points(time) * fraction)


def reference_and_disturbance(
    time: TimePoints,
    reference_level: float = 1.0,
    disturbance_level: float = 0.0,
    disturbance_fraction: float = 0.5,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Constant reference plus a step disturbance at a fraction of the horizon.

    Returns:
        (r, d), each of shape (N,)
    """
    r = step_signal(time, reference_level)
    d = step_signal(time, disturbance_level, disturbance_onset_index(time, disturbance_fraction))
    return r, d


def stack_inputs(*channels: np.ndarray) -> InputTrajectory:
    """Stack per-channel signals of equal length into a time-major (N, nu) array."""
    if not channels:
        raise ValueError("stack_inputs needs at least one channel")
    arrays = [np.asarray(c, dtype=np.float64) for c in channels]
    for a in arrays:
        if a.ndim != 1:
            raise DimensionError(f"Each channel must be 1-D, got shape {a.shape}")
    lengths = {a.shape[0] for a in arrays}
    if len(lengths) != 1:
        raise DimensionError(f"Channels have different lengths: {sorted(lengths)}")
    return np.column_stack(arrays)


__all__ = [
    "step_signal",
    "disturbance_onset_index",
    "reference_and_disturbance",
    "stack_inputs",
]
