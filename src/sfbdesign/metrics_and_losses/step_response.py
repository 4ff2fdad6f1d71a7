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
Step Response Metrics

Time-domain performance measures of a sampled response:
- Rise time, peak, percent overshoot, settling time
- Disturbance rejection: peak deviation and recovery time after a step
  disturbance
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from sfbdesign.exceptions import DimensionError
from sfbdesign.types.core import TimePoints
from sfbdesign.types.trajectories import StepResponseInfo


@dataclass
class DisturbanceRejectionMetrics:
    """Container for disturbance rejection metrics"""

    onset_time: float  # Time the disturbance switches on
    reference: float  # Level the output should return to
    peak_deviation: float  # max |y - reference| after onset
    peak_deviation_time: float  # Time of the peak deviation
    recovery_time: float  # Time after onset to re-enter the band (nan if never)
    steady_state_error: float  # reference - y[-1]
    band: float  # Recovery band, absolute


def _as_single_output(time: TimePoints, output: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    t = np.asarray(time, dtype=np.float64)
    y = np.asarray(output, dtype=np.float64)
    if y.ndim == 2 and y.shape[1] == 1:
        y = y[:, 0]
    if y.ndim != 1:
        raise DimensionError(f"output must be (N,) or (N, 1), got shape {y.shape}")
    if t.ndim != 1 or t.shape[0] != y.shape[0]:
        raise DimensionError(f"time {t.shape} and output {y.shape} lengths differ")
    if t.shape[0] < 2:
        raise ValueError("Need at least 2 samples")
    return t, y


def _first_crossing(t: np.ndarray, y: np.ndarray, level: float, direction: float) -> float:
    hits = np.where(direction * (y - level) >= 0)[0]
    return float(t[hits[0]]) if hits.size else float("nan")


def step_response_info(
    time: TimePoints,
    output: np.ndarray,
    final_value: Optional[float] = None,
    reference: Optional[float] = None,
    rise_band: Tuple[float, float] = (0.1, 0.9),
    settling_band: float = 0.02,
) -> StepResponseInfo:
    """
    Characteristics of a step response.

    Levels are measured relative to the initial value y[0] and the step
    amplitude (final_value - y[0]), so responses starting from a nonzero
    level are handled.

    Args:
        time: Sample times (N,)
        output: Single-channel response (N,) or (N, 1)
        final_value: Steady-state value; last sample if None
        reference: Commanded value for the steady-state error; nan if None
        rise_band: Lower and upper fractions of the amplitude for rise time
        settling_band: Settling band as a fraction of the amplitude

    Returns:
        StepResponseInfo. Times are measured from time[0].

    Examples
    --------
    >>> traj = simulate(closed_loop, N * np.ones_like(t), t)
    >>> info = step_response_info(traj.time, traj.outputs, reference=1.0)
    >>> info['overshoot']  # percent
    4.6
    """
    lo, hi = rise_band
    if not 0.0 <= lo < hi <= 1.0:
        raise ValueError(f"rise_band must satisfy 0 <= lower < upper <= 1, got {rise_band}")
    if not settling_band > 0:
        raise ValueError(f"settling_band must be positive, got {settling_band}")

    t, y = _as_single_output(time, output)
    t0 = t[0]
    y0 = y[0]
    y_final = float(y[-1]) if final_value is None else float(final_value)
    amplitude = y_final - y0
    direction = np.sign(amplitude)

    if direction > 0:
        peak_index = int(np.argmax(y))
    else:
        peak_index = int(np.argmin(y))
    peak_value = float(y[peak_index])
    peak_time = float(t[peak_index] - t0)

    if amplitude == 0.0:
        rise_time = float("nan")
        overshoot = 0.0
        settling_time = float("nan")
    else:
        t_lo = _first_crossing(t, y, y0 + lo * amplitude, direction)
        t_hi = _first_crossing(t, y, y0 + hi * amplitude, direction)
        rise_time = t_hi - t_lo

        overshoot = max(0.0, direction * (peak_value - y_final) / abs(amplitude) * 100.0)

        outside = np.where(np.abs(y - y_final) > settling_band * abs(amplitude))[0]
        if outside.size == 0:
            settling_time = 0.0
        elif outside[-1] + 1 < t.shape[0]:
            settling_time = float(t[outside[-1] + 1] - t0)
        else:
            settling_time = float("nan")

    steady_state_error = float("nan") if reference is None else float(reference) - float(y[-1])

    info: StepResponseInfo = {
        "rise_time": float(rise_time),
        "peak_value": peak_value,
        "peak_time": peak_time,
        "overshoot": float(overshoot),
        "settling_time": float(settling_time),
        "steady_state_value": y_final,
        "steady_state_error": steady_state_error,
    }
    return info


def disturbance_rejection_metrics(
    time: TimePoints,
    output: np.ndarray,
    onset_index: int,
    reference: float,
    band: float = 0.02,
) -> DisturbanceRejectionMetrics:
    """
    How far and for how long a step disturbance pushes the output away
    from the reference.

    Args:
        time: Sample times (N,)
        output: Single-channel response (N,) or (N, 1)
        onset_index: First sample with the disturbance active
        reference: Level the output should hold
        band: Recovery band, as a fraction of |reference| (absolute if the
            reference is zero)

    Returns:
        DisturbanceRejectionMetrics
    """
    t, y = _as_single_output(time, output)
    n = t.shape[0]
    if not 0 <= onset_index < n:
        raise ValueError(f"onset_index must be in [0, {n}), got {onset_index}")

    tolerance = band * abs(reference) if reference != 0 else band
    after = y[onset_index:]
    t_after = t[onset_index:]
    deviation = np.abs(after - reference)

    peak_index = int(np.argmax(deviation))
    outside = np.where(deviation > tolerance)[0]
    if outside.size == 0:
        recovery_time = 0.0
    elif outside[-1] + 1 < after.shape[0]:
        recovery_time = float(t_after[outside[-1] + 1] - t_after[0])
    else:
        recovery_time = float("nan")

    return DisturbanceRejectionMetrics(
        onset_time=float(t_after[0]),
        reference=float(reference),
        peak_deviation=float(deviation[peak_index]),
        peak_deviation_time=float(t_after[peak_index]),
        recovery_time=recovery_time,
        steady_state_error=float(reference - y[-1]),
        band=float(tolerance),
    )


__all__ = [
    "DisturbanceRejectionMetrics",
    "step_response_info",
    "disturbance_rejection_metrics",
]
