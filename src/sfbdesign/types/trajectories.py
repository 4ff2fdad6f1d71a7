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
Trajectory Types

Containers for simulation output and step-response metrics.

**SHAPE CONVENTION**: All trajectories are **time-major**: row k holds the
sample at time[k].

- time    : (N,)
- states  : (N, nx)
- outputs : (N, ny)
- inputs  : (N, nu)

Usage
-----
>>> traj = simulate(model, u, t)
>>> for sample in traj:
...     print(sample.time, sample.output)
>>>
>>> # Columns for plotting
>>> plt.plot(traj.time, traj.outputs[:, 0])
"""

from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Tuple

import numpy as np
from typing_extensions import TypedDict

from .core import OutputVector, StateVector, TimePoints


class TrajectorySample(NamedTuple):
    """One (time, state, output) sample of a simulation."""

    time: float
    state: StateVector
    output: OutputVector


@dataclass(frozen=True, eq=False)
class SimulationTrajectory:
    """
    Result of a linear simulation on a uniform time grid.

    Behaves as a read-only sequence of TrajectorySample so external
    plotting code can iterate over it directly.

    Attributes
    ----------
    time : TimePoints
        Uniform time grid (N,)
    states : np.ndarray
        State trajectory (N, nx), includes the initial state
    outputs : np.ndarray
        Output trajectory (N, ny)
    inputs : np.ndarray
        Input samples actually applied (N, nu)
    dt : float
        Grid step h
    method : str
        Discretization method used ('zoh')
    warnings : Tuple[str, ...]
        Diagnostics produced during the simulation
    """

    time: TimePoints
    states: np.ndarray
    outputs: np.ndarray
    inputs: np.ndarray
    dt: float
    method: str = "zoh"
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return self.time.shape[0]

    def __getitem__(self, k: int) -> TrajectorySample:
        return TrajectorySample(float(self.time[k]), self.states[k], self.outputs[k])

    def __iter__(self) -> Iterator[TrajectorySample]:
        for k in range(len(self)):
            yield self[k]

    def output_pairs(self, channel: int = 0) -> List[Tuple[float, float]]:
        """(time, output) pairs of one output channel."""
        return [(float(t), float(y)) for t, y in zip(self.time, self.outputs[:, channel])]


class StepResponseInfo(TypedDict):
    """
    Step response characteristics.

    Fields
    ------
    rise_time : float
        Time to go from the lower to the upper rise band (default 10% → 90%)
        of the final value; nan if never reached
    peak_value : float
        Maximum output value
    peak_time : float
        Time at which the peak occurs
    overshoot : float
        Percent overshoot above the final value (0 if none)
    settling_time : float
        Time after which the output stays within the settling band; nan if
        it never settles
    steady_state_value : float
        Final value used for normalization
    steady_state_error : float
        reference - final output (nan if no reference given)
    """

    rise_time: float
    peak_value: float
    peak_time: float
    overshoot: float
    settling_time: float
    steady_state_value: float
    steady_state_error: float


__all__ = ["TrajectorySample", "SimulationTrajectory", "StepResponseInfo"]
