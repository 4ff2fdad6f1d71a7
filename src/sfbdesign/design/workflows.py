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
Design Workflows

Pure functions from a parameter set (plant, closed-loop spec, kᵢ) to the
design artifacts (gains, closed-loop models, trajectories, metrics).
An interactive front end re-tunes ωₙ or kᵢ by calling these again with
new values; nothing is cached between calls.

Workflow
--------
1. design_state_feedback: K by pole placement, N = 1/G_cl(0)
2. design_integral_control: the above plus the augmented loop for a kᵢ
3. simulate_state_feedback / simulate_integral_control: reference step
   with a step disturbance at a fraction of the horizon
4. sweep_integral_gain: step 2-3 over candidate kᵢ values, with metrics

Usage
-----
>>> from sfbdesign.design import design_state_feedback, sweep_integral_gain
>>> from sfbdesign.control import ClosedLoopSpec
>>>
>>> plant = StateSpaceModel([[0, 1], [0, -0.01]], [0, 0.1], [1, 0])
>>> design = design_state_feedback(plant, ClosedLoopSpec.from_damping(0.7, 18.0))
>>> design.gain
array([[3240. ,  251.9]])
>>>
>>> t = make_time_grid(0.0, 2.0, 0.001)
>>> sweep = sweep_integral_gain(
...     plant, ClosedLoopSpec.from_damping(0.7, 40.0), [1e4, 1e5, 2e5], t
... )
>>> best = min(
...     (p for p in sweep if p.is_stable and not p.warnings),
...     key=lambda p: p.rejection.recovery_time,
... )
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from sfbdesign.config import NumericalTolerances
from sfbdesign.control.classical_control_functions import feedforward_gain, place_poles
from sfbdesign.control.closed_loop_spec import ClosedLoopSpec
from sfbdesign.control.integrator_augmentation import AugmentedModel, augment_with_integrator
from sfbdesign.exceptions import DimensionError
from sfbdesign.metrics_and_losses.step_response import (
    DisturbanceRejectionMetrics,
    disturbance_rejection_metrics,
    step_response_info,
)
from sfbdesign.simulation.input_signals import (
    disturbance_onset_index,
    reference_and_disturbance,
    stack_inputs,
)
from sfbdesign.simulation.linear_simulator import simulate
from sfbdesign.systems.state_space_model import StateSpaceModel
from sfbdesign.types.control_classical import PolePlacementResult
from sfbdesign.types.core import GainMatrix, PoleLike, TimePoints
from sfbdesign.types.trajectories import SimulationTrajectory, StepResponseInfo

# ============================================================================
# Design Artifacts
# ============================================================================


@dataclass(frozen=True, eq=False)
class StateFeedbackDesign:
    """
    Static state feedback with reference feedforward: u = -Kx + N r.

    Attributes
    ----------
    plant : StateSpaceModel
        Open-loop plant
    spec : ClosedLoopSpec
        Requested closed-loop poles
    gain : GainMatrix
        Feedback gain K (nu, nx)
    feedforward : float or np.ndarray
        Reference gain N = 1 / G_cl(0)
    closed_loop : StateSpaceModel
        (A - BK, B, C, D), input is the scaled reference N r
    placement : PolePlacementResult
        Full pole placement result
    warnings : Tuple[str, ...]
        Conditioning diagnostics from the design
    """

    plant: StateSpaceModel
    spec: ClosedLoopSpec
    gain: GainMatrix
    feedforward: Union[float, np.ndarray]
    closed_loop: StateSpaceModel
    placement: PolePlacementResult
    warnings: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, eq=False)
class IntegralControlDesign:
    """
    State feedback plus integral action: u = -Kx - kᵢw + d.

    Attributes
    ----------
    state_feedback : StateFeedbackDesign
        Design the integral loop is built on (its K and N)
    integral_gain : np.ndarray
        kᵢ (nu, ny)
    augmented : AugmentedModel
        Closed loop with inputs [d, r]
    warnings : Tuple[str, ...]
        Conditioning diagnostics from the design
    """

    state_feedback: StateFeedbackDesign
    integral_gain: np.ndarray
    augmented: AugmentedModel
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_stable(self) -> bool:
        """True if the augmented closed loop is asymptotically stable."""
        return self.augmented.is_stable()


@dataclass(frozen=True, eq=False)
class IntegralGainSweepPoint:
    """
    One candidate kᵢ of a sweep.

    ``trajectory``, ``step`` and ``rejection`` are None when the augmented
    loop is unstable (nothing meaningful to simulate).
    """

    ki: float
    design: IntegralControlDesign
    is_stable: bool
    trajectory: Optional[SimulationTrajectory] = None
    step: Optional[StepResponseInfo] = None
    rejection: Optional[DisturbanceRejectionMetrics] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)


# ============================================================================
# Design
# ============================================================================


def _as_spec(spec: Union[ClosedLoopSpec, PoleLike]) -> ClosedLoopSpec:
    return spec if isinstance(spec, ClosedLoopSpec) else ClosedLoopSpec(spec)


def design_state_feedback(
    plant: StateSpaceModel,
    spec: Union[ClosedLoopSpec, PoleLike],
    input_index: Optional[int] = None,
    tolerances: Optional[NumericalTolerances] = None,
) -> StateFeedbackDesign:
    """
    Pole placement followed by feedforward on the closed loop.

    Raises:
        UncontrollableSystemError, ComplexGainError, DimensionError: from
            place_poles
        SingularMatrixError: If the closed loop has no finite, nonzero DC
            gain (e.g. a pole placed at the origin)
    """
    spec = _as_spec(spec)
    placement = place_poles(plant, spec, input_index=input_index, tolerances=tolerances)
    K = placement["gain"]
    closed = plant.closed_loop(K)
    N = feedforward_gain(closed, tolerances=tolerances)

    return StateFeedbackDesign(
        plant=plant,
        spec=spec,
        gain=K,
        feedforward=N,
        closed_loop=closed,
        placement=placement,
        warnings=tuple(placement["warnings"]),
    )


def design_integral_control(
    plant: StateSpaceModel,
    spec: Union[ClosedLoopSpec, PoleLike],
    ki: Union[float, np.ndarray],
    input_index: Optional[int] = None,
    tolerances: Optional[NumericalTolerances] = None,
) -> IntegralControlDesign:
    """
    State feedback design with an integral loop closed around it.

    The poles of ``spec`` are placed for the plant alone; kᵢ then moves
    them; the augmented loop is not guaranteed stable for every kᵢ.
    """
    state_feedback = design_state_feedback(
        plant, spec, input_index=input_index, tolerances=tolerances
    )
    augmented = augment_with_integrator(plant, state_feedback.gain, ki)

    return IntegralControlDesign(
        state_feedback=state_feedback,
        integral_gain=augmented.integral_gain,
        augmented=augmented,
        warnings=state_feedback.warnings,
    )


# ============================================================================
# Scenario Simulation
# ============================================================================


def _scalar_feedforward(design: StateFeedbackDesign) -> float:
    if not isinstance(design.feedforward, float):
        raise DimensionError("Scenario simulation supports single-input single-output designs")
    return design.feedforward


def simulate_state_feedback(
    design: StateFeedbackDesign,
    time: TimePoints,
    reference_level: float = 1.0,
    disturbance_level: float = 0.0,
    disturbance_fraction: float = 0.5,
) -> SimulationTrajectory:
    """
    Reference step through u = N r - d on the closed loop.

    The disturbance d = disturbance_level · N · r acts at the plant input
    from trunc(N_samples · disturbance_fraction) on, so in steady state it
    shifts the output by -disturbance_level · r: plain state feedback does
    not reject it.
    """
    N = _scalar_feedforward(design)
    r, d = reference_and_disturbance(
        time, reference_level, disturbance_level * N * reference_level, disturbance_fraction
    )
    return simulate(design.closed_loop, N * r - d, time)


def simulate_integral_control(
    design: IntegralControlDesign,
    time: TimePoints,
    reference_level: float = 1.0,
    disturbance_level: float = 0.1,
    disturbance_fraction: float = 0.5,
) -> SimulationTrajectory:
    """
    Reference step and input disturbance on the augmented loop.

    Inputs are [d, r] with d = -disturbance_level · N · r after the onset,
    N being the feedforward gain of the underlying state feedback design.
    """
    N = _scalar_feedforward(design.state_feedback)
    r, d = reference_and_disturbance(
        time, reference_level, -disturbance_level * N * reference_level, disturbance_fraction
    )
    return simulate(design.augmented, stack_inputs(d, r), time)


def sweep_integral_gain(
    plant: StateSpaceModel,
    spec: Union[ClosedLoopSpec, PoleLike],
    ki_values: Sequence[float],
    time: TimePoints,
    reference_level: float = 1.0,
    disturbance_level: float = 0.1,
    disturbance_fraction: float = 0.5,
    recovery_band: float = 0.02,
    tolerances: Optional[NumericalTolerances] = None,
) -> List[IntegralGainSweepPoint]:
    """
    Evaluate candidate integral gains on the disturbance scenario.

    For each kᵢ the augmented loop is built and, if stable, simulated.
    Tracking metrics come from the samples before the disturbance onset,
    rejection metrics from the samples after it.

    Args:
        plant: Single-input single-output plant
        spec: Poles for the state feedback part
        ki_values: Candidate scalar integral gains
        time: Uniform simulation grid
        reference_level: Constant reference r
        disturbance_level: Disturbance size as a fraction of r at the output
        disturbance_fraction: Fraction of the horizon before the disturbance
        recovery_band: Recovery band as a fraction of r
        tolerances: Numerical thresholds (defaults if None)

    Returns:
        One IntegralGainSweepPoint per kᵢ, in input order
    """
    state_feedback = design_state_feedback(plant, spec, tolerances=tolerances)
    _scalar_feedforward(state_feedback)
    onset = disturbance_onset_index(time, disturbance_fraction)

    points: List[IntegralGainSweepPoint] = []
    for ki in ki_values:
        augmented = augment_with_integrator(plant, state_feedback.gain, ki)
        design = IntegralControlDesign(
            state_feedback=state_feedback,
            integral_gain=augmented.integral_gain,
            augmented=augmented,
            warnings=state_feedback.warnings,
        )
        if not design.is_stable:
            points.append(
                IntegralGainSweepPoint(
                    ki=float(ki), design=design, is_stable=False, warnings=design.warnings
                )
            )
            continue

        trajectory = simulate_integral_control(
            design, time, reference_level, disturbance_level, disturbance_fraction
        )
        y = trajectory.outputs[:, 0]
        step = None
        if onset >= 2:
            step = step_response_info(
                trajectory.time[:onset], y[:onset], reference=reference_level
            )
        rejection = None
        if onset < len(trajectory):
            rejection = disturbance_rejection_metrics(
                trajectory.time, y, onset, reference_level, band=recovery_band
            )
        points.append(
            IntegralGainSweepPoint(
                ki=float(ki),
                design=design,
                is_stable=True,
                trajectory=trajectory,
                step=step,
                rejection=rejection,
                warnings=design.warnings,
            )
        )

    return points


__all__ = [
    "StateFeedbackDesign",
    "IntegralControlDesign",
    "IntegralGainSweepPoint",
    "design_state_feedback",
    "design_integral_control",
    "simulate_state_feedback",
    "simulate_integral_control",
    "sweep_integral_gain",
]
