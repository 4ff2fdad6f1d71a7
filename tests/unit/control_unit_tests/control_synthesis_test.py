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
Unit Tests for Control Synthesis Wrapper

Tests cover:
- Wrapper initialization and tolerance configuration
- Method delegation to classical functions
- End-to-end design through the wrapper
- Error propagation

Test Structure:
- TestControlSynthesisInit: Initialization and configuration
- TestDelegation: Verify proper delegation to classical functions
- TestIntegration: End-to-end usage patterns
- TestErrorPropagation: Error handling from underlying functions

The ControlSynthesis class is a thin wrapper, so tests focus on:
1. Correct delegation to classical functions
2. Tolerance passing
3. No state mutation or side effects
"""

import unittest
from unittest.mock import patch

import numpy as np
from numpy.testing import assert_allclose

from sfbdesign.config import DEFAULT_TOLERANCES
from sfbdesign.control import AugmentedModel, ClosedLoopSpec, ControlSynthesis
from sfbdesign.exceptions import SingularMatrixError, UncontrollableSystemError
from sfbdesign.systems import StateSpaceModel

# ============================================================================
# Test Fixtures and Utilities
# ============================================================================


class SynthesisTestCase(unittest.TestCase):
    """Base class with common test utilities."""

    def setUp(self):
        self.synthesis = ControlSynthesis()
        self.plant = StateSpaceModel([[0.0, 1.0], [0.0, -0.01]], [[0.0], [0.1]], [[1.0, 0.0]])
        self.spec = ClosedLoopSpec.from_damping(0.7, 18.0)


# ============================================================================
# Initialization
# ============================================================================


class TestControlSynthesisInit(SynthesisTestCase):
    """Test initialization and configuration."""

    def test_default_initialization(self):
        self.assertIs(self.synthesis.tolerances, DEFAULT_TOLERANCES)

    def test_custom_tolerances(self):
        strict = DEFAULT_TOLERANCES.with_overrides(placement_rtol=1e-9)
        synthesis = ControlSynthesis(strict)
        self.assertEqual(synthesis.tolerances.placement_rtol, 1e-9)

    def test_repr(self):
        self.assertIn("ControlSynthesis", repr(self.synthesis))


# ============================================================================
# Delegation
# ============================================================================


class TestDelegation(SynthesisTestCase):
    """Verify proper delegation to classical functions."""

    @patch("sfbdesign.control.classical_control_functions.place_poles")
    def test_place_poles_delegates(self, mock_place):
        mock_place.return_value = {"gain": np.zeros((1, 2))}
        strict = DEFAULT_TOLERANCES.with_overrides(placement_rtol=1e-9)
        synthesis = ControlSynthesis(strict)

        result = synthesis.place_poles(self.plant, self.spec, input_index=0)

        mock_place.assert_called_once_with(
            self.plant, self.spec, input_index=0, tolerances=strict
        )
        self.assertIs(result, mock_place.return_value)

    @patch("sfbdesign.control.classical_control_functions.feedforward_gain")
    def test_feedforward_delegates(self, mock_ff):
        mock_ff.return_value = 3240.0

        N = self.synthesis.feedforward_gain(self.plant)

        mock_ff.assert_called_once_with(self.plant, tolerances=DEFAULT_TOLERANCES)
        self.assertEqual(N, 3240.0)

    @patch("sfbdesign.control.classical_control_functions.compute_dc_gain")
    def test_dc_gain_delegates(self, mock_dc):
        self.synthesis.dc_gain(self.plant)
        mock_dc.assert_called_once_with(self.plant, tolerances=DEFAULT_TOLERANCES)

    @patch("sfbdesign.control.integrator_augmentation.augment_with_integrator")
    def test_augment_delegates(self, mock_aug):
        K = np.array([[1.0, 2.0]])
        self.synthesis.augment_with_integrator(self.plant, K, 5.0)
        mock_aug.assert_called_once_with(self.plant, K, 5.0)


# ============================================================================
# Integration
# ============================================================================


class TestIntegration(SynthesisTestCase):
    """End-to-end usage patterns."""

    def test_design_workflow(self):
        result = self.synthesis.place_poles(self.plant, self.spec)
        K = result["gain"]
        N = self.synthesis.feedforward_gain(self.plant.closed_loop(K))

        assert_allclose(K, [[3240.0, 251.9]], rtol=1e-9)
        assert_allclose(N, 3240.0, rtol=1e-9)

    def test_integral_workflow(self):
        K = self.synthesis.place_poles(self.plant, ClosedLoopSpec.from_damping(0.7, 40.0))["gain"]
        augmented = self.synthesis.augment_with_integrator(self.plant, K, 2e5)

        self.assertIsInstance(augmented, AugmentedModel)
        self.assertTrue(augmented.is_stable())

    def test_integrator_plant(self):
        open_loop = self.synthesis.integrator_plant(self.plant)
        self.assertEqual(open_loop.num_states, 3)
        self.assertEqual(open_loop.num_inputs, 2)

    def test_no_state_mutation(self):
        before = repr(self.synthesis)
        self.synthesis.place_poles(self.plant, self.spec)
        self.assertEqual(repr(self.synthesis), before)


# ============================================================================
# Error Propagation
# ============================================================================


class TestErrorPropagation(SynthesisTestCase):
    """Error handling from underlying functions."""

    def test_uncontrollable_propagates(self):
        plant = StateSpaceModel(np.diag([-1.0, -2.0]), [[1.0], [0.0]], [[1.0, 1.0]])
        with self.assertRaises(UncontrollableSystemError):
            self.synthesis.place_poles(plant, [-3.0, -4.0])

    def test_singular_feedforward_propagates(self):
        with self.assertRaises(SingularMatrixError):
            self.synthesis.feedforward_gain(self.plant)


if __name__ == "__main__":
    unittest.main()
