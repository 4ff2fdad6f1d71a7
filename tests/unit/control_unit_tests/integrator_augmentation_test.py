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
Unit Tests for Integrator Augmentation

Tests cover:
- Block structure of the augmented closed loop and open-loop plant
- Stability of the augmented loop for the ωₙ = 40 design
- Equivalence of placing on the integrator plant and closing the loop
- Shape validation of K and kᵢ
"""

import dataclasses
import unittest

import numpy as np
from numpy.testing import assert_allclose

from sfbdesign.control import (
    AugmentedModel,
    ClosedLoopSpec,
    augment_with_integrator,
    compute_dc_gain,
    integrator_plant,
    place_poles,
)
from sfbdesign.exceptions import DimensionError, NonzeroFeedthroughWarning
from sfbdesign.systems import StateSpaceModel


class IntegratorTestCase(unittest.TestCase):
    def setUp(self):
        self.plant = StateSpaceModel([[0.0, 1.0], [0.0, -0.01]], [[0.0], [0.1]], [[1.0, 0.0]])
        # ζ = 0.7, ωₙ = 40
        self.K = np.array([[16000.0, 559.9]])
        self.ki = 200000.0


class TestAugmentWithIntegrator(IntegratorTestCase):
    """Test the closed loop with inputs [d, r]."""

    def test_dimensions(self):
        augmented = augment_with_integrator(self.plant, self.K, self.ki)

        self.assertIsInstance(augmented, AugmentedModel)
        self.assertEqual(augmented.num_states, 3)
        self.assertEqual(augmented.num_inputs, 2)
        self.assertEqual(augmented.num_outputs, 1)
        self.assertEqual(augmented.plant_states, 2)
        self.assertEqual(augmented.integrator_states, 1)

    def test_block_structure(self):
        augmented = augment_with_integrator(self.plant, self.K, self.ki)

        expected_A = np.array(
            [
                [0.0, 1.0, 0.0],
                [-1600.0, -56.0, -20000.0],
                [1.0, 0.0, 0.0],
            ]
        )
        assert_allclose(augmented.A, expected_A, atol=1e-9)
        assert_allclose(augmented.B, [[0.0, 0.0], [0.1, 0.0], [0.0, -1.0]])
        assert_allclose(augmented.C, [[1.0, 0.0, 0.0]])
        assert_allclose(augmented.D, np.zeros((1, 2)))

    def test_characteristic_polynomial(self):
        augmented = augment_with_integrator(self.plant, self.K, self.ki)
        assert_allclose(np.poly(augmented.A), [1.0, 56.0, 1600.0, 20000.0], rtol=1e-9)

    def test_stable_for_moderate_gain(self):
        augmented = augment_with_integrator(self.plant, self.K, self.ki)
        self.assertTrue(augmented.is_stable())

    def test_unstable_for_large_gain(self):
        # Routh: 56 · 1600 < 0.1 kᵢ
        augmented = augment_with_integrator(self.plant, self.K, 1e6)
        self.assertFalse(augmented.is_stable())

    def test_zero_steady_state_error(self):
        augmented = augment_with_integrator(self.plant, self.K, self.ki)
        # d has no steady-state effect, r passes with unit gain
        assert_allclose(compute_dc_gain(augmented), [[0.0, 1.0]], atol=1e-9)

    def test_gains_are_stored(self):
        augmented = augment_with_integrator(self.plant, self.K, self.ki)
        assert_allclose(augmented.feedback_gain, self.K)
        assert_allclose(augmented.integral_gain, [[self.ki]])
        with self.assertRaises(ValueError):
            augmented.integral_gain[0, 0] = 1.0
        with self.assertRaises(dataclasses.FrozenInstanceError):
            augmented.plant_states = 3

    def test_vector_feedback_gain(self):
        augmented = augment_with_integrator(self.plant, [16000.0, 559.9], self.ki)
        self.assertEqual(augmented.feedback_gain.shape, (1, 2))

    def test_split_state(self):
        augmented = augment_with_integrator(self.plant, self.K, self.ki)
        states = np.arange(12.0).reshape(4, 3)
        x, w = augmented.split_state(states)
        self.assertEqual(x.shape, (4, 2))
        self.assertEqual(w.shape, (4, 1))
        assert_allclose(w[:, 0], [2.0, 5.0, 8.0, 11.0])

    def test_wrong_k_shape_raises(self):
        with self.assertRaises(DimensionError):
            augment_with_integrator(self.plant, np.ones((1, 3)), self.ki)

    def test_wrong_ki_shape_raises(self):
        with self.assertRaises(DimensionError):
            augment_with_integrator(self.plant, self.K, np.ones((2, 2)))

    def test_scalar_ki_requires_square_plant(self):
        plant = StateSpaceModel(np.diag([-1.0, -2.0]), np.eye(2), [[1.0, 1.0]])
        with self.assertRaises(DimensionError):
            augment_with_integrator(plant, np.zeros((2, 2)), 1.0)

    def test_matrix_ki(self):
        plant = StateSpaceModel(np.diag([-1.0, -2.0]), np.eye(2), [[1.0, 1.0]])
        augmented = augment_with_integrator(plant, np.zeros((2, 2)), [[1.0], [2.0]])
        self.assertEqual(augmented.num_states, 3)
        self.assertEqual(augmented.num_inputs, 3)
        assert_allclose(augmented.A[:2, 2], [-1.0, -2.0])

    def test_nonzero_feedthrough_warns(self):
        plant = StateSpaceModel(self.plant.A, self.plant.B, self.plant.C, 0.2)
        with self.assertWarns(NonzeroFeedthroughWarning):
            augmented = augment_with_integrator(plant, self.K, self.ki)
        assert_allclose(augmented.D, np.zeros((1, 2)))


class TestIntegratorPlant(IntegratorTestCase):
    """Test the open-loop plant with integrator states."""

    def test_block_structure(self):
        open_loop = integrator_plant(self.plant)

        assert_allclose(
            open_loop.A, [[0.0, 1.0, 0.0], [0.0, -0.01, 0.0], [1.0, 0.0, 0.0]]
        )
        assert_allclose(open_loop.B, [[0.0, 0.0], [0.1, 0.0], [0.0, -1.0]])
        assert_allclose(open_loop.C, [[1.0, 0.0, 0.0]])

    def test_controllable_through_u(self):
        open_loop = integrator_plant(self.plant)
        u_only = StateSpaceModel(open_loop.A, open_loop.B[:, [0]], open_loop.C)
        self.assertTrue(u_only.is_controllable())

    def test_placement_matches_augmentation(self):
        poles = ClosedLoopSpec.from_damping(0.7, 20.0, additional_poles=[-30.0]).poles
        result = place_poles(integrator_plant(self.plant), poles, input_index=0)

        gain = result["gain"]
        assert_allclose(gain[1], [0.0, 0.0, 0.0])
        K, ki = gain[:1, :2], gain[0, 2]

        augmented = augment_with_integrator(self.plant, K, ki)
        assert_allclose(
            np.real(np.poly(augmented.A)), np.real(np.poly(poles)), rtol=1e-8
        )

    def test_nonzero_feedthrough_warns(self):
        plant = StateSpaceModel(self.plant.A, self.plant.B, self.plant.C, 0.2)
        with self.assertWarns(NonzeroFeedthroughWarning):
            integrator_plant(plant)


if __name__ == "__main__":
    unittest.main()
