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
Unit Tests for System Analysis Wrapper

Test Structure:
- TestSystemAnalysisInit: Initialization
- TestStabilityMethod: stability() with matrices and models
- TestControllabilityMethod: controllability() with matrices and models
- TestObservabilityMethod: observability() with matrices and models
"""

import unittest

import numpy as np
from numpy.testing import assert_allclose

from sfbdesign.config import DEFAULT_TOLERANCES
from sfbdesign.control import SystemAnalysis
from sfbdesign.systems import StateSpaceModel


class AnalysisTestCase(unittest.TestCase):
    def setUp(self):
        self.analyzer = SystemAnalysis()
        self.plant = StateSpaceModel([[0.0, 1.0], [0.0, -0.01]], [[0.0], [0.1]], [[1.0, 0.0]])
        self.closed = self.plant.closed_loop([[3240.0, 251.9]])


class TestSystemAnalysisInit(AnalysisTestCase):
    def test_default_initialization(self):
        self.assertIs(self.analyzer.tolerances, DEFAULT_TOLERANCES)

    def test_custom_tolerances(self):
        loose = DEFAULT_TOLERANCES.with_overrides(rank_tol=1e-3)
        self.assertEqual(SystemAnalysis(loose).tolerances.rank_tol, 1e-3)


class TestStabilityMethod(AnalysisTestCase):
    def test_model_argument(self):
        result = self.analyzer.stability(self.closed)
        self.assertTrue(result["is_stable"])
        assert_allclose(result["stability_margin"], 12.6, rtol=1e-9)

    def test_matrix_argument(self):
        result = self.analyzer.stability(self.plant.A)
        self.assertTrue(result["is_marginally_stable"])

    def test_discrete(self):
        result = self.analyzer.stability(np.array([[0.5]]), system_type="discrete")
        self.assertTrue(result["is_stable"])

    def test_stability_band_from_tolerances(self):
        A_slow = np.array([[-1e-6]])
        self.assertTrue(self.analyzer.stability(A_slow)["is_stable"])

        wide = SystemAnalysis(DEFAULT_TOLERANCES.with_overrides(stability_tol=1e-4))
        result = wide.stability(A_slow)
        self.assertTrue(result["is_marginally_stable"])
        self.assertFalse(result["is_stable"])


class TestControllabilityMethod(AnalysisTestCase):
    def test_model_argument(self):
        result = self.analyzer.controllability(self.plant)
        self.assertTrue(result["is_controllable"])
        self.assertEqual(result["rank"], 2)

    def test_matrix_argument(self):
        result = self.analyzer.controllability(np.diag([-1.0, -2.0]), np.array([[1.0], [0.0]]))
        self.assertFalse(result["is_controllable"])

    def test_matrix_without_b_raises(self):
        with self.assertRaises(ValueError):
            self.analyzer.controllability(self.plant.A)

    def test_tolerances_are_used(self):
        A = np.diag([-1.0, -1.0 - 1e-9])
        B = np.array([[1.0], [1.0]])
        loose = SystemAnalysis(DEFAULT_TOLERANCES.with_overrides(rank_tol=1e-3))
        self.assertFalse(loose.controllability(A, B)["is_controllable"])


class TestObservabilityMethod(AnalysisTestCase):
    def test_model_argument(self):
        self.assertTrue(self.analyzer.observability(self.plant)["is_observable"])

    def test_matrix_argument(self):
        result = self.analyzer.observability(self.plant.A, np.array([[0.0, 1.0]]))
        self.assertFalse(result["is_observable"])
        self.assertEqual(result["rank"], 1)

    def test_matrix_without_c_raises(self):
        with self.assertRaises(ValueError):
            self.analyzer.observability(self.plant.A)

    def test_dc_gain(self):
        assert_allclose(self.analyzer.dc_gain(self.closed), [[0.1 / 324.0]], rtol=1e-9)


if __name__ == "__main__":
    unittest.main()
