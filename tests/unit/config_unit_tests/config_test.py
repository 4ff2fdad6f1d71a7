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
Unit Tests for NumericalTolerances
"""

import dataclasses
import unittest

from sfbdesign.config import DEFAULT_TOLERANCES, NumericalTolerances, resolve_tolerances


class TestNumericalTolerances(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual(DEFAULT_TOLERANCES.rank_tol, 1e-10)
        self.assertEqual(DEFAULT_TOLERANCES.stability_tol, 1e-10)
        self.assertEqual(DEFAULT_TOLERANCES.placement_rtol, 1e-6)
        self.assertEqual(DEFAULT_TOLERANCES, NumericalTolerances())

    def test_with_overrides_returns_copy(self):
        strict = DEFAULT_TOLERANCES.with_overrides(placement_rtol=1e-9)

        self.assertEqual(strict.placement_rtol, 1e-9)
        self.assertEqual(strict.rank_tol, DEFAULT_TOLERANCES.rank_tol)
        self.assertEqual(DEFAULT_TOLERANCES.placement_rtol, 1e-6)

    def test_unknown_override_raises(self):
        with self.assertRaises(ValueError) as cm:
            DEFAULT_TOLERANCES.with_overrides(rank_tolerance=1e-3)
        self.assertIn("rank_tolerance", str(cm.exception))

    def test_non_positive_rejected(self):
        for value in (0.0, -1e-6):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    NumericalTolerances(grid_rtol=value)

    def test_frozen(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            DEFAULT_TOLERANCES.rank_tol = 1.0

    def test_resolve(self):
        custom = NumericalTolerances(singular_tol=1e-10)
        self.assertIs(resolve_tolerances(None), DEFAULT_TOLERANCES)
        self.assertIs(resolve_tolerances(custom), custom)


if __name__ == "__main__":
    unittest.main()
