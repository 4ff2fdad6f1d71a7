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
Unit Tests for the Error and Warning Taxonomy
"""

import unittest
import warnings

import numpy as np

from sfbdesign.exceptions import (
    ComplexGainError,
    ControlDesignError,
    ControlDesignWarning,
    DimensionError,
    NearSingularWarning,
    NumericalToleranceWarning,
    SingularMatrixError,
    UncontrollableSystemError,
    UnsupportedGridError,
    emit_warning,
)


class TestHierarchy(unittest.TestCase):
    def test_errors_share_base(self):
        for cls in (
            DimensionError,
            UncontrollableSystemError,
            SingularMatrixError,
            ComplexGainError,
            UnsupportedGridError,
        ):
            with self.subTest(cls=cls.__name__):
                self.assertTrue(issubclass(cls, ControlDesignError))

    def test_builtin_compatibility(self):
        self.assertTrue(issubclass(DimensionError, ValueError))
        self.assertTrue(issubclass(ComplexGainError, ValueError))
        self.assertTrue(issubclass(UnsupportedGridError, ValueError))
        self.assertTrue(issubclass(SingularMatrixError, np.linalg.LinAlgError))

    def test_uncontrollable_carries_rank(self):
        err = UncontrollableSystemError(1, 3)
        self.assertEqual((err.rank, err.nx), (1, 3))
        self.assertIn("rank 1", str(err))

    def test_warnings_are_user_warnings(self):
        self.assertTrue(issubclass(ControlDesignWarning, UserWarning))
        self.assertTrue(issubclass(NearSingularWarning, ControlDesignWarning))


class TestEmitWarning(unittest.TestCase):
    def test_records_and_warns(self):
        messages = []
        with self.assertWarns(NumericalToleranceWarning) as cm:
            emit_warning(messages, "gain residue", NumericalToleranceWarning)

        self.assertEqual(messages, ["NumericalToleranceWarning: gain residue"])
        self.assertEqual(str(cm.warning), "gain residue")

    def test_without_list(self):
        with self.assertWarns(NearSingularWarning):
            emit_warning(None, "close to singular", NearSingularWarning)

    def test_escalation_to_error(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", NearSingularWarning)
            with self.assertRaises(NearSingularWarning):
                emit_warning([], "close to singular", NearSingularWarning)


if __name__ == "__main__":
    unittest.main()
