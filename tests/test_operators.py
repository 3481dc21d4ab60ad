# TerraField ETL Quality - Transformation Operation Tests
# Each operation applied directly to positional rows

import sys
import os
import unittest

# Add parent to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tests.sample_datasets import TEST_CLOCK


def _ctx(columns):
    from etl_quality.compute.operators.base import OperationContext
    from etl_quality.core.config import Settings

    return OperationContext(columns=list(columns), clock=TEST_CLOCK, settings=Settings(_env_file=None))


class TestFillMissingValues(unittest.TestCase):

    def setUp(self):
        from etl_quality.compute.operators.cell_ops import FillMissingValuesOperation
        self.op = FillMissingValuesOperation()

    def test_fills_missing_cells(self):
        from etl_quality.models.rules import FillMissingValuesConfig

        rows = [["a"], [None], [""], [float("nan")]]
        count = self.op.apply(rows, 0, 0, FillMissingValuesConfig(default_value="N/A"), _ctx(["owner"]))

        self.assertEqual(count, 3)
        self.assertEqual([r[0] for r in rows], ["a", "N/A", "N/A", "N/A"])

    def test_current_date_resolves_from_clock(self):
        from etl_quality.models.rules import FillMissingValuesConfig

        rows = [[None]]
        self.op.apply(rows, 0, 0, FillMissingValuesConfig(default_value="CURRENT_DATE"), _ctx(["saleDate"]))

        self.assertEqual(rows[0][0], "2025-06-15")

    def test_copies_present_values_to_new_target(self):
        from etl_quality.models.rules import FillMissingValuesConfig

        rows = [["x", None], [None, None]]
        count = self.op.apply(rows, 0, 1, FillMissingValuesConfig(default_value=0), _ctx(["a", "b"]))

        self.assertEqual(count, 1)
        self.assertEqual(rows, [["x", "x"], [None, 0]])

    def test_second_run_changes_nothing(self):
        from etl_quality.models.rules import FillMissingValuesConfig

        rows = [[None], ["b"]]
        config = FillMissingValuesConfig()
        self.assertEqual(self.op.apply(rows, 0, 0, config, _ctx(["a"])), 1)
        self.assertEqual(self.op.apply(rows, 0, 0, config, _ctx(["a"])), 0)


class TestValidation(unittest.TestCase):

    def setUp(self):
        from etl_quality.compute.operators.cell_ops import ValidationOperation
        self.op = ValidationOperation()

    def test_numeric_convert(self):
        from etl_quality.models.rules import ValidationConfig

        rows = [["12"], ["abc"], [None], [" 3.5 "], [7]]
        count = self.op.apply(rows, 0, 0, ValidationConfig(), _ctx(["value"]))

        self.assertEqual(count, 2)
        self.assertEqual([r[0] for r in rows], [12, 0, 0, 3.5, 7])

    def test_non_convert_action_keeps_invalid_cells(self):
        from etl_quality.models.rules import ValidationConfig

        rows = [["abc"], ["4"]]
        count = self.op.apply(rows, 0, 0, ValidationConfig(action="flag"), _ctx(["value"]))

        self.assertEqual(count, 0)
        self.assertEqual([r[0] for r in rows], ["abc", 4])

    def test_unknown_validation_type_raises(self):
        from etl_quality.core.exceptions import RuleApplicationException
        from etl_quality.models.rules import ValidationConfig

        with self.assertRaises(RuleApplicationException):
            self.op.apply([["x"]], 0, 0, ValidationConfig(validation_type="email"), _ctx(["value"]))


class TestNumberTransform(unittest.TestCase):

    def setUp(self):
        from etl_quality.compute.operators.cell_ops import NumberTransformOperation
        self.op = NumberTransformOperation()

    def test_scenario_b_abs(self):
        from etl_quality.models.rules import NumberTransformConfig

        rows = [[2, "", -50, 2060]]
        count = self.op.apply(rows, 2, 2, NumberTransformConfig(operation="abs"), _ctx(["id", "address", "value", "yearBuilt"]))

        self.assertEqual(rows[0][2], 50)
        self.assertEqual(count, 1)

    def test_counts_only_changed_cells(self):
        from etl_quality.models.rules import NumberTransformConfig

        rows = [[-1], [2], ["n/a"], [None], [-0.5]]
        count = self.op.apply(rows, 0, 0, NumberTransformConfig(operation="abs"), _ctx(["value"]))

        self.assertEqual(count, 2)
        self.assertEqual([r[0] for r in rows], [1, 2, "n/a", None, 0.5])

    def test_rounding_operations(self):
        from etl_quality.models.rules import NumberTransformConfig

        for operation, expected in (("round", [3, -2, 4]), ("floor", [2, -3, 4]), ("ceil", [3, -2, 4])):
            rows = [[2.5], [-2.5], [4]]
            self.op.apply(rows, 0, 0, NumberTransformConfig(operation=operation), _ctx(["value"]))
            self.assertEqual([r[0] for r in rows], expected, operation)

    def test_unknown_operation_raises(self):
        from etl_quality.core.exceptions import RuleApplicationException
        from etl_quality.models.rules import NumberTransformConfig

        with self.assertRaises(RuleApplicationException):
            self.op.apply([[1]], 0, 0, NumberTransformConfig(operation="sqrt"), _ctx(["value"]))


class TestDeduplicate(unittest.TestCase):

    def setUp(self):
        from etl_quality.compute.operators.column_ops import DeduplicateOperation
        self.op = DeduplicateOperation()

    def test_scenario_c_suffixes(self):
        from etl_quality.models.rules import DeduplicateConfig

        rows = [[1], [2], [1], [1]]
        count = self.op.apply(rows, 0, 0, DeduplicateConfig(suffix_pattern="_${index}"), _ctx(["id"]))

        self.assertEqual([r[0] for r in rows], [1, 2, "1_2", "1_3"])
        self.assertEqual(count, 2)

    def test_first_occurrence_unchanged_and_count_minus_one_suffixed(self):
        from etl_quality.models.rules import DeduplicateConfig

        values = ["a", "b", "a", "c", "b", "a", "a"]
        rows = [[v] for v in values]
        count = self.op.apply(rows, 0, 0, DeduplicateConfig(suffix_pattern="-${index}"), _ctx(["parcel"]))

        out = [r[0] for r in rows]
        self.assertEqual(out, ["a", "b", "a-2", "c", "b-2", "a-3", "a-4"])
        self.assertEqual(count, (4 - 1) + (2 - 1))
        self.assertEqual(len(set(out)), len(out))

    def test_writes_to_separate_target(self):
        from etl_quality.models.rules import DeduplicateConfig

        rows = [[5, None], [5, None]]
        self.op.apply(rows, 0, 1, DeduplicateConfig(), _ctx(["id", "uniqueId"]))

        self.assertEqual(rows, [[5, 5], [5, "5_2"]])

    def test_unknown_strategy_raises(self):
        from etl_quality.core.exceptions import RuleApplicationException
        from etl_quality.models.rules import DeduplicateConfig

        with self.assertRaises(RuleApplicationException):
            self.op.apply([[1], [1]], 0, 0, DeduplicateConfig(strategy="drop"), _ctx(["id"]))


class TestDateValidation(unittest.TestCase):

    def setUp(self):
        from etl_quality.compute.operators.cell_ops import DateValidationOperation
        self.op = DateValidationOperation()

    def test_future_years_clamped_to_current_year(self):
        from etl_quality.models.rules import DateValidationConfig

        rows = [[2060], ["2030"], [2025], [1990], [99999], [500], ["soon"], [None]]
        count = self.op.apply(rows, 0, 0, DateValidationConfig(), _ctx(["yearBuilt"]))

        self.assertEqual(count, 2)
        self.assertEqual([r[0] for r in rows], [2025, 2025, 2025, 1990, 99999, 500, "soon", None])

    def test_explicit_max_date(self):
        from etl_quality.models.rules import DateValidationConfig

        rows = [[2021], [2019]]
        count = self.op.apply(rows, 0, 0, DateValidationConfig(max_date="2020-12-31"), _ctx(["yearBuilt"]))

        self.assertEqual(count, 1)
        self.assertEqual([r[0] for r in rows], [2020, 2019])


class TestQualityScore(unittest.TestCase):

    def setUp(self):
        from etl_quality.compute.operators.row_ops import QualityScoreOperation
        self.op = QualityScoreOperation()

    def _score(self, columns, row, **config):
        from etl_quality.models.rules import QualityScoreConfig

        columns = list(columns) + ["qualityScore"]
        rows = [list(row) + [None]]
        count = self.op.apply(rows, -1, len(columns) - 1, QualityScoreConfig(**config), _ctx(columns))
        self.assertEqual(count, 1)
        return rows[0][-1]

    def test_all_valid_row_scores_100(self):
        self.assertEqual(self._score(["id", "value", "yearBuilt"], [1, 450000, 2008]), 100)

    def test_all_missing_row_scores_0(self):
        self.assertEqual(self._score(["id", "value", "yearBuilt"], [None, "", None]), 0)

    def test_invalid_cells_lower_the_score(self):
        # value negative and yearBuilt in the future: 2 of 4 cells invalid
        score = self._score(["id", "address", "value", "yearBuilt"], [2, "x", -50, 2060])
        self.assertEqual(score, 50)

    def test_weights_and_factors(self):
        columns = ["id", "address", "value", "yearBuilt"]
        row = [2, "", -50, 1990]

        self.assertEqual(self._score(columns, row, factors=["completeness"]), 75)
        self.assertEqual(
            self._score(columns, row, weights={"completeness": 0.7, "validity": 0.3}),
            100 - 17.5 - 7.5,
        )

    def test_iso_dates_are_judged_by_year(self):
        from datetime import date

        columns = ["saleDate", "price"]

        self.assertEqual(self._score(columns, ["2024-03-15", 100]), 100)
        self.assertEqual(self._score(columns, ["2025-06-15T10:30:00", 100]), 100)
        self.assertEqual(self._score(columns, [date(2001, 2, 3), 100]), 100)
        self.assertEqual(self._score(columns, ["2031-01-01", 100]), 50)
        self.assertEqual(self._score(columns, ["next spring", 100]), 50)

    def test_score_always_in_range(self):
        columns = ["value", "price", "saleDate"]
        for row in ([None, None, None], ["x", "-1", "2099"], [1, 2, "2001"], ["", -3, "abc"]):
            for weights in ({"completeness": 5.0, "validity": 5.0}, {"completeness": -2.0, "validity": 0.0}):
                score = self._score(columns, row, weights=weights)
                self.assertGreaterEqual(score, 0)
                self.assertLessEqual(score, 100)

    def test_every_row_counts(self):
        from etl_quality.models.rules import QualityScoreConfig

        rows = [[1, None], [None, None], ["x", None]]
        count = self.op.apply(rows, -1, 1, QualityScoreConfig(), _ctx(["id", "qualityScore"]))

        self.assertEqual(count, 3)
        self.assertEqual([r[1] for r in rows], [100, 0, 100])


class TestOperationRegistry(unittest.TestCase):

    def test_default_registry_lists_all_types(self):
        from etl_quality.compute.registry import default_registry
        from etl_quality.models.rules import SUPPORTED_TYPES

        self.assertEqual(set(default_registry().list()), set(SUPPORTED_TYPES))

    def test_scopes(self):
        from etl_quality.compute.operators.base import OperationScope
        from etl_quality.compute.registry import default_registry

        reg = default_registry()
        self.assertEqual(reg.get("deduplicate").scope, OperationScope.COLUMN)
        self.assertEqual(reg.get("qualityScore").scope, OperationScope.ROW)
        self.assertEqual(reg.get("validation").scope, OperationScope.CELL)

    def test_unknown_type_raises(self):
        from etl_quality.compute.registry import default_registry
        from etl_quality.core.exceptions import UnsupportedOperationException

        with self.assertRaises(UnsupportedOperationException) as cm:
            default_registry().get("addressStandardization")
        self.assertEqual(cm.exception.message, "Unsupported transformation type: addressStandardization")


if __name__ == '__main__':
    unittest.main()
