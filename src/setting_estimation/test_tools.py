"""
Tests for the reporting frames, catalog validation and the CLI.
"""

import io
import json
import math
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from slot_mechanics.catalog import MachineCatalog
from slot_mechanics.machine import CounterElement, MachineData, SettingProbability
from setting_estimation import cli, validate
from setting_estimation.estimator import SettingEstimator, calculate_estimations
from setting_estimation.observation import Observation
from setting_estimation.report import (
    BREAKDOWN_COLUMNS,
    breakdown_frame,
    estimations_frame,
    probability_table,
    totals_by_setting,
)


def run_quietly(func, *args):
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        result = func(*args)
    return result, buffer.getvalue()


class TestReport(unittest.TestCase):

    def setUp(self):
        self.juggler = MachineCatalog.from_file().get_machine_by_id("my-juggler-5")

    def test_probability_table(self):
        table = probability_table(self.juggler)
        self.assertEqual(table.shape, (5, 6))
        self.assertEqual(list(table.columns), [1, 2, 3, 4, 5, 6])
        self.assertAlmostEqual(table.loc["grape", 6], 5.65)
        self.assertAlmostEqual(table.loc["reg", 1], 452.0)

    def test_probability_table_missing_entry(self):
        machine = MachineData(
            id="m",
            machine_name="m",
            settings=(1, 2),
            elements=(
                CounterElement(id="a", name="a", probabilities=(SettingProbability(1, 10.0),)),
            ),
        )
        table = probability_table(machine)
        self.assertTrue(math.isnan(table.loc["a", 2]))

    def test_estimations_frame(self):
        results = calculate_estimations(self.juggler, 1000, 1000, {"grape": 177})
        frame = estimations_frame(results)
        self.assertEqual(list(frame.columns), ["setting", "percentage"])
        self.assertEqual(list(frame["setting"]), [1, 2, 3, 4, 5, 6])
        self.assertAlmostEqual(frame["percentage"].sum(), 100.0, delta=0.05)

    def test_breakdown_totals_match_likelihoods(self):
        observation = Observation.create(1000, {"grape": 177, "reg": 4})
        likelihoods = SettingEstimator(self.juggler).log_likelihoods(observation)

        frame = breakdown_frame(likelihoods)
        self.assertEqual(list(frame.columns), BREAKDOWN_COLUMNS)
        self.assertEqual(len(frame), 12)
        self.assertEqual(set(frame["element_id"]), {"grape", "reg"})

        totals = totals_by_setting(frame)
        for item in likelihoods:
            self.assertAlmostEqual(totals[item.setting], item.log_likelihood)

    def test_empty_breakdown(self):
        observation = Observation.create(1000)
        frame = breakdown_frame(SettingEstimator(self.juggler).log_likelihoods(observation))
        self.assertTrue(frame.empty)
        self.assertTrue(totals_by_setting(frame).empty)


class TestValidate(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_bundled_catalog_is_clean(self):
        results = validate.validate_catalog(MachineCatalog.from_file())
        for machine_id, issues in results.items():
            self.assertEqual(issues, [], machine_id)

    def test_broken_machine(self):
        machine = MachineData.from_dict(
            {
                "id": "broken",
                "settings": [1, 2, 2],
                "elements": [
                    {"id": "a", "parentId": "nope", "probBySettings": {1: 0.5, 2: 10}},
                    {"id": "b", "denominatorElementId": "b", "probBySettings": {1: 10, 3: 10}},
                    {"id": "b", "probBySettings": {1: 10, 2: 10}},
                ],
            }
        )
        issues = validate.validate_machine(machine)
        joined = "\n".join(issues)
        self.assertIn("duplicate settings", joined)
        self.assertIn("duplicate element ids", joined)
        self.assertIn("unknown parent 'nope'", joined)
        self.assertIn("out of range", joined)
        self.assertIn("own denominator element", joined)
        self.assertIn("unknown setting 3", joined)
        self.assertIn("no probability for settings [2]", joined)

    def test_main_exit_codes(self):
        code, output = run_quietly(validate.main, [])
        self.assertEqual(code, 0)
        self.assertIn("✅ my-juggler-5", output)

        bad = self.temp_dir / "bad.json"
        bad.write_text(
            json.dumps([{"id": "m", "settings": [], "elements": []}]), encoding="utf-8"
        )
        code, output = run_quietly(validate.main, [str(bad)])
        self.assertEqual(code, 1)
        self.assertIn("machine has no settings", output)

        code, _ = run_quietly(validate.main, [str(self.temp_dir / "missing.json")])
        self.assertEqual(code, 1)


class TestCli(unittest.TestCase):

    def test_parse_count_list(self):
        self.assertEqual(
            cli.parse_count_list(["grape=177", " reg =4"]), {"grape": 177, "reg": 4}
        )
        for bad in (["grape"], ["grape=lots"], ["grape=-1"]):
            with self.assertRaises(ValueError):
                cli.parse_count_list(bad)

    def test_list_machines(self):
        code, output = run_quietly(cli.main, ["--list-machines"])
        self.assertEqual(code, 0)
        self.assertIn("my-juggler-5", output)
        self.assertIn("sample-at", output)

    def test_full_estimate(self):
        code, output = run_quietly(
            cli.main,
            [
                "--machine", "my-juggler-5",
                "--games", "1000",
                "--count", "grape=177",
                "--count", "reg=4",
                "--table", "--details", "--closest", "--verbose",
            ],
        )
        self.assertEqual(code, 0)
        self.assertIn("Setting estimate:", output)
        self.assertIn("Log-likelihood breakdown:", output)
        self.assertIn("Log-likelihood per setting:", output)
        self.assertIn("Nearest setting per element:", output)

    def test_build_session_matches_core(self):
        catalog = MachineCatalog.from_file()
        session = cli.build_session(
            catalog, "my-juggler-5", 1000, None, {"reg": 4}, [], cli.RULES
        )
        expected = calculate_estimations(
            catalog.get_machine_by_id("my-juggler-5"), 1000, 1000, {"reg": 4}
        )
        self.assertEqual(session.estimate(), expected)

    def test_unknown_machine_or_element(self):
        with self.assertRaises(ValueError):
            run_quietly(cli.main, ["--machine", "nope"])
        with self.assertRaises(ValueError):
            run_quietly(cli.main, ["--machine", "my-juggler-5", "--count", "bell=1"])

    def test_validate_flag(self):
        code, _ = run_quietly(cli.main, ["--validate"])
        self.assertEqual(code, 0)

    def test_machine_required(self):
        code, output = run_quietly(cli.main, [])
        self.assertEqual(code, 1)
        self.assertIn("--machine is required", output)


if __name__ == "__main__":
    unittest.main()
