"""
Tabular views of machines and estimation results.

Frames are plain pandas DataFrames so they can be printed, filtered or
exported by the caller.
"""

from typing import Iterable, List

import pandas as pd

from slot_mechanics.machine import MachineData
from setting_estimation.estimator import SettingEstimation
from setting_estimation.likelihood import SettingLikelihood

BREAKDOWN_COLUMNS = [
    "setting",
    "element_id",
    "trials",
    "count",
    "denominator",
    "log_likelihood",
]


def probability_table(machine: MachineData) -> pd.DataFrame:
    """Denominators with one row per element and one column per setting."""
    rows = []
    for element in machine.elements:
        row = {
            setting: element.denominator_for(setting)
            for setting in machine.settings
        }
        rows.append(row)

    df = pd.DataFrame(
        rows,
        index=pd.Index(machine.element_ids, name="element_id"),
        columns=list(machine.settings),
        dtype=float,
    )
    df.columns.name = "setting"
    return df


def estimations_frame(results: Iterable[SettingEstimation]) -> pd.DataFrame:
    rows = [{"setting": r.setting, "percentage": r.percentage} for r in results]
    return pd.DataFrame(rows, columns=["setting", "percentage"])


def breakdown_frame(likelihoods: List[SettingLikelihood]) -> pd.DataFrame:
    """One row per (setting, contributing element)."""
    rows = []
    for item in likelihoods:
        for detail in item.details:
            rows.append(
                {
                    "setting": item.setting,
                    "element_id": detail.element_id,
                    "trials": detail.trials,
                    "count": detail.count,
                    "denominator": detail.denominator,
                    "log_likelihood": detail.log_likelihood,
                }
            )
    return pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)


def totals_by_setting(breakdown: pd.DataFrame) -> pd.Series:
    """Summed log-likelihood per setting from a breakdown frame."""
    if breakdown.empty:
        return pd.Series(dtype=float, name="log_likelihood")
    return breakdown.groupby("setting")["log_likelihood"].sum()
