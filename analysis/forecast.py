"""
Simplified electoral cycle forecast.

Projects each state's two-party vote share as a weighted average of the two
most recent presidential elections:

    vote_2024 = 3/4 * vote_2020 + 1/4 * vote_2016

then assigns the state's electors to the projected winner.
"""

from typing import Sequence

import numpy as np
import pandas as pd
from loguru import logger

from processing.data_utils import add_region_key, find_unmatched_keys, log_dropped_keys

DEFAULT_WEIGHTS = (0.75, 0.25)


def forecast_state_vote_shares(
    state_rows: pd.DataFrame,
    base_year: int = 2020,
    target_year: int = 2024,
    weights: Sequence[float] = DEFAULT_WEIGHTS,
) -> pd.DataFrame:
    """
    Project target-year two-party vote shares for every state in the base year.

    Args:
        state_rows: State vote share table (year, state, R_pv2p, D_pv2p, *_lag1)
        base_year: Most recent election; its ``*_lag1`` columns hold the cycle before
        target_year: Election being projected, used to name output columns
        weights: (base year weight, prior cycle weight)

    Returns:
        One row per state: state, region, R_pv2p_<target>, D_pv2p_<target>,
        pv2p_<target>_margin, winner ("R" if R > D else "D") and year.
    """
    w_current, w_prior = weights
    logger.info(
        f"🔮 Forecasting {target_year}: {w_current:g} x {base_year} + {w_prior:g} x previous cycle"
    )

    base = state_rows.loc[state_rows["year"] == base_year]
    if base.empty:
        logger.warning(f"  ⚠️ No state rows for base year {base_year}; forecast is empty")

    duplicated = base["state"].duplicated()
    if duplicated.any():
        logger.warning(
            f"  ⚠️ {duplicated.sum()} duplicate state rows in {base_year}, keeping first: "
            f"{base.loc[duplicated, 'state'].tolist()}"
        )
        base = base.loc[~duplicated]

    share_cols = ["R_pv2p", "D_pv2p", "R_pv2p_lag1", "D_pv2p_lag1"]
    incomplete = base[share_cols].isna().any(axis=1)
    if incomplete.any():
        logger.warning(
            f"  ⚠️ {incomplete.sum()} states lack {base_year} or prior-cycle shares, "
            f"excluded from forecast: {base.loc[incomplete, 'state'].tolist()}"
        )
        base = base.loc[~incomplete]

    r_col = f"R_pv2p_{target_year}"
    d_col = f"D_pv2p_{target_year}"
    margin_col = f"pv2p_{target_year}_margin"

    forecast = pd.DataFrame(
        {
            "state": base["state"].values,
            r_col: (w_current * base["R_pv2p"] + w_prior * base["R_pv2p_lag1"]).values,
            d_col: (w_current * base["D_pv2p"] + w_prior * base["D_pv2p_lag1"]).values,
        }
    )
    forecast[margin_col] = forecast[r_col] - forecast[d_col]
    forecast["winner"] = np.where(forecast[r_col] > forecast[d_col], "R", "D")
    forecast = add_region_key(forecast)
    forecast["year"] = target_year

    forecast = forecast.sort_values("state").reset_index(drop=True)
    logger.info(
        f"  ✅ Forecast {len(forecast)} states: "
        f"{(forecast['winner'] == 'R').sum()} R, {(forecast['winner'] == 'D').sum()} D"
    )
    return forecast


def attach_electors(forecast_rows: pd.DataFrame, allocations: pd.DataFrame) -> pd.DataFrame:
    """Join forecast rows to electoral allocations on (state, year).

    States without an allocation row are dropped and logged.
    """
    unmatched = find_unmatched_keys(forecast_rows, allocations, ["state", "year"])
    log_dropped_keys(unmatched, "forecast states without an electoral allocation")

    return forecast_rows.merge(
        allocations[["state", "year", "electors"]], on=["state", "year"], how="inner"
    )


def tally_electoral_votes(forecast_rows: pd.DataFrame, allocations: pd.DataFrame) -> pd.DataFrame:
    """Sum electoral votes per projected winner.

    Returns:
        DataFrame with ``winner`` and ``electoral_votes`` columns
    """
    logger.info("🗳️ Tallying electoral college votes...")
    with_electors = attach_electors(forecast_rows, allocations)

    totals = (
        with_electors.groupby("winner")["electors"]
        .sum()
        .reset_index(name="electoral_votes")
    )
    totals["electoral_votes"] = totals["electoral_votes"].astype(int)

    for row in totals.itertuples(index=False):
        logger.info(f"  🏛️ {row.winner}: {row.electoral_votes} electoral votes")
    return totals
