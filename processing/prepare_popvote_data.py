#!/usr/bin/env python3
"""
prepare_popvote_data.py - Popular Vote Reshaping

Turns the long popular vote table (one row per year and party) into a wide
table with one column per party, then labels each election's winner.

Input:
    - popular vote records: year, party, candidate, pv2p

Output:
    - wide table: year, democrat, republican, winner
"""

from typing import List

import numpy as np
import pandas as pd
from loguru import logger


def select_election(records: pd.DataFrame, year: int) -> pd.DataFrame:
    """Subset the popular vote records to a single election year."""
    subset = records.loc[records["year"] == year, ["party", "candidate", "pv2p"]]
    if subset.empty:
        logger.warning(f"  ⚠️ No popular vote records for {year}")
    return subset.reset_index(drop=True)


def pivot_to_wide(records: pd.DataFrame) -> pd.DataFrame:
    """Pivot popular vote records to one row per year and one column per party.

    A party with no record in a given year leaves a missing value in that
    year's row rather than raising.
    """
    logger.info("🔄 Pivoting popular vote to wide format...")

    wide = records.pivot(index="year", columns="party", values="pv2p").reset_index()
    wide.columns.name = None

    parties = [col for col in wide.columns if col != "year"]
    logger.info(f"  📊 {len(wide)} elections, party columns: {parties}")

    missing = wide[parties].isna().sum()
    for party, count in missing[missing > 0].items():
        logger.warning(f"  ⚠️ {count} election(s) have no {party} vote share")

    return wide


def label_winner(wide: pd.DataFrame) -> pd.DataFrame:
    """Add a ``winner`` column: "D" if democrat > republican, otherwise "R".

    Ties and missing shares resolve to "R".
    """
    wide = wide.copy()
    wide["winner"] = np.where(wide["democrat"] > wide["republican"], "D", "R")
    return wide


def label_state_winner(state_rows: pd.DataFrame) -> pd.DataFrame:
    """Label each state-year with the party that carried it ("republican" or "democrat")."""
    state_rows = state_rows.copy()
    state_rows["winner"] = np.where(
        state_rows["R_pv2p"] > state_rows["D_pv2p"], "republican", "democrat"
    )
    return state_rows


def summarize_by_winner(rows: pd.DataFrame) -> pd.DataFrame:
    """Count races won per winner category."""
    summary = rows.groupby("winner").size().reset_index(name="races")
    logger.info(
        "🏆 Races won: "
        + ", ".join(f"{row.winner}={row.races}" for row in summary.itertuples(index=False))
    )
    return summary


def check_two_party_totals(wide: pd.DataFrame, tolerance: float = 0.5) -> List[int]:
    """Return years whose democrat and republican shares do not sum to ~100."""
    totals = wide["democrat"] + wide["republican"]
    off = wide.loc[(totals - 100).abs() > tolerance, "year"].astype(int).tolist()

    if off:
        logger.warning(f"  ⚠️ Two-party shares not summing to 100 (±{tolerance}) in: {off}")
    else:
        logger.debug(f"  ✓ Two-party shares sum to 100 (±{tolerance}) in every year")
    return off
