#!/usr/bin/env python3
"""
data_utils.py - Shared Data Loading Utilities

Loaders for the three input tables plus the column and join-key checks
shared by the reshaping, mapping and forecasting steps.
"""

from pathlib import Path
from typing import List, Sequence, Union

import pandas as pd
from loguru import logger

POPVOTE_COLUMNS = ["year", "party", "candidate", "pv2p"]
STATE_VOTE_COLUMNS = ["year", "state", "R_pv2p", "D_pv2p", "R_pv2p_lag1", "D_pv2p_lag1"]
ELECTORAL_COLUMNS = ["state", "year", "electors"]


class MissingColumnsError(ValueError):
    """Raised when an input table lacks columns the pipeline depends on."""

    def __init__(self, table: str, missing: List[str], available: List[str]):
        self.table = table
        self.missing = missing
        self.available = available
        super().__init__(f"{table} is missing required columns: {missing}")


def validate_required_columns(df: pd.DataFrame, required: Sequence[str], table: str) -> None:
    """Validate that required columns exist in DataFrame.

    Args:
        df: DataFrame to validate
        required: Column names that must be present
        table: Table description for logging

    Raises:
        MissingColumnsError: If any required column is absent
    """
    missing = [col for col in required if col not in df.columns]
    if missing:
        logger.error(f"❌ {table}: missing required columns: {missing}")
        logger.info(f"Available columns: {list(df.columns)}")
        raise MissingColumnsError(table, missing, list(df.columns))


def coerce_numeric(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Convert columns to numbers, raising on values that cannot be parsed."""
    for col in columns:
        df[col] = pd.to_numeric(df[col], errors="raise")
    return df


def add_region_key(df: pd.DataFrame, state_col: str = "state") -> pd.DataFrame:
    """Add the lower-cased ``region`` join key used by the state polygons."""
    df = df.copy()
    df["region"] = df[state_col].astype(str).str.strip().str.lower()
    return df


def find_unmatched_keys(
    left: pd.DataFrame, right: pd.DataFrame, on: Union[str, List[str]]
) -> pd.DataFrame:
    """Return the distinct key rows of ``left`` that have no partner in ``right``.

    Args:
        left: Table whose rows may be dropped by a join
        right: Table being joined against
        on: Join key column(s)

    Returns:
        DataFrame of unmatched keys (empty when every key matches)
    """
    keys = [on] if isinstance(on, str) else list(on)
    left_keys = left[keys].drop_duplicates()
    right_keys = right[keys].drop_duplicates()
    merged = left_keys.merge(right_keys, on=keys, how="left", indicator=True)
    unmatched = merged.loc[merged["_merge"] == "left_only", keys]
    return unmatched.reset_index(drop=True)


def log_dropped_keys(unmatched: pd.DataFrame, description: str, limit: int = 5) -> None:
    """Log join keys that will be dropped, with a count and a short sample."""
    if unmatched.empty:
        logger.debug(f"  ✓ All {description} matched")
        return

    sample = [
        "/".join(str(v) for v in row) for row in unmatched.head(limit).itertuples(index=False)
    ]
    more = f" ... +{len(unmatched) - limit} more" if len(unmatched) > limit else ""
    logger.warning(f"  ⚠️ {len(unmatched)} {description} dropped by join: {sample}{more}")


def load_popvote(path: Union[str, Path]) -> pd.DataFrame:
    """Load the national popular vote table (one row per year and party)."""
    logger.info(f"📄 Loading popular vote: {path}")
    df = pd.read_csv(path)
    validate_required_columns(df, POPVOTE_COLUMNS, "popular vote table")

    df = coerce_numeric(df, ["year", "pv2p"])
    df["year"] = df["year"].astype(int)
    df["party"] = df["party"].astype(str).str.strip().str.lower()

    logger.info(f"  ✅ Loaded {len(df)} popular vote records ({df['year'].nunique()} elections)")
    return df


def load_state_vote_shares(path: Union[str, Path]) -> pd.DataFrame:
    """Load the wide state-level two-party vote share table with lag columns."""
    logger.info(f"📄 Loading state vote shares: {path}")
    df = pd.read_csv(path)
    validate_required_columns(df, STATE_VOTE_COLUMNS, "state vote share table")

    df = coerce_numeric(df, ["year", "R_pv2p", "D_pv2p", "R_pv2p_lag1", "D_pv2p_lag1"])
    df["year"] = df["year"].astype(int)
    df = add_region_key(df)

    logger.info(f"  ✅ Loaded {len(df)} state-year rows ({df['state'].nunique()} states)")
    return df


def load_electoral_allocations(path: Union[str, Path]) -> pd.DataFrame:
    """Load electoral college allocations keyed by state and year."""
    logger.info(f"📄 Loading electoral college allocations: {path}")
    df = pd.read_csv(path)
    validate_required_columns(df, ELECTORAL_COLUMNS, "electoral college table")

    df = coerce_numeric(df, ["year", "electors"])
    df["year"] = df["year"].astype(int)
    df["electors"] = df["electors"].astype(int)

    logger.info(f"  ✅ Loaded {len(df)} electoral allocations")
    return df
