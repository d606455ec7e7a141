"""
Processing package for the Popular Vote Forecast Pipeline

This package contains the loading, reshaping and geography utilities used by
the analysis steps.
"""

__version__ = "0.1.0"

# Import key utilities for easy access
from .data_utils import (
    MissingColumnsError,
    find_unmatched_keys,
    load_electoral_allocations,
    load_popvote,
    load_state_vote_shares,
    validate_required_columns,
)
from .geography import join_geography, load_state_polygons, polygon_points
from .prepare_popvote_data import (
    check_two_party_totals,
    label_state_winner,
    label_winner,
    pivot_to_wide,
    select_election,
    summarize_by_winner,
)

__all__ = [
    "MissingColumnsError",
    "validate_required_columns",
    "find_unmatched_keys",
    "load_popvote",
    "load_state_vote_shares",
    "load_electoral_allocations",
    "load_state_polygons",
    "polygon_points",
    "join_geography",
    "select_election",
    "pivot_to_wide",
    "label_winner",
    "label_state_winner",
    "summarize_by_winner",
    "check_two_party_totals",
]
