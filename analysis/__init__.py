"""
Analysis package for the Popular Vote Forecast Pipeline

Forecasting, chart rendering and the end-to-end analysis run.
"""

from .forecast import forecast_state_vote_shares, tally_electoral_votes
from .run_analysis import AnalysisResult, run_analysis

__all__ = [
    "forecast_state_vote_shares",
    "tally_electoral_votes",
    "AnalysisResult",
    "run_analysis",
]
