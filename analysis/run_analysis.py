"""
Popular Vote Analysis Pipeline

Runs the full analysis in one pass:
1. Load the popular vote, state vote share and electoral college tables
2. Pivot the popular vote to wide format and count races won per party
3. Render the popular vote trend and state winner maps
4. Forecast state vote shares with the simplified electoral cycle model
5. Render the forecast margin map and tally electoral votes per projected winner

Every intermediate table is returned on the AnalysisResult; nothing is
written back to the input data.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
from loguru import logger

from analysis.forecast import forecast_state_vote_shares, tally_electoral_votes
from analysis.map_election_results import (
    margin_map,
    popvote_trend_chart,
    winner_map,
    winner_map_grid,
)
from ops.config_loader import Config
from processing.data_utils import (
    load_electoral_allocations,
    load_popvote,
    load_state_vote_shares,
)
from processing.geography import join_geography, load_state_polygons
from processing.prepare_popvote_data import (
    check_two_party_totals,
    label_state_winner,
    label_winner,
    pivot_to_wide,
    select_election,
    summarize_by_winner,
)


@dataclass
class AnalysisResult:
    """Named intermediate tables produced by one pipeline run."""

    popvote: pd.DataFrame
    popvote_wide: pd.DataFrame
    race_summary: pd.DataFrame
    latest_election: pd.DataFrame
    state_vote_shares: pd.DataFrame
    forecast: pd.DataFrame
    electoral_votes: pd.DataFrame
    charts: Dict[str, Path] = field(default_factory=dict)


def summarize_popular_vote(config: Config) -> Dict[str, pd.DataFrame]:
    """Load the national popular vote and build the wide table and race counts."""
    popvote = load_popvote(config.get_input_path("popvote_csv"))

    latest_year = int(popvote["year"].max())
    latest = select_election(popvote, latest_year)
    logger.info(f"📋 {latest_year} election: {len(latest)} candidates")

    wide = label_winner(pivot_to_wide(popvote[["year", "party", "pv2p"]]))
    check_two_party_totals(wide, tolerance=float(config.get("analysis.two_party_tolerance")))
    race_summary = summarize_by_winner(wide)

    return {
        "popvote": popvote,
        "popvote_wide": wide,
        "race_summary": race_summary,
        "latest_election": latest,
    }


def forecast_electoral_college(
    config: Config, state_vote_shares: Optional[pd.DataFrame] = None
) -> Dict[str, pd.DataFrame]:
    """Forecast state vote shares and tally electoral votes per projected winner."""
    if state_vote_shares is None:
        state_vote_shares = load_state_vote_shares(config.get_input_path("state_vote_shares_csv"))
    allocations = load_electoral_allocations(config.get_input_path("electoral_college_csv"))

    forecast = forecast_state_vote_shares(
        state_vote_shares,
        base_year=int(config.get("forecast.base_year")),
        target_year=int(config.get("forecast.target_year")),
        weights=config.get_forecast_weights(),
    )
    electoral_votes = tally_electoral_votes(forecast, allocations)

    return {
        "state_vote_shares": state_vote_shares,
        "forecast": forecast,
        "electoral_votes": electoral_votes,
    }


def render_charts(
    config: Config,
    popvote: pd.DataFrame,
    state_vote_shares: pd.DataFrame,
    forecast: pd.DataFrame,
) -> Dict[str, Path]:
    """Render the trend chart, winner maps and forecast margin map to the maps directory."""
    maps_dir = config.get_output_dir("maps")
    polygons = load_state_polygons(
        config.get_input_path("states_geojson"), config.get_column_name("state_name")
    )

    base_year = int(config.get("forecast.base_year"))
    target_year = int(config.get("forecast.target_year"))
    start_year = int(config.get_visualization_setting("facet_start_year"))
    last_year = int(state_vote_shares["year"].max())

    charts: Dict[str, Path] = {}
    charts["popvote_trend"] = popvote_trend_chart(popvote, maps_dir / "popvote_trend.png", config)

    labelled = label_state_winner(state_vote_shares)
    charts["state_winners"] = winner_map(
        join_geography(labelled.loc[labelled["year"] == base_year], polygons),
        maps_dir / f"state_winners_{base_year}.png",
        config,
        title=f"Presidential Winner by State ({base_year})",
    )

    # Polygons without data for any year carry no year and fall out of every facet
    recent = labelled.loc[labelled["year"] >= start_year]
    charts["state_winners_grid"] = winner_map_grid(
        join_geography(recent, polygons),
        maps_dir / f"state_winners_{start_year}_{last_year}.png",
        config,
        title=f"Presidential Vote Share ({start_year}-{last_year})",
    )

    charts["forecast_margin"] = margin_map(
        join_geography(forecast, polygons),
        f"pv2p_{target_year}_margin",
        maps_dir / f"forecast_margin_{target_year}.png",
        config,
        title=f"Projected {target_year} Two-Party Margin (R - D)",
    )
    return charts


def run_analysis(config: Config, render: bool = True) -> AnalysisResult:
    """Run the complete popular vote analysis and forecast."""
    logger.info("🗳️ Popular Vote Analysis Pipeline")
    logger.info("=" * 60)
    start = time.time()

    national = summarize_popular_vote(config)
    states = forecast_electoral_college(config)

    charts: Dict[str, Path] = {}
    if render:
        charts = render_charts(
            config, national["popvote"], states["state_vote_shares"], states["forecast"]
        )
    else:
        logger.info("⏭️ Skipping chart rendering")

    logger.success(f"✅ Analysis complete in {time.time() - start:.1f}s")
    return AnalysisResult(charts=charts, **national, **states)
