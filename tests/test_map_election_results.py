import geopandas as gpd
import pytest

from analysis.forecast import forecast_state_vote_shares
from analysis.map_election_results import (
    _figure_size,
    margin_cmap,
    margin_map,
    party_colors,
    popvote_trend_chart,
    winner_map,
    winner_map_grid,
)
from processing.geography import join_geography
from processing.prepare_popvote_data import label_state_winner


@pytest.fixture
def polygons(states_gdf):
    polygons = states_gdf.rename(columns={"name": "region"})
    polygons["region"] = polygons["region"].str.lower()
    polygons = polygons.explode(index_parts=False).reset_index(drop=True)
    polygons["group"] = range(1, len(polygons) + 1)
    return polygons


@pytest.fixture
def state_rows(state_vote_df):
    return label_state_winner(state_vote_df.assign(region=state_vote_df["state"].str.lower()))


def test_party_colors_cover_both_label_styles(config):
    colors = party_colors(config)

    assert colors["democrat"] == colors["D"] == "#104E8B"
    assert colors["republican"] == colors["R"] == "#FF3030"


def test_margin_cmap_is_white_at_zero(config):
    cmap = margin_cmap(config)

    assert cmap(0.5)[:3] == pytest.approx((1.0, 1.0, 1.0), abs=0.01)


def test_figure_size_follows_aspect_ratio():
    width, height = _figure_size([0, 0, 4, 2], max_width=14)

    assert width / height == pytest.approx(2.0)
    assert width <= 14


def test_figure_size_degenerate_bounds():
    assert _figure_size([1, 1, 1, 1], max_width=10) == (10, 6.0)


def test_popvote_trend_chart(config, popvote_df, tmp_path):
    path = popvote_trend_chart(popvote_df, tmp_path / "trend.png", config)

    assert path.exists()


def test_winner_map_with_unmatched_polygon(config, polygons, state_rows, tmp_path):
    joined = join_geography(state_rows.loc[state_rows["year"] == 2020], polygons)

    path = winner_map(joined, tmp_path / "winners.png", config, title="2020")

    assert path.exists()


def test_winner_map_grid_one_panel_per_year(config, polygons, state_rows, tmp_path):
    joined = join_geography(state_rows, polygons)

    path = winner_map_grid(joined, tmp_path / "grid.png", config)

    assert path.exists()


def test_winner_map_grid_without_years(config, polygons, tmp_path):
    empty = gpd.GeoDataFrame(polygons.assign(year=float("nan"), winner=None), crs=polygons.crs)

    with pytest.raises(ValueError, match="No election years"):
        winner_map_grid(empty, tmp_path / "grid.png", config)


def test_margin_map(config, polygons, state_vote_df, tmp_path):
    forecast = forecast_state_vote_shares(state_vote_df)
    joined = join_geography(forecast, polygons)

    path = margin_map(joined, "pv2p_2024_margin", tmp_path / "nested" / "margin.png", config)

    assert path.exists()
