import pandas as pd

from analysis.run_analysis import (
    forecast_electoral_college,
    run_analysis,
    summarize_popular_vote,
)


def test_summarize_popular_vote(config):
    tables = summarize_popular_vote(config)

    assert tables["latest_election"]["party"].tolist() == ["democrat", "republican"]
    assert tables["popvote_wide"]["winner"].tolist() == ["R", "D", "D", "D"]
    summary = tables["race_summary"]
    assert dict(zip(summary["winner"], summary["races"])) == {"D": 3, "R": 1}


def test_forecast_electoral_college(config):
    tables = forecast_electoral_college(config)

    totals = tables["electoral_votes"]
    assert dict(zip(totals["winner"], totals["electoral_votes"])) == {"R": 25, "D": 20}
    assert len(tables["forecast"]) == 3


def test_forecast_electoral_college_follows_config(config):
    config.set("forecast.base_year", 2016)
    config.set("forecast.target_year", 2020)

    tables = forecast_electoral_college(config)

    assert "R_pv2p_2020" in tables["forecast"].columns
    totals = tables["electoral_votes"]
    # 2016-based projection: Alpha D (49.5 vs 50.5), Beta D, Gamma R
    assert dict(zip(totals["winner"], totals["electoral_votes"])) == {"D": 30, "R": 14}


def test_run_analysis_without_rendering(config):
    result = run_analysis(config, render=False)

    assert result.charts == {}
    assert not (config.maps_dir / "popvote_trend.png").exists()
    assert result.forecast["winner"].tolist() == ["R", "D", "R"]


def test_run_analysis_is_idempotent(config):
    first = run_analysis(config, render=False)
    second = run_analysis(config, render=False)

    for name in ["popvote_wide", "race_summary", "forecast", "electoral_votes"]:
        pd.testing.assert_frame_equal(getattr(first, name), getattr(second, name))


def test_run_analysis_renders_charts(config):
    result = run_analysis(config, render=True)

    assert set(result.charts) == {
        "popvote_trend",
        "state_winners",
        "state_winners_grid",
        "forecast_margin",
    }
    for path in result.charts.values():
        assert path.exists()
        assert path.stat().st_size > 0
    assert result.charts["forecast_margin"].name == "forecast_margin_2024.png"
    assert result.charts["state_winners_grid"].name == "state_winners_1980_2020.png"
