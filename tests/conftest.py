"""Shared fixtures: small synthetic vote tables, state boxes and a config."""

import sys

import geopandas as gpd
import matplotlib
import pandas as pd
import pytest
import yaml
from loguru import logger
from shapely.geometry import MultiPolygon, box

from ops.config_loader import Config

matplotlib.use("Agg")


@pytest.fixture(autouse=True)
def reset_logger():
    """CLI tests swap loguru sinks; restore a plain stderr sink afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="INFO")


@pytest.fixture
def popvote_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "year": [2004, 2004, 2012, 2012, 2016, 2016, 2020, 2020],
            "party": ["democrat", "republican"] * 4,
            "candidate": [
                "Kerry, John", "Bush, George W.",
                "Obama, Barack H.", "Romney, Mitt",
                "Clinton, Hillary", "Trump, Donald J.",
                "Biden, Joseph R.", "Trump, Donald J.",
            ],
            "pv2p": [48.73, 51.27, 51.96, 48.04, 51.11, 48.89, 52.27, 47.73],
        }
    )


@pytest.fixture
def state_vote_df() -> pd.DataFrame:
    """Three states over two cycles; lag1 holds the previous cycle."""
    return pd.DataFrame(
        {
            "year": [2016, 2016, 2016, 2020, 2020, 2020],
            "state": ["Alpha", "Beta", "Gamma", "Alpha", "Beta", "Gamma"],
            "R_pv2p": [50.0, 44.0, 53.0, 52.0, 40.0, 55.0],
            "D_pv2p": [50.0, 56.0, 47.0, 48.0, 60.0, 45.0],
            "R_pv2p_lag1": [48.0, 45.0, 51.0, 50.0, 44.0, 53.0],
            "D_pv2p_lag1": [52.0, 55.0, 49.0, 50.0, 56.0, 47.0],
        }
    )


@pytest.fixture
def electoral_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "state": ["Alpha", "Beta", "Gamma", "Alpha", "Beta", "Gamma"],
            "year": [2020, 2020, 2020, 2024, 2024, 2024],
            "electors": [11, 19, 14, 10, 20, 15],
        }
    )


@pytest.fixture
def states_gdf() -> gpd.GeoDataFrame:
    """Boundary file rows: Gamma has two parts; NullRegion has no vote data."""
    return gpd.GeoDataFrame(
        {
            "name": ["Alpha", "Beta", "Gamma", "NullRegion"],
            "geometry": [
                box(0, 0, 1, 1),
                box(1, 0, 2, 1),
                MultiPolygon([box(2, 0, 3, 1), box(3.2, 0, 3.6, 0.4)]),
                box(0, 1, 1, 2),
            ],
        },
        crs="EPSG:4326",
    )


@pytest.fixture
def data_files(tmp_path, popvote_df, state_vote_df, electoral_df, states_gdf):
    """Write the fixture tables to disk the way the input files are laid out."""
    data_dir = tmp_path / "data"
    (data_dir / "geospatial").mkdir(parents=True)

    popvote_df.to_csv(data_dir / "popvote.csv", index=False)
    state_vote_df.to_csv(data_dir / "state_wide.csv", index=False)
    electoral_df.to_csv(data_dir / "ec.csv", index=False)
    states_gdf.to_file(data_dir / "geospatial" / "states.geojson", driver="GeoJSON")
    return data_dir


@pytest.fixture
def config_path(tmp_path, data_files):
    config_data = {
        "project_name": "Test Popular Vote Analysis",
        "input_files": {
            "popvote_csv": "data/popvote.csv",
            "state_vote_shares_csv": "data/state_wide.csv",
            "electoral_college_csv": "data/ec.csv",
            "states_geojson": "data/geospatial/states.geojson",
        },
        "directories": {"maps": "maps"},
        "visualization": {"map_dpi": 40},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config_data))
    return path


@pytest.fixture
def config(config_path, tmp_path) -> Config:
    return Config(config_path, project_root_override=tmp_path)
