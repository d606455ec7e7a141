#!/usr/bin/env python3
"""
geography.py - State Boundary Polygons

Loads state boundary polygons keyed by lower-case state name (``region``)
and joins vote tables onto them for choropleth rendering.
"""

from pathlib import Path
from typing import Union

import geopandas as gpd
import pandas as pd
from loguru import logger

from processing.data_utils import find_unmatched_keys, log_dropped_keys


def load_state_polygons(path: Union[str, Path], name_column: str = "name") -> gpd.GeoDataFrame:
    """Load state boundaries as one row per polygon part.

    Args:
        path: Any boundary file geopandas can read (GeoJSON, shapefile, ...)
        name_column: Column holding the full state name

    Returns:
        GeoDataFrame with ``region``, ``group`` and ``geometry`` columns
    """
    logger.info(f"🗺️ Loading state boundaries: {path}")
    gdf = gpd.read_file(path)

    if name_column not in gdf.columns:
        raise ValueError(
            f"Boundary file has no '{name_column}' column. Available: {list(gdf.columns)}"
        )

    if gdf.crs is None:
        gdf = gdf.set_crs("EPSG:4326")
        logger.info("  🌍 Set CRS to WGS84 (was None)")
    elif gdf.crs.to_epsg() != 4326:
        logger.info(f"  🔄 Reprojecting from {gdf.crs} to WGS84")
        gdf = gdf.to_crs("EPSG:4326")

    polygons = gdf[[name_column, "geometry"]].rename(columns={name_column: "region"})
    polygons["region"] = polygons["region"].astype(str).str.strip().str.lower()
    polygons = polygons.explode(index_parts=False).reset_index(drop=True)
    polygons["group"] = range(1, len(polygons) + 1)

    logger.info(
        f"  ✅ Loaded {polygons['region'].nunique()} regions as {len(polygons)} polygons"
    )
    return polygons[["region", "group", "geometry"]]


def polygon_points(polygons: gpd.GeoDataFrame) -> pd.DataFrame:
    """Expand polygon exteriors into a vertex table: region, long, lat, group."""
    records = []
    for row in polygons.itertuples(index=False):
        for long, lat in row.geometry.exterior.coords:
            records.append({"region": row.region, "long": long, "lat": lat, "group": row.group})
    return pd.DataFrame(records, columns=["region", "long", "lat", "group"])


def join_geography(state_rows: pd.DataFrame, polygons: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """Left join state vote rows onto polygons by ``region``.

    Every polygon is kept; polygons with no vote data carry missing state
    fields. State rows with no polygon cannot be drawn and are logged.
    """
    logger.info("🔗 Joining vote data to state boundaries...")

    unmatched_states = find_unmatched_keys(state_rows, polygons, "region")
    log_dropped_keys(unmatched_states, "state regions without boundaries")

    unmatched_polygons = find_unmatched_keys(polygons, state_rows, "region")
    if not unmatched_polygons.empty:
        logger.info(
            f"  📍 {len(unmatched_polygons)} regions have no vote data: "
            f"{unmatched_polygons['region'].head(5).tolist()}"
        )

    joined = polygons.merge(state_rows, on="region", how="left")
    logger.info(f"  ✅ Joined {len(joined)} polygon rows")
    return joined
