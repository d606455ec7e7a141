"""
Popular vote charts and state choropleth maps.

All renderers take already-joined tables and write a PNG; none of them
alter their input.
"""

import math
import pathlib
from typing import Dict, Optional, Sequence, Tuple, Union

import geopandas as gpd  # type: ignore
import matplotlib as mpl
import matplotlib.colors as mcolors
import matplotlib.pyplot as plt
import pandas as pd  # type: ignore
import seaborn as sns
from loguru import logger
from matplotlib.patches import Patch

from ops.config_loader import Config

MISSING_KWDS = {
    "color": "#f8f8f8",
    "edgecolor": "#cccccc",
    "hatch": "///",
    "linewidth": 0.25,
}


def party_colors(config: Config) -> Dict[str, str]:
    """Fill colors keyed by every winner label the pipeline produces."""
    dem = config.get_visualization_setting("democrat_color")
    rep = config.get_visualization_setting("republican_color")
    return {"democrat": dem, "D": dem, "republican": rep, "R": rep}


def apply_custom_theme(ax: plt.Axes, title: str = "") -> None:
    """Black-and-white theme: no panel border, rotated year ticks, legend on top."""
    for side in ("top", "right"):
        ax.spines[side].set_visible(False)
    for side in ("left", "bottom"):
        ax.spines[side].set_color("black")

    ax.tick_params(axis="both", labelsize=12)
    plt.setp(ax.get_xticklabels(), rotation=45, ha="right")

    if title:
        ax.set_title(title, fontsize=15, loc="center")

    legend = ax.get_legend()
    if legend is not None:
        sns.move_legend(
            ax,
            "lower center",
            bbox_to_anchor=(0.5, 1.02),
            ncol=max(1, len(legend.get_texts())),
            frameon=False,
            fontsize=12,
            title=None,
        )


def _figure_size(bounds: Sequence[float], max_width: float) -> Tuple[float, float]:
    """Figure size matching the aspect ratio of the data bounds."""
    data_width = bounds[2] - bounds[0]
    data_height = bounds[3] - bounds[1]
    if data_width <= 0 or data_height <= 0:
        return max_width, max_width * 0.6

    aspect_ratio = data_width / data_height
    if aspect_ratio > 1:
        fig_width = min(max_width, 10 * aspect_ratio)
        fig_height = fig_width / aspect_ratio
    else:
        fig_height = min(max_width, 10 / aspect_ratio)
        fig_width = fig_height * aspect_ratio
    return fig_width, fig_height


def _save(fig: plt.Figure, fname: Union[str, pathlib.Path], dpi: int) -> pathlib.Path:
    fname = pathlib.Path(fname)
    fname.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(
        fname,
        bbox_inches="tight",
        dpi=dpi,
        facecolor="white",
        edgecolor="none",
        pad_inches=0.02,
    )
    plt.close(fig)
    logger.success(f"  🖼️ Saved: {fname}")
    return fname


def popvote_trend_chart(
    popvote: pd.DataFrame,
    fname: Union[str, pathlib.Path],
    config: Config,
    title: str = "Two-Party Presidential Popular Vote",
) -> pathlib.Path:
    """Line chart of two-party vote share over time, one line per party."""
    logger.info("📈 Rendering popular vote trend chart...")

    colors = party_colors(config)
    parties = sorted(popvote["party"].unique())
    palette = {party: colors.get(party, "#7f7f7f") for party in parties}

    with sns.axes_style("white"):
        fig, ax = plt.subplots(figsize=(10, 6))
        sns.lineplot(data=popvote, x="year", y="pv2p", hue="party", palette=palette, ax=ax)
        ax.set_xlabel("year")
        ax.set_ylabel("pv2p")
        apply_custom_theme(ax, title)

    return _save(fig, fname, config.get_visualization_setting("map_dpi"))


def tufte_map(
    gdf: gpd.GeoDataFrame,
    column: str,
    fname: Union[str, pathlib.Path],
    config: Config,
    cmap: Optional[Union[str, mcolors.Colormap]] = None,
    title: str = "",
    vmin: Optional[float] = None,
    vmax: Optional[float] = None,
    label: str = "",
    note: Optional[str] = None,
    ticks: Optional[Sequence[float]] = None,
) -> pathlib.Path:
    """
    Generates and saves a minimalist Tufte-style choropleth of a numeric column.

    Args:
        gdf: GeoDataFrame containing the data to plot.
        column: The name of the column in gdf to plot.
        fname: Filename (including path) to save the map.
        config: Configuration instance
        cmap: Colormap to use (viridis if None).
        title: Title of the map.
        vmin: Minimum value for the color scale (data minimum if None).
        vmax: Maximum value for the color scale (data maximum if None).
        label: Label for the colorbar.
        note: Annotation note to display at the bottom of the map.
        ticks: Explicit colorbar tick positions.
    """
    final_cmap = cmap if cmap is not None else "viridis"
    map_dpi = config.get_visualization_setting("map_dpi")
    figure_max_width = config.get_visualization_setting("figure_max_width")

    fig, ax = plt.subplots(figsize=_figure_size(gdf.total_bounds, figure_max_width), dpi=map_dpi)

    data_values = gdf[column].dropna()
    if vmin is None:
        vmin = float(data_values.min()) if len(data_values) else 0.0
    if vmax is None:
        vmax = float(data_values.max()) if len(data_values) else 1.0

    gdf.plot(
        column=column,
        cmap=final_cmap,
        linewidth=0.25,
        edgecolor="black",
        ax=ax,
        legend=False,
        vmin=vmin,
        vmax=vmax,
        missing_kwds=MISSING_KWDS,
    )

    ax.set_aspect("equal")
    ax.set_axis_off()

    if title:
        fig.suptitle(title, fontsize=16, fontweight="bold", x=0.02, y=0.95, ha="left", va="top")

    if vmax > vmin:
        sm = mpl.cm.ScalarMappable(norm=mcolors.Normalize(vmin=vmin, vmax=vmax), cmap=final_cmap)
        cbar_ax = fig.add_axes((0.92, 0.15, 0.02, 0.7))
        cbar = fig.colorbar(sm, cax=cbar_ax, ticks=ticks)
        cbar.ax.tick_params(labelsize=10, colors="#333333")
        cbar.outline.set_edgecolor("#666666")  # type: ignore
        cbar.outline.set_linewidth(0.5)  # type: ignore
        if label:
            cbar.set_label(label, rotation=90, labelpad=12, fontsize=11, color="#333333")

    if note:
        fig.text(0.02, 0.02, note, ha="left", va="bottom", fontsize=9, color="#666666", style="italic")

    return _save(fig, fname, map_dpi)


def _plot_winners(gdf: gpd.GeoDataFrame, ax: plt.Axes, column: str, colors: Dict[str, str]) -> None:
    fills = gdf[column].map(colors)
    has_data = fills.notna()

    if (~has_data).any():
        gdf.loc[~has_data].plot(ax=ax, **MISSING_KWDS)
    if has_data.any():
        gdf.loc[has_data].plot(ax=ax, color=fills[has_data].tolist(), edgecolor="white", linewidth=0.3)

    ax.set_aspect("equal")
    ax.set_axis_off()


def winner_map(
    joined: gpd.GeoDataFrame,
    fname: Union[str, pathlib.Path],
    config: Config,
    column: str = "winner",
    title: str = "",
) -> pathlib.Path:
    """Categorical choropleth of the party carrying each state."""
    logger.info(f"🗺️ Rendering winner map: {title or column}")

    colors = party_colors(config)
    fig, ax = plt.subplots(
        figsize=_figure_size(joined.total_bounds, config.get_visualization_setting("figure_max_width"))
    )
    _plot_winners(joined, ax, column, colors)

    present = [w for w in joined[column].dropna().unique() if w in colors]
    handles = [Patch(facecolor=colors[w], label=w) for w in sorted(present)]
    if handles:
        ax.legend(handles=handles, loc="lower left", frameon=False, title=column)
    if title:
        fig.suptitle(title, fontsize=16, fontweight="bold")

    return _save(fig, fname, config.get_visualization_setting("map_dpi"))


def winner_map_grid(
    joined: gpd.GeoDataFrame,
    fname: Union[str, pathlib.Path],
    config: Config,
    column: str = "winner",
    title: str = "",
) -> pathlib.Path:
    """One small winner map per election year, laid out in a grid."""
    years = sorted(int(y) for y in joined["year"].dropna().unique())
    logger.info(f"🗺️ Rendering winner map grid for {len(years)} elections")
    if not years:
        raise ValueError("No election years to render")

    colors = party_colors(config)
    ncols = math.ceil(math.sqrt(len(years)))
    nrows = math.ceil(len(years) / ncols)

    fig, axes = plt.subplots(nrows, ncols, figsize=(3 * ncols, 2.4 * nrows), squeeze=False)
    flat_axes = axes.flatten()
    for ax, year in zip(flat_axes, years):
        _plot_winners(joined.loc[joined["year"] == year], ax, column, colors)
        ax.set_title(str(year), fontsize=12)
    for ax in flat_axes[len(years):]:
        ax.set_axis_off()

    handles = [Patch(facecolor=colors[w], label=w) for w in ("democrat", "republican")]
    fig.legend(handles=handles, loc="lower center", ncol=2, frameon=False)
    if title:
        fig.suptitle(title, fontsize=16)

    return _save(fig, fname, config.get_visualization_setting("map_dpi"))


def margin_cmap(config: Config) -> mcolors.Colormap:
    """Diverging colormap: Democratic color low, white at zero, Republican color high."""
    colors = party_colors(config)
    return mcolors.LinearSegmentedColormap.from_list(
        "win_margin", [colors["democrat"], "#ffffff", colors["republican"]], N=256
    )


def margin_map(
    joined: gpd.GeoDataFrame,
    column: str,
    fname: Union[str, pathlib.Path],
    config: Config,
    title: str = "",
) -> pathlib.Path:
    """Diverging choropleth of a Republican-minus-Democratic margin."""
    logger.info(f"🗺️ Rendering margin map: {column}")
    limit = float(config.get_visualization_setting("margin_limit"))

    return tufte_map(
        joined,
        column,
        fname,
        config,
        cmap=margin_cmap(config),
        title=title,
        vmin=-limit,
        vmax=limit,
        label="win margin",
        ticks=config.get_visualization_setting("margin_breaks"),
    )
