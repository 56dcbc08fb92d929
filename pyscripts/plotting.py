import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib.patches as patches

from wire import WIRES
from chamber_constants import NEAR_SIDE_MAX_RADIUS

cmap = list(plt.get_cmap("tab20").colors) + list(plt.get_cmap("tab20b").colors)+ list(plt.get_cmap("tab20c").colors)

# ----------------------------------------------------------
# 1. Plot one chamber event
# ----------------------------------------------------------

def plot_chamber_event(
    track,
    distances=None,
    wires=WIRES,
    show_cells=True
):
    """
    Plot a reconstructed chamber track in the (x, y) plane.

    Parameters
    ----------
    track : TrackDescription
        Reconstructed track: fitted line and the four corrected points.
    distances : sequence of float, optional
        Drift distance per wire; drawn as a circle around each wire.
    wires : sequence of Wire, optional
        Wire geometry. Default is the chamber wires.
    show_cells : bool, optional
        If True, outline the drift cell of each wire.

    Returns
    -------
    fig : matplotlib.figure.Figure
    ax : matplotlib.axes.Axes

    Notes
    -----
    This function does not call `plt.show()`.
    """

    fig, ax = plt.subplots(figsize=(9, 5))

    wx = np.array([w.position for w in wires])
    wy = np.array([w.offset for w in wires])
    ax.scatter(wx, wy, marker="x", s=60, c="black", label="wires", zorder=3)

    if show_cells:
        for w in wires:
            cell = patches.Rectangle(
                (w.position - 1.0, w.offset - NEAR_SIDE_MAX_RADIUS),
                2.0, 2 * NEAR_SIDE_MAX_RADIUS,
                edgecolor="orange",
                facecolor="none"
            )
            ax.add_patch(cell)

    if distances is not None:
        for w, d in zip(wires, distances):
            circle = patches.Circle((w.position, w.offset), d,
                                    edgecolor="gray", facecolor="none",
                                    linestyle=":")
            ax.add_patch(circle)

    points = np.asarray(track.points)
    ax.scatter(points[:, 0], points[:, 1], s=40, color=cmap[0], label="track points", zorder=4)

    xs = np.linspace(wx.min() - 5, wx.max() + 5, 100)
    ax.plot(xs, track.line(xs), linestyle="--", color=cmap[2],
            label=f"k={track.line.k:.4f}, dev={track.deviation:.3g}")

    ax.set_xlabel("x [mm]")
    ax.set_ylabel("y [mm]")
    ax.set_title(f"Chamber track, times {tuple(track.times)}")
    ax.grid(True)
    ax.legend(fontsize="x-small")

    plt.tight_layout()

    return fig, ax


# ----------------------------------------------------------
# 2. Track quality over a run
# ----------------------------------------------------------

def plot_deviation_hist(
    data: pd.DataFrame,
    bins: int = 50,
    by_chamber: bool = True
):
    """
    Histogram of corrected fit deviations from `reconstruct_events`.

    Returns fig, ax for testing.
    """

    fig, ax = plt.subplots(figsize=(7, 5))

    if by_chamber and "ChamberID" in data.columns:
        for idx, (cid, group) in enumerate(data.groupby("ChamberID")):
            ax.hist(group["deviation"], bins=bins, alpha=0.5,
                    color=cmap[idx % len(cmap)], label=f"chamber {cid}")
        ax.legend(fontsize="x-small")
    else:
        ax.hist(data["deviation"], bins=bins, color=cmap[0])

    ax.set_xlabel("deviation [mm^2]")
    ax.set_ylabel("tracks")
    ax.set_title("Fit deviation after systematic correction")

    return fig, ax
