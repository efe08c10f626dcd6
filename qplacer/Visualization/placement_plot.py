from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
import matplotlib.pyplot as plt

from qplacer.placement.model import ConnectivityGraph, Coordinate


def plot_placement(
    graph: ConnectivityGraph,
    floating_cells: Sequence[Coordinate],
    output_path: Union[str, Path],
    title: Optional[str] = None,
    figsize: tuple = (10, 8),
    max_edges: int = 20000,
) -> Optional[Path]:
    """Draw static cells (squares), floating cells (circles) and their edges.

    Args:
        graph: solved problem
        floating_cells: solved floating coordinates
        output_path: PNG path to write
        title: plot title (auto-generated if None)
        figsize: figure size
        max_edges: edges beyond this count are not drawn
    """
    if graph.num_cells == 0:
        print("[WARNING] Cannot plot placement: no cells")
        return None

    cells = list(graph.static_cells) + list(floating_cells)
    xy = np.array([(c.x, c.y) for c in cells], dtype=float)

    fig, ax = plt.subplots(figsize=figsize)

    drawn = 0
    for e in graph.edges:
        if drawn >= max_edges:
            break
        if e.is_self_loop:
            continue
        a, b = xy[e.node_a], xy[e.node_b]
        ax.plot([a[0], b[0]], [a[1], b[1]], color="lightgray", linewidth=0.5, zorder=1)
        drawn += 1

    ns = graph.num_static
    if ns:
        ax.scatter(xy[:ns, 0], xy[:ns, 1], marker="s", s=40, c="tab:red", label="static", zorder=3)
    if len(floating_cells):
        ax.scatter(xy[ns:, 0], xy[ns:, 1], marker="o", s=20, c="tab:blue", label="floating", zorder=2)

    ax.set_xlabel("x")
    ax.set_ylabel("y")
    if title is None:
        title = f"Quadratic Placement ({graph.num_static} static, {graph.num_floating} floating)"
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.legend(loc="upper right")
    ax.set_aspect("equal", adjustable="datalim")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path


def plot_edge_length_histogram(
    lengths: np.ndarray,
    design_name: str,
    output_path: Union[str, Path],
    bins: int = 50,
) -> Optional[Path]:
    """
    Save a histogram of per-edge Manhattan lengths with a stats box:

        build/<design_name>/<design_name>_edge_length.png
    """
    hp = np.asarray(lengths, dtype=float)
    hp = hp[hp > 0.0]
    if hp.size == 0:
        print("[WARNING] Edge length histogram: no non-zero edges to plot, skipping.")
        return None

    fig, ax = plt.subplots(figsize=(10, 5))
    counts, bin_edges, patches = ax.hist(hp, bins=bins)

    cmap = plt.get_cmap("viridis")
    n_patches = max(len(patches) - 1, 1)
    for i, p in enumerate(patches):
        p.set_facecolor(cmap(i / n_patches))

    ax.set_xlabel("Edge Manhattan length")
    ax.set_ylabel("Number of Edges")
    ax.set_title(f"Edge Length Distribution - {design_name}")

    stats_text = (
        f"Edges: {hp.size:,}\n"
        f"Mean: {hp.mean():.2f}\n"
        f"Median: {np.median(hp):.2f}\n"
        f"Min: {hp.min():.0f}\n"
        f"Max: {hp.max():.0f}\n"
        f"Total: {hp.sum():,.0f}"
    )
    ax.text(
        0.98,
        0.98,
        stats_text,
        transform=ax.transAxes,
        va="top",
        ha="right",
        fontsize=9,
        bbox=dict(boxstyle="round", facecolor="wheat", alpha=0.8),
    )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path
