"""
placement_writer.py: Turn a solved placement into a DataFrame, a CSV and a .map file.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import pandas as pd

from qplacer.placement.model import ConnectivityGraph, Coordinate

PLACEMENT_COLUMNS = ["cell_index", "cell_name", "kind", "x", "y"]


def placement_to_dataframe(graph: ConnectivityGraph, floating_cells: Sequence[Coordinate]) -> pd.DataFrame:
    """One row per cell: static cells S<i> first, then floating cells F<j>."""
    if len(floating_cells) != graph.num_floating:
        raise ValueError(
            f"Expected {graph.num_floating} floating coordinates, got {len(floating_cells)}"
        )
    rows: List[Dict[str, Any]] = []
    for i, c in enumerate(graph.static_cells):
        rows.append(dict(cell_index=i, cell_name=f"S{i}", kind="static", x=c.x, y=c.y))
    for j, c in enumerate(floating_cells):
        rows.append(dict(cell_index=graph.num_static + j, cell_name=f"F{j}", kind="floating", x=c.x, y=c.y))

    df = pd.DataFrame(rows, columns=PLACEMENT_COLUMNS)
    return df.astype({"cell_index": "int64", "x": "int64", "y": "int64"})


def write_placement_csv(df: pd.DataFrame, output_csv: Union[str, Path]) -> Path:
    output_csv = Path(output_csv)
    output_csv.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_csv, index=False)
    return output_csv


def generate_map_file(
    placement_df: pd.DataFrame,
    map_file_path: Union[str, Path],
    design_name: str,
    wirelength: int,
) -> Path:
    """Write `F<j> <x> <y>` for every floating cell.

    Format:
        # design: <design_name>
        # wirelength: <total manhattan length>
        F0 12 7
        ...
    """
    map_file_path = Path(map_file_path)
    map_file_path.parent.mkdir(parents=True, exist_ok=True)
    floating = placement_df[placement_df["kind"] == "floating"]
    with open(map_file_path, "w", encoding="utf-8") as f:
        f.write(f"# design: {design_name}\n")
        f.write(f"# wirelength: {wirelength}\n")
        for row in floating.itertuples(index=False):
            f.write(f"{row.cell_name} {int(row.x)} {int(row.y)}\n")
    return map_file_path
