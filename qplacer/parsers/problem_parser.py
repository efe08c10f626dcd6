"""problem_parser
Parse a flat-text placement problem into a ConnectivityGraph.

File layout:
    line 1:              <tolerance: float>
    line 2:              <num_static> <num_floating> <num_edges>
    num_static lines:    <x> <y>
    num_edges lines:     <node_a> <node_b>      (global indices)

Public API:
- parse_problem_file(file_path: str) -> ConnectivityGraph
- parse_problem_text(text: str) -> ConnectivityGraph
"""
from __future__ import annotations

from typing import List, Tuple

from qplacer.placement.errors import MalformedProblemError
from qplacer.placement.model import ConnectivityGraph, Coordinate, Edge


class _LineReader:
    def __init__(self, lines: List[str]):
        self._lines = lines
        self._pos = 0

    @property
    def line_no(self) -> int:
        return self._pos

    def next_line(self, what: str) -> str:
        if self._pos >= len(self._lines):
            raise MalformedProblemError(f"file contains no more lines, expected {what}", self._pos + 1)
        line = self._lines[self._pos]
        self._pos += 1
        return line.strip()


def _ints(line: str, count: int, what: str, line_no: int) -> Tuple[int, ...]:
    tokens = line.split()
    if len(tokens) != count:
        raise MalformedProblemError(f"invalid {what}: expected {count} values, got {len(tokens)}", line_no)
    try:
        return tuple(int(t) for t in tokens)
    except ValueError:
        raise MalformedProblemError(f"invalid {what}: non-integer value in '{line}'", line_no) from None


def parse_problem_text(text: str) -> ConnectivityGraph:
    reader = _LineReader(text.splitlines())

    # Tolerance
    raw = reader.next_line("solve tolerance")
    try:
        tolerance = float(raw)
    except ValueError:
        raise MalformedProblemError(f"invalid solve tolerance '{raw}'", reader.line_no) from None
    if not tolerance > 0:
        raise MalformedProblemError(f"solve tolerance must be > 0, got {raw}", reader.line_no)

    # Chip info
    num_static, num_floating, num_edges = _ints(
        reader.next_line("cell counts"), 3, "cell counts", reader.line_no
    )
    if min(num_static, num_floating, num_edges) < 0:
        raise MalformedProblemError("cell and edge counts must be >= 0", reader.line_no)
    total = num_static + num_floating

    # Static cells
    static_cells: List[Coordinate] = []
    for _ in range(num_static):
        x, y = _ints(reader.next_line("static cell"), 2, "static cell definition", reader.line_no)
        static_cells.append(Coordinate(x, y))

    # Edges
    edges: List[Edge] = []
    for _ in range(num_edges):
        a, b = _ints(reader.next_line("edge"), 2, "edge definition", reader.line_no)
        for node in (a, b):
            if node < 0 or node >= total:
                raise MalformedProblemError(
                    f"edge node {node} out of range [0, {total})", reader.line_no
                )
        edges.append(Edge(a, b))

    return ConnectivityGraph(
        convergence_tolerance=tolerance,
        num_floating=num_floating,
        static_cells=tuple(static_cells),
        edges=tuple(edges),
    )


def parse_problem_file(file_path: str) -> ConnectivityGraph:
    """Read and parse a problem file. I/O errors propagate as OSError."""
    with open(file_path, "r", encoding="utf-8") as f:
        return parse_problem_text(f.read())


# Test Usage
if __name__ == "__main__":
    graph = parse_problem_file("tests/fixtures/two_anchor.txt")
    print(f"{graph.num_static} static, {graph.num_floating} floating, {len(graph.edges)} edges")
