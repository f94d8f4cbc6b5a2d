# coordinates.py
"""
Plot geometry for the criteria matrix.

A row becomes a point by subtracting paired criteria:
    x = value[x_positive] - value[x_negative]
    y = value[y_positive] - value[y_negative]

Rows with "NA" (or a missing cell) on any of the four criteria cannot be
placed and are returned separately. The display domain is symmetric about
zero and padded by 40% of the largest absolute coordinate, at least 1 unit.

Everything here is pure and works on snapshot dicts, so it is safe to call
on every render.
"""

import math
import re
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from models import NA

DEFAULT_DOMAIN = (-10, 10)
PADDING_FACTOR = 0.4
MIN_PADDING = 1

_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class AxisAssignment:
    x_positive: str
    x_negative: str
    y_positive: str
    y_negative: str

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> "AxisAssignment":
        """Accepts either the camelCase keys the client stores or snake_case."""
        def pick(camel, snake):
            return data.get(camel, data.get(snake, ""))

        return cls(
            x_positive=pick("xPositive", "x_positive"),
            x_negative=pick("xNegative", "x_negative"),
            y_positive=pick("yPositive", "y_positive"),
            y_negative=pick("yNegative", "y_negative"),
        )

    @property
    def columns(self):
        return (self.x_positive, self.x_negative, self.y_positive, self.y_negative)


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    name: str
    annotation: str = ""

    def to_dict(self):
        return {"x": self.x, "y": self.y, "name": self.name, "annotation": self.annotation}


@dataclass
class PlotResult:
    points: List[Point] = field(default_factory=list)
    invalid_rows: List[dict] = field(default_factory=list)
    domain: Dict[str, List[int]] = field(default_factory=dict)

    def to_dict(self):
        return {
            "points": [p.to_dict() for p in self.points],
            "invalidRows": list(self.invalid_rows),
            "domain": self.domain,
        }


def cell(row: Mapping, column: str) -> str:
    """Cell value of a snapshot row, "NA" when the column has no cell."""
    value = (row.get("attributes") or {}).get(column)
    return NA if value is None else value


def parse_lenient(text) -> float:
    """
    Leading numeric prefix of *text* as a float. 0.0 when there is none or
    when the number does not fit in a finite float.
    """
    if isinstance(text, (int, float)):
        value = float(text)
    else:
        match = _NUMERIC_PREFIX.match(text or "")
        if not match:
            return 0.0
        value = float(match.group(0))
    return value if math.isfinite(value) else 0.0


def is_plottable(row: Mapping, axes: AxisAssignment) -> bool:
    return all(cell(row, column) != NA for column in axes.columns)


def compute_points(rows: Sequence[Mapping], axes: AxisAssignment):
    """Split rows into plotted points and rows that cannot be placed."""
    points, invalid = [], []
    for row in rows:
        if not is_plottable(row, axes):
            invalid.append(row)
            continue
        x = parse_lenient(cell(row, axes.x_positive)) - parse_lenient(cell(row, axes.x_negative))
        y = parse_lenient(cell(row, axes.y_positive)) - parse_lenient(cell(row, axes.y_negative))
        if not (math.isfinite(x) and math.isfinite(y)):
            # difference of two huge values overflowed
            invalid.append(row)
            continue
        points.append(Point(x=x, y=y, name=row.get("name", ""), annotation=row.get("annotation") or ""))
    return points, invalid


def _symmetric_range(extent):
    pad = max(MIN_PADDING, extent * PADDING_FACTOR)
    bound = min(extent + pad, sys.float_info.max)
    return [math.floor(-bound), math.ceil(bound)]


def compute_domain(points: Sequence[Point]) -> Dict[str, List[int]]:
    if not points:
        return {"x": list(DEFAULT_DOMAIN), "y": list(DEFAULT_DOMAIN)}
    max_x = max(abs(p.x) for p in points)
    max_y = max(abs(p.y) for p in points)
    return {"x": _symmetric_range(max_x), "y": _symmetric_range(max_y)}


def project(rows: Sequence[Mapping], axes: AxisAssignment) -> PlotResult:
    points, invalid = compute_points(rows, axes)
    return PlotResult(points=points, invalid_rows=invalid, domain=compute_domain(points))
