from __future__ import annotations

from typing import Dict, Iterable, Optional

from .board import Coord, Grid
from .colors import Color, box_color_to_target_color
from .state import Box, EntityState


def _satisfies(grid: Grid, color: Color, position: Coord) -> bool:
    return grid.target_color_at(*position) == box_color_to_target_color(color)


def rescan_coverage(grid: Grid, boxes: Iterable[Box]) -> Dict[Color, int]:
    """Counts, per color, the boxes resting on a matching target by full scan."""
    counts: Dict[Color, int] = {color: 0 for color in grid.target_counts()}
    for box in boxes:
        if _satisfies(grid, box.color, box.position):
            target = box_color_to_target_color(box.color)
            counts[target] = counts.get(target, 0) + 1
    return counts


class CoverageTracker:
    """Incrementally maintained count of covered targets per color."""

    def __init__(self, grid: Grid, counts: Optional[Dict[Color, int]] = None) -> None:
        self._grid = grid
        self._target_totals = grid.target_counts()
        self._counts: Dict[Color, int] = {color: 0 for color in self._target_totals}
        if counts:
            self._counts.update(counts)

    @classmethod
    def from_entities(cls, grid: Grid, entities: EntityState) -> "CoverageTracker":
        return cls(grid, rescan_coverage(grid, entities.boxes()))

    def on_box_moved(self, color: Color, src: Coord, dst: Coord) -> None:
        # Both checks run independently so that src == dst nets to zero.
        target = box_color_to_target_color(color)
        if _satisfies(self._grid, color, src):
            self._counts[target] = self._counts.get(target, 0) - 1
        if _satisfies(self._grid, color, dst):
            self._counts[target] = self._counts.get(target, 0) + 1
        count = self._counts.get(target, 0)
        assert 0 <= count <= self._target_totals.get(target, 0), (
            f"coverage for {target.value} out of range: {count}"
        )

    def coverage_count(self, color: Color) -> int:
        return self._counts.get(color, 0)

    def total_satisfied(self) -> int:
        return sum(self._counts.values())

    def target_total(self, color: Color) -> int:
        return self._target_totals.get(color, 0)

    def snapshot(self) -> Dict[Color, int]:
        """Counts for every color that has at least one target."""
        return {color: self._counts.get(color, 0) for color in self._target_totals}
