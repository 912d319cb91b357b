from typing import List, Mapping, Optional, Tuple
import numpy as np
from .model import Position, Race, Terrain, Unit

UNIT_MARKERS = {race.value: race for race in Race}

class ParseError(ValueError):
    """Raised when a battlefield map contains something we cannot simulate."""

    def __init__(self, character: Optional[str], row: int = 0, col: int = 0, reason: str = ""):
        self.character = character
        self.row = row
        self.col = col
        if character is not None:
            msg = f"Unknown value: {character!r} at row {row}, column {col}"
        else:
            msg = reason or "Malformed battlefield"
        super().__init__(msg)

class Grid:
    """Immutable terrain mask. True marks open floor."""

    def __init__(self, open_mask: np.ndarray):
        self._open = open_mask
        self._open.setflags(write=False)

    def width(self) -> int:
        return int(self._open.shape[1])

    def height(self) -> int:
        return int(self._open.shape[0])

    def in_bounds(self, pos: Position) -> bool:
        r, c = pos
        return 0 <= r < self.height() and 0 <= c < self.width()

    def is_open(self, pos: Position) -> bool:
        return self.in_bounds(pos) and bool(self._open[pos])

    def terrain(self, pos: Position) -> Terrain:
        return Terrain.OPEN if self.is_open(pos) else Terrain.WALL

    def neighbors(self, pos: Position) -> List[Position]:
        """In-bounds cardinal neighbours: up, left, right, down.

        This order is reading order, so "first minimum wins" scans over it
        break ties the way the battle rules require.
        """
        r, c = pos
        out: List[Position] = []
        if r > 0:
            out.append((r - 1, c))
        if c > 0:
            out.append((r, c - 1))
        if c + 1 < self.width():
            out.append((r, c + 1))
        if r + 1 < self.height():
            out.append((r + 1, c))
        return out

    def render(self, units: Mapping[Position, Unit] = None) -> str:
        """Draw the map with unit markers over the terrain."""
        units = units or {}
        lines = []
        for r in range(self.height()):
            row = []
            for c in range(self.width()):
                u = units.get((r, c))
                row.append(u.race.value if u else self.terrain((r, c)).value)
            lines.append("".join(row))
        return "\n".join(lines)

def parse_battlefield(text: str) -> Tuple[Grid, List[Tuple[Position, Race]]]:
    """Parse a map into terrain plus unit spawn points (in reading order)."""
    lines = text.splitlines()
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        raise ParseError(None, reason="Empty battlefield")

    width = len(lines[0])
    rows: List[List[bool]] = []
    spawns: List[Tuple[Position, Race]] = []
    for r, line in enumerate(lines):
        if len(line) != width:
            raise ParseError(None, row=r, reason=f"Row {r} has length {len(line)}, expected {width}")
        row = []
        for c, ch in enumerate(line):
            if ch in UNIT_MARKERS:
                spawns.append(((r, c), UNIT_MARKERS[ch]))
                row.append(True)
            elif ch == Terrain.OPEN.value:
                row.append(True)
            elif ch == Terrain.WALL.value:
                row.append(False)
            else:
                raise ParseError(ch, r, c)
        rows.append(row)

    return Grid(np.array(rows, dtype=bool)), spawns
