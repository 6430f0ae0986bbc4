from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .board import Coord, Direction
from .colors import Color

PLAYER_ID = "player"
EntityId = Union[str, int]


@dataclass(frozen=True)
class Box:
    id: int
    color: Color
    position: Coord


@dataclass(frozen=True)
class Player:
    position: Coord
    facing: Optional[Direction] = None  # presentation only


class EntityState:
    """Mutable positions of the player and every box.

    Relocation through move_entity() is unconditional; legality is decided by
    the movement resolver before it calls in here.
    """

    def __init__(self, player: Player, boxes: Iterable[Box] = ()) -> None:
        self._player = player
        self._boxes: Dict[int, Box] = {}
        self._box_at: Dict[Coord, int] = {}
        for box in boxes:
            if box.id in self._boxes:
                raise ValueError(f"duplicate box id {box.id}")
            if box.position in self._box_at or box.position == player.position:
                raise ValueError(f"two entities placed at {box.position}")
            self._boxes[box.id] = box
            self._box_at[box.position] = box.id

    @property
    def player(self) -> Player:
        return self._player

    def player_position(self) -> Coord:
        return self._player.position

    def boxes(self) -> List[Box]:
        return [self._boxes[i] for i in sorted(self._boxes)]

    def box(self, box_id: int) -> Box:
        return self._boxes[box_id]

    def box_at(self, position: Coord) -> Optional[Box]:
        box_id = self._box_at.get(position)
        return None if box_id is None else self._boxes[box_id]

    def occupied(self, position: Coord) -> bool:
        return position == self._player.position or position in self._box_at

    def move_entity(self, identity: EntityId, new_position: Coord) -> None:
        if identity == PLAYER_ID:
            self._player = replace(self._player, position=new_position)
            return
        box = self._boxes[identity]  # KeyError for unknown ids
        if self._box_at.get(box.position) == box.id:
            del self._box_at[box.position]
        self._boxes[box.id] = replace(box, position=new_position)
        self._box_at[new_position] = box.id

    def set_facing(self, direction: Direction) -> None:
        self._player = replace(self._player, facing=direction)

    def snapshot(self) -> Tuple[Coord, Tuple[Tuple[int, Coord], ...]]:
        """Hashable view of every position, for equality checks."""
        return self._player.position, tuple((b.id, b.position) for b in self.boxes())

    def copy(self) -> "EntityState":
        return EntityState(self._player, self.boxes())

    def box_colors_by_position(self) -> Dict[Coord, Color]:
        return {b.position: b.color for b in self._boxes.values()}
