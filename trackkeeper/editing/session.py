"""Edit session for a single open track.

The session moves through explicit states::

    Viewing --begin_edit--> Editing --request_exit--> Viewing
                               |  ^         (unsaved changes)
                 toggle_measure|  |cancel_discard     |
                               v  |                   v
                        MeasuringSegment      ConfirmingDiscard --confirm_discard--> Viewing

Each state is its own frozen dataclass, so measure selections only exist
while measuring and nothing can be measured while a discard is pending.
Every geometry mutation snapshots the track into the undo stack first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import TYPE_CHECKING, Optional, Union

from ..config import UNDO_CAPACITY
from ..errors import InvalidTransition
from ..models import SaveResult, Track
from . import geometry
from .undo import UndoStack

if TYPE_CHECKING:
    from ..services.sync_engine import SyncEngine

LOGGER = logging.getLogger(__name__)


class EditMode(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    MEASURING_SEGMENT = "measuring_segment"
    CONFIRMING_DISCARD = "confirming_discard"


@dataclass(frozen=True, slots=True)
class Viewing:
    mode = EditMode.VIEWING


@dataclass(frozen=True, slots=True)
class Editing:
    mode = EditMode.EDITING


@dataclass(frozen=True, slots=True)
class MeasuringSegment:
    start: Optional[int] = None
    end: Optional[int] = None
    mode = EditMode.MEASURING_SEGMENT


@dataclass(frozen=True, slots=True)
class ConfirmingDiscard:
    mode = EditMode.CONFIRMING_DISCARD


EditState = Union[Viewing, Editing, MeasuringSegment, ConfirmingDiscard]


class EditSession:
    """Holds the working copy, the last saved copy and the undo history."""

    def __init__(self, track: Track, *, undo_capacity: int = UNDO_CAPACITY) -> None:
        self._track = track.copy()
        self._saved = track.copy()
        self._undo = UndoStack(undo_capacity)
        self._state: EditState = Viewing()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def track(self) -> Track:
        return self._track

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def mode(self) -> EditMode:
        return self._state.mode

    @property
    def has_unsaved_changes(self) -> bool:
        return self._track.points != self._saved.points

    @property
    def can_undo(self) -> bool:
        return self._undo.can_undo

    def _require(self, *allowed: type, action: str) -> None:
        if not isinstance(self._state, allowed):
            raise InvalidTransition(f"Cannot {action} while {self.mode.value}")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def begin_edit(self) -> None:
        self._require(Viewing, action="begin editing")
        self._state = Editing()

    def request_exit(self) -> bool:
        """Leave edit mode; returns False when a discard confirmation is needed."""

        self._require(Editing, MeasuringSegment, action="exit edit mode")
        if self.has_unsaved_changes:
            self._state = ConfirmingDiscard()
            return False
        self._undo.clear()
        self._state = Viewing()
        return True

    def confirm_discard(self) -> None:
        """Drop unsaved edits and return to the last saved geometry."""

        self._require(ConfirmingDiscard, action="discard changes")
        self._track = self._saved.copy()
        self._undo.clear()
        self._state = Viewing()
        LOGGER.debug("Discarded unsaved edits for track=%s", self._track.id)

    def cancel_discard(self) -> None:
        self._require(ConfirmingDiscard, action="cancel discard")
        self._state = Editing()

    def toggle_measure(self) -> None:
        if isinstance(self._state, MeasuringSegment):
            self._state = Editing()
            return
        self._require(Editing, action="measure a segment")
        self._state = MeasuringSegment()

    def select_measure_point(self, index: int) -> MeasuringSegment:
        """Pick a segment endpoint; a third pick starts a new selection."""

        current = self._state
        if not isinstance(current, MeasuringSegment):
            raise InvalidTransition(f"Cannot select a measure point while {self.mode.value}")
        if not 0 <= index < len(self._track.points):
            raise IndexError(f"Point index {index} out of range")
        if current.start is None or current.end is not None:
            self._state = MeasuringSegment(start=index)
        else:
            self._state = MeasuringSegment(start=current.start, end=index)
        return self._state

    def measured_length(self) -> Optional[float]:
        """Length in metres of the selected sub-path, once both ends are picked."""

        current = self._state
        if not isinstance(current, MeasuringSegment):
            return None
        if current.start is None or current.end is None:
            return None
        sub_path = geometry.slice_between_indices(
            self._track.points, current.start, current.end
        )
        return geometry.segment_length(sub_path)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def _apply(self, points: list) -> None:
        self._undo.push(self._track)
        self._track = self._track.with_points(points)

    def move_point(self, index: int, lat: float, lng: float) -> None:
        self._require(Editing, action="move a point")
        self._apply(geometry.move_point(self._track.points, index, lat, lng))

    def remove_point(self, index: int) -> None:
        self._require(Editing, action="remove a point")
        self._apply(geometry.remove_point(self._track.points, index))

    def insert_at(self, lat: float, lng: float) -> Optional[geometry.InsertionPoint]:
        """Insert a point on the path nearest to the clicked coordinate."""

        self._require(Editing, action="insert a point")
        insertion = geometry.project_and_insert(self._track.points, lat, lng)
        if insertion is None:
            return None
        self._apply(geometry.insert_point(self._track.points, insertion))
        return insertion

    def simplify(self, tolerance: float) -> int:
        """Simplify the path; returns the number of removed points."""

        self._require(Editing, action="simplify")
        before = len(self._track.points)
        if before < 3:
            return 0
        self._apply(geometry.simplify(self._track.points, tolerance))
        removed = before - len(self._track.points)
        LOGGER.debug(
            "Simplified track=%s tolerance=%s removed=%d", self._track.id, tolerance, removed
        )
        return removed

    def simplify_level(self, level: str) -> int:
        return self.simplify(geometry.tolerance_for_level(level))

    def undo(self) -> bool:
        self._require(Editing, action="undo")
        previous = self._undo.pop()
        if previous is None:
            return False
        self._track = previous
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def mark_saved(self) -> None:
        """Adopt the working copy as the saved baseline and leave edit mode."""

        self._saved = self._track.copy()
        self._undo.clear()
        self._state = Viewing()

    def save(self, engine: "SyncEngine", user_id: Optional[str] = None) -> SaveResult:
        self._require(Editing, MeasuringSegment, action="save")
        if len(self._track.points) < 2:
            raise ValueError("A track needs at least two points")
        result = engine.save(self._track, user_id)
        self.mark_saved()
        return result
