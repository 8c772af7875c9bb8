"""Track geometry editing: pure operations, undo history and edit sessions."""

from .geometry import (
    InsertionPoint,
    insert_point,
    move_point,
    project_and_insert,
    remove_point,
    segment_length,
    simplify,
    slice_along,
    slice_between_indices,
    tolerance_for_level,
)
from .session import (
    ConfirmingDiscard,
    EditMode,
    EditSession,
    Editing,
    MeasuringSegment,
    Viewing,
)
from .undo import UndoStack

__all__ = [
    "InsertionPoint",
    "insert_point",
    "move_point",
    "project_and_insert",
    "remove_point",
    "segment_length",
    "simplify",
    "slice_along",
    "slice_between_indices",
    "tolerance_for_level",
    "ConfirmingDiscard",
    "EditMode",
    "EditSession",
    "Editing",
    "MeasuringSegment",
    "Viewing",
    "UndoStack",
]
