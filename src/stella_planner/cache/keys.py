"""Structured cache keys.

A SlotKey names one talent slot of one subject (character or equipment);
a ScoreKey narrows it to a single talent level.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class SlotKey:
    subject_id: int
    slot_index: int

    def level(self, level: int) -> "ScoreKey":
        return ScoreKey(self.subject_id, self.slot_index, level)


@dataclass(frozen=True, slots=True, order=True)
class ScoreKey:
    subject_id: int
    slot_index: int
    level: int

    @property
    def slot(self) -> SlotKey:
        return SlotKey(self.subject_id, self.slot_index)


# A user's pick of a talent at a level is addressed the same way as its score.
Selection = ScoreKey
