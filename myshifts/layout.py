"""
Track assignment for the fragments of one day.

Greedy online interval colouring: fragments are visited by ascending start
hour (stable, so ties keep their input order) and each goes to the first track
with no overlapping interval, or to a new track. Fragments whose end is not
after their start are left out. The result is deterministic.

``trackCount`` is the number of tracks that existed right after the fragment
was placed. It is a running value; the day's final maximum is
``max_track_count``.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple, Union

from .models import PlacedFragment, ShiftFragment, TrackAssignment

Interval = Tuple[float, float]


def _overlaps(a: Interval, b: Interval) -> bool:
    # Half-open: a shift ending at 12:00 does not overlap one starting at 12:00.
    return a[0] < b[1] and b[0] < a[1]


def _track_is_free(track: Sequence[Interval], interval: Interval) -> bool:
    return not any(_overlaps(existing, interval) for existing in track)


def sort_fragments(fragments: Iterable[ShiftFragment]) -> List[ShiftFragment]:
    """Fragments by start hour, without those that have no positive length."""
    valid = (fragment for fragment in fragments if fragment.endHour > fragment.startHour)
    return sorted(valid, key=lambda fragment: fragment.startHour)


def layout(fragments: Iterable[ShiftFragment]) -> Dict[str, TrackAssignment]:
    tracks: List[List[Interval]] = []
    assignments: Dict[str, TrackAssignment] = {}

    for fragment in sort_fragments(fragments):
        interval = (fragment.startHour, fragment.endHour)
        chosen = -1
        for index, track in enumerate(tracks):
            if _track_is_free(track, interval):
                track.append(interval)
                chosen = index
                break
        if chosen < 0:
            tracks.append([interval])
            chosen = len(tracks) - 1
        assignments[fragment.id] = TrackAssignment(trackIndex=chosen, trackCount=len(tracks))
    return assignments


def max_track_count(assignments: Iterable[Union[TrackAssignment, PlacedFragment]]) -> int:
    return max((assignment.trackCount for assignment in assignments), default=0)


def place_fragments(fragments: Iterable[ShiftFragment]) -> List[PlacedFragment]:
    """Layout plus merge: fragments in layout order with their track fields."""
    ordered = sort_fragments(fragments)
    assignments = layout(ordered)
    placed: List[PlacedFragment] = []
    for fragment in ordered:
        track = assignments[fragment.id]
        placed.append(
            PlacedFragment(
                **fragment.model_dump(),
                trackIndex=track.trackIndex,
                trackCount=track.trackCount,
            )
        )
    return placed
