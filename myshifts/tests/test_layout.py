"""Tests for track assignment.

These tests verify that the layout engine:
- Puts each fragment on the first free track, scanning tracks in order
- Records the running track count, not the day maximum
- Treats touching intervals (end == start) as non-overlapping
- Never puts overlapping fragments on the same track
- Is deterministic, including for ties in start time
"""

import random

from myshifts.layout import layout, max_track_count, place_fragments

from .conftest import make_fragment


def _tracks(assignments):
    return {key: (value.trackIndex, value.trackCount) for key, value in assignments.items()}


def test_reuses_track_after_earlier_fragment_ends() -> None:
    fragments = [
        make_fragment("A", 9.0, 12.0),
        make_fragment("B", 10.0, 11.0),
        make_fragment("C", 11.5, 13.0),
    ]
    assignments = layout(fragments)

    assert _tracks(assignments) == {"A": (0, 1), "B": (1, 2), "C": (1, 2)}
    assert max_track_count(assignments.values()) == 2


def test_track_count_is_running_value() -> None:
    fragments = [
        make_fragment("early", 6.0, 8.0),
        make_fragment("x", 9.0, 12.0),
        make_fragment("y", 9.5, 12.0),
        make_fragment("z", 10.0, 12.0),
    ]
    assignments = layout(fragments)

    assert assignments["early"].trackCount == 1
    assert _tracks(assignments) == {"early": (0, 1), "x": (0, 1), "y": (1, 2), "z": (2, 3)}
    assert max_track_count(assignments.values()) == 3


def test_input_order_does_not_matter_except_for_ties() -> None:
    fragments = [
        make_fragment("C", 11.5, 13.0),
        make_fragment("A", 9.0, 12.0),
        make_fragment("B", 10.0, 11.0),
    ]
    assert _tracks(layout(fragments)) == {"A": (0, 1), "B": (1, 2), "C": (1, 2)}


def test_ties_keep_input_order() -> None:
    first = layout([make_fragment("p", 8.0, 10.0), make_fragment("q", 8.0, 16.0)])
    second = layout([make_fragment("q", 8.0, 16.0), make_fragment("p", 8.0, 10.0)])

    assert _tracks(first) == {"p": (0, 1), "q": (1, 2)}
    assert _tracks(second) == {"q": (0, 1), "p": (1, 2)}


def test_touching_fragments_share_a_track() -> None:
    assignments = layout([make_fragment("a", 8.0, 12.0), make_fragment("b", 12.0, 16.0)])
    assert _tracks(assignments) == {"a": (0, 1), "b": (0, 1)}


def test_track_holds_union_of_its_intervals() -> None:
    assignments = layout(
        [
            make_fragment("a", 8.0, 9.0),
            make_fragment("b", 8.5, 12.5),
            make_fragment("c", 9.5, 10.0),
            make_fragment("d", 9.75, 11.0),
            make_fragment("e", 12.0, 13.0),
        ]
    )
    # "d" overlaps "c" on track 0 and "b" on track 1.
    assert _tracks(assignments) == {
        "a": (0, 1),
        "b": (1, 2),
        "c": (0, 2),
        "d": (2, 3),
        "e": (0, 3),
    }


def test_first_free_track_wins_over_later_ones() -> None:
    # "c" skips track 0 (still held by "a") and reuses track 1 after "b".
    assignments = layout(
        [
            make_fragment("a", 0.0, 4.0),
            make_fragment("b", 1.0, 2.0),
            make_fragment("c", 3.0, 6.0),
            make_fragment("d", 5.0, 8.0),
        ]
    )
    assert _tracks(assignments) == {"a": (0, 1), "b": (1, 2), "c": (1, 2), "d": (0, 2)}


def test_empty_day() -> None:
    assert layout([]) == {}
    assert max_track_count([]) == 0
    assert place_fragments([]) == []


def _random_fragments(seed: int, count: int = 60):
    rng = random.Random(seed)
    fragments = []
    for index in range(count):
        start = rng.randrange(0, 96) / 4
        end = min(24.0, start + rng.randrange(1, 40) / 4)
        fragments.append(make_fragment(f"f{index}", start, end))
    return fragments


def test_no_two_overlapping_fragments_share_a_track() -> None:
    for seed in range(5):
        fragments = _random_fragments(seed)
        assignments = layout(fragments)
        for a in fragments:
            for b in fragments:
                if a.id >= b.id:
                    continue
                if assignments[a.id].trackIndex != assignments[b.id].trackIndex:
                    continue
                assert a.endHour <= b.startHour or b.endHour <= a.startHour, (a.id, b.id)


def test_layout_is_deterministic() -> None:
    fragments = _random_fragments(42)
    assert layout(fragments) == layout(list(fragments))


def test_place_fragments_merges_track_fields_in_start_order() -> None:
    placed = place_fragments(
        [
            make_fragment("C", 11.5, 13.0),
            make_fragment("A", 9.0, 12.0),
            make_fragment("B", 10.0, 11.0),
        ]
    )
    assert [(p.id, p.trackIndex, p.trackCount) for p in placed] == [
        ("A", 0, 1),
        ("B", 1, 2),
        ("C", 1, 2),
    ]
    assert placed[0].teamName == "Team A"
    assert max_track_count(placed) == 2


def test_fragments_without_length_get_no_track() -> None:
    placed = place_fragments(
        [
            make_fragment("a", 9.0, 12.0),
            make_fragment("zero", 10.0, 10.0),
            make_fragment("reversed", 11.0, 10.5),
        ]
    )
    assert [(p.id, p.trackIndex, p.trackCount) for p in placed] == [("a", 0, 1)]
    assert _tracks(layout([make_fragment("a", 9.0, 12.0), make_fragment("z", 10.0, 10.0)])) == {
        "a": (0, 1)
    }
