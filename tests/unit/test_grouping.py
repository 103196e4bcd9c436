from __future__ import annotations

from aie_importer.models.logical_row import LogicalRow
from aie_importer.services.grouping import group_rows, release_key


def test_rows_with_same_album_id_share_a_group():
    rows = [
        LogicalRow(album_id="A1", track_title="T1"),
        LogicalRow(album_id="A2", track_title="X"),
        LogicalRow(album_id="A1", track_title="T2"),
    ]
    groups = group_rows(rows)

    assert list(groups) == ["A1", "A2"]  # first-seen order
    assert [r.track_title for r in groups["A1"].rows] == ["T1", "T2"]  # row order kept
    assert len(groups["A2"]) == 1


def test_empty_album_id_uses_work_code_then_row_index():
    rows = [
        LogicalRow(album_id="A1"),
        LogicalRow(obra_code="W9", track_title="S1"),
        LogicalRow(track_title="S2"),
    ]
    groups = group_rows(rows)
    assert list(groups) == ["A1", "single-W9", "single-2"]


def test_release_key():
    assert release_key(LogicalRow(album_id="A7", obra_code="W1"), 0) == "A7"
    assert release_key(LogicalRow(obra_code="W1"), 3) == "single-W1"
    assert release_key(LogicalRow(), 3) == "single-3"


def test_rows_without_album_id_are_always_singletons():
    rows = [
        LogicalRow(obra_code="W1", track_title="S1"),
        LogicalRow(obra_code="W1", track_title="S1 (live)"),
        LogicalRow(obra_code="W1", track_title="S1 (remix)"),
    ]
    groups = group_rows(rows)

    assert len(groups) == 3
    assert all(len(g) == 1 for g in groups.values())
    assert list(groups)[0] == "single-W1"
    assert len(set(groups)) == 3


def test_synthesized_key_colliding_with_row_index_stays_unique():
    # work code "1" collides with the index-based key of the row at index 1
    rows = [LogicalRow(obra_code="1"), LogicalRow(track_title="no code")]
    groups = group_rows(rows)
    assert len(groups) == 2
    assert all(len(g) == 1 for g in groups.values())


def test_grouping_is_a_partition():
    rows = [
        LogicalRow(album_id="A1", track_title="T1"),
        LogicalRow(track_title="S1"),
        LogicalRow(album_id="A2", track_title="T2"),
        LogicalRow(album_id="A1", track_title="T3"),
        LogicalRow(track_title="S2"),
    ]
    groups = group_rows(rows)

    grouped = [row for g in groups.values() for row in g.rows]
    assert sorted(map(id, grouped)) == sorted(map(id, rows))
    for g in groups.values():
        ids = {r.album_id for r in g.rows}
        assert len(ids) == 1
        if ids == {""}:
            assert len(g) == 1


def test_group_rows_empty_input():
    assert group_rows([]) == {}


def test_album_id_equal_to_single_key_does_not_absorb_the_single():
    rows = [
        LogicalRow(track_title="Solo", obra_code="W1"),
        LogicalRow(album_id="single-W1", album_title="Alb", track_title="T2"),
        LogicalRow(album_id="single-W1", album_title="Alb", track_title="T3"),
    ]
    groups = group_rows(rows)

    assert len(groups) == 2
    assert [r.track_title for r in groups["single-W1"].rows] == ["Solo"]
    album = next(g for g in groups.values() if g.first.album_id == "single-W1")
    assert album.key != "single-W1"
    assert [r.track_title for r in album.rows] == ["T2", "T3"]


def test_single_after_album_with_matching_id_stays_separate():
    rows = [
        LogicalRow(album_id="single-W1", album_title="Alb", track_title="T1"),
        LogicalRow(track_title="Solo", obra_code="W1"),
        LogicalRow(album_id="single-W1", album_title="Alb", track_title="T2"),
    ]
    groups = group_rows(rows)

    assert len(groups) == 2
    assert [r.track_title for r in groups["single-W1"].rows] == ["T1", "T2"]
    (single,) = [g for g in groups.values() if g.first.album_id == ""]
    assert [r.track_title for r in single.rows] == ["Solo"]
