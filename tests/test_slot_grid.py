import itertools

import pytest

from account_mapper.core.slot_grid import SlotGrid
from account_mapper.domain import RowNotFound, Slot, SlotEmpty

from conftest import make_record

A, B, C, D = (make_record(f"d{n}") for n in (1, 2, 3, 4))


@pytest.fixture()
def grid() -> SlotGrid:
    return SlotGrid(["r1", "r2"])


def _fill(grid: SlotGrid, row_id: str = "r1") -> None:
    grid.place(row_id, Slot.MOST, A)
    grid.place(row_id, Slot.LIKELY, B)
    grid.place(row_id, Slot.POSSIBLE, C)


def test_place_into_empty_slot_does_not_cascade(grid):
    outcome = grid.place("r1", Slot.LIKELY, A)

    assert outcome.placed
    assert outcome.evicted == []
    assert grid.row("r1") == (None, A, None)
    assert grid.locate(A.id) == ("r1", Slot.LIKELY)


def test_place_into_full_most_cascades_through_both_tiers(grid):
    _fill(grid)

    outcome = grid.place("r1", Slot.MOST, D)

    assert grid.row("r1") == (D, A, B)
    assert outcome.evicted == [C]
    assert not grid.is_placed(C.id)
    assert grid.locate(A.id) == ("r1", Slot.LIKELY)
    assert grid.locate(B.id) == ("r1", Slot.POSSIBLE)


def test_place_into_most_with_empty_likely_only_shifts_once(grid):
    grid.place("r1", Slot.MOST, A)
    grid.place("r1", Slot.POSSIBLE, C)

    outcome = grid.place("r1", Slot.MOST, D)

    assert grid.row("r1") == (D, A, C)
    assert outcome.evicted == []


def test_place_into_full_likely_evicts_old_possible(grid):
    _fill(grid)

    outcome = grid.place("r1", Slot.LIKELY, D)

    assert grid.row("r1") == (A, D, B)
    assert outcome.evicted == [C]


def test_place_into_occupied_possible_evicts_occupant(grid):
    _fill(grid)

    outcome = grid.place("r1", Slot.POSSIBLE, D)

    assert grid.row("r1") == (A, B, D)
    assert outcome.evicted == [C]


def test_row_local_duplicate_is_rejected_without_change(grid):
    grid.place("r1", Slot.LIKELY, A)
    before = dict(grid.snapshot("before").rows)

    outcome = grid.place("r1", Slot.POSSIBLE, A)

    assert not outcome.placed
    assert outcome.conflict is not None
    assert outcome.conflict.row_id == "r1"
    assert outcome.conflict.slot is Slot.LIKELY
    assert dict(grid.snapshot("after").rows) == before


def test_record_placed_in_another_row_is_rejected(grid):
    grid.place("r1", Slot.MOST, A)

    outcome = grid.place("r2", Slot.MOST, A)

    assert not outcome.placed
    assert outcome.conflict.row_id == "r1"
    assert grid.row("r2") == (None, None, None)


def test_unknown_row_is_a_hard_error(grid):
    with pytest.raises(RowNotFound):
        grid.place("missing", Slot.MOST, A)
    with pytest.raises(RowNotFound):
        grid.remove("missing", Slot.MOST)
    with pytest.raises(RowNotFound):
        grid.has_any_mapping("missing")


def test_remove_returns_occupant_without_cascade(grid):
    _fill(grid)

    removed = grid.remove("r1", Slot.MOST)

    assert removed == A
    assert grid.row("r1") == (None, B, C)
    assert not grid.is_placed(A.id)
    assert grid.remove("r1", Slot.MOST) is None


def test_has_any_mapping(grid):
    assert not grid.has_any_mapping("r1")
    grid.place("r1", Slot.POSSIBLE, A)
    assert grid.has_any_mapping("r1")
    grid.remove("r1", Slot.POSSIBLE)
    assert not grid.has_any_mapping("r1")


def test_move_between_rows_uses_the_cascade(grid):
    _fill(grid)
    grid.place("r2", Slot.MOST, D)

    outcome = grid.move("r2", Slot.MOST, "r1", Slot.LIKELY)

    assert outcome.placed
    assert grid.row("r1") == (A, D, B)
    assert grid.row("r2") == (None, None, None)
    assert outcome.evicted == [C]


def test_move_within_a_row(grid):
    _fill(grid)

    grid.move("r1", Slot.MOST, "r1", Slot.POSSIBLE)

    assert grid.row("r1") == (None, B, A)
    assert not grid.is_placed(C.id)


def test_move_onto_same_cell_is_a_no_op(grid):
    _fill(grid)

    outcome = grid.move("r1", Slot.LIKELY, "r1", Slot.LIKELY)

    assert outcome.placed
    assert grid.row("r1") == (A, B, C)


def test_move_from_empty_cell_raises(grid):
    with pytest.raises(SlotEmpty):
        grid.move("r1", Slot.MOST, "r2", Slot.MOST)


def test_snapshot_is_detached_from_later_mutations(grid):
    grid.place("r1", Slot.MOST, A)
    snapshot = grid.snapshot("x")

    grid.place("r1", Slot.MOST, B)
    grid.remove("r1", Slot.LIKELY)

    assert snapshot.get("r1", Slot.MOST) == A
    grid.restore(snapshot)
    assert grid.row("r1") == (A, None, None)
    assert grid.locate(A.id) == ("r1", Slot.MOST)
    assert not grid.is_placed(B.id)


def test_global_uniqueness_over_many_placements():
    grid = SlotGrid(["r1", "r2", "r3"])
    records = [make_record(f"d{n}") for n in range(6)]
    cells = list(itertools.product(["r1", "r2", "r3"], list(Slot)))

    for step, (record, (row_id, slot)) in enumerate(zip(itertools.cycle(records), itertools.islice(itertools.cycle(cells), 60))):
        if step % 7 == 3:
            grid.remove(row_id, slot)
        else:
            grid.place(row_id, slot, record)

        seen = [assignment.record.id for assignment in grid.assignments()]
        assert len(seen) == len(set(seen))
        assert set(seen) == set(grid.placed_ids())
        for assignment in grid.assignments():
            assert grid.locate(assignment.record.id) == (assignment.row_id, assignment.slot)
