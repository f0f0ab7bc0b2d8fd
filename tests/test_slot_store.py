import random
import threading

import pytest

from pyteams.config import derive_formation
from pyteams.errors import PersistenceError, SlotConflictError, TeamValidationError
from pyteams.models import UNASSIGNED, Assignment, SlotChange
from pyteams.store import MoveCommand, SlotAssignmentStore


TEAM_A = ["a1", "a2", "a3", "a4", "a5"]
TEAM_B = ["b1", "b2", "b3", "b4", "b5"]


def _assignment() -> Assignment:
    formation = derive_formation(5)
    return Assignment.from_teams(formation, formation, TEAM_A, TEAM_B)


class RecordingPersistence:
    def __init__(self):
        self.batches: list[list[SlotChange]] = []

    def persist(self, session_id, changes):
        self.batches.append(list(changes))
        return True


class RejectingPersistence:
    def persist(self, session_id, changes):
        return False


class ExplodingPersistence:
    def persist(self, session_id, changes):
        raise RuntimeError("database is locked")


def test_swap_exchanges_two_placed_players():
    store = SlotAssignmentStore(_assignment())
    updated = store.move_or_swap("a1", "B", 1)

    assert updated.slot("B", 1).player_id == "a1"
    assert updated.slot("A", 1).player_id == "b1"
    updated.check_invariants()
    assert store.current is updated


def test_swap_round_trip_restores_assignment():
    original = _assignment()
    store = SlotAssignmentStore(original)
    store.move_or_swap("a1", "B", 1)
    store.move_or_swap("a1", "A", 1)
    assert store.current == original


def test_swap_back_by_displaced_player_restores_assignment():
    original = _assignment()
    store = SlotAssignmentStore(original)
    store.move_or_swap("a1", "B", 1)
    store.move_or_swap("b1", "B", 1)
    assert store.current == original


def test_move_to_empty_slot_vacates_previous_slot():
    store = SlotAssignmentStore(_assignment())
    store.move_or_swap("a1", UNASSIGNED)
    assert store.current.slot("A", 1).player_id is None
    assert store.current.unassigned == ("a1",)

    updated = store.move_or_swap("b2", "A", 1)
    assert updated.slot("A", 1).player_id == "b2"
    assert updated.slot("B", 2).player_id is None


def test_pool_player_displaces_occupant_to_pool():
    store = SlotAssignmentStore(_assignment())
    store.move_or_swap("a1", UNASSIGNED)
    updated = store.move_or_swap("a1", "B", 3)

    assert updated.slot("B", 3).player_id == "a1"
    assert updated.unassigned == ("b3",)
    assert not updated.is_team_complete("A")


def test_move_onto_own_slot_is_a_no_op():
    persistence = RecordingPersistence()
    original = _assignment()
    store = SlotAssignmentStore(original, persistence)

    assert store.move_or_swap("a2", "A", 2) == original
    assert persistence.batches == []
    assert not store.can_undo


def test_changes_are_persisted_as_one_batch():
    persistence = RecordingPersistence()
    store = SlotAssignmentStore(_assignment(), persistence, session_id="match-1")
    store.move_or_swap("a1", "B", 1)

    assert persistence.batches == [
        [
            SlotChange(player_id="a1", team="B", slot_number=1),
            SlotChange(player_id="b1", team="A", slot_number=1),
        ]
    ]


def test_expected_occupant_mismatch_raises_conflict():
    original = _assignment()
    store = SlotAssignmentStore(original)

    with pytest.raises(SlotConflictError) as excinfo:
        store.move_or_swap("a1", "B", 1, expected_occupant="b2")
    assert excinfo.value.actual == "b1"
    assert store.current == original

    with pytest.raises(SlotConflictError):
        store.move_or_swap("a1", "B", 1, expected_occupant=None)


def test_matching_expected_occupant_allows_move():
    store = SlotAssignmentStore(_assignment())
    updated = store.move_or_swap("a1", "B", 1, expected_occupant="b1")
    assert updated.slot("B", 1).player_id == "a1"


@pytest.mark.parametrize(
    ("player_id", "team", "slot_number"),
    [
        ("zz", "A", 1),
        ("a1", "A", 9),
        ("a1", "C", 1),
        ("a1", "B", None),
    ],
)
def test_invalid_moves_are_rejected_without_mutation(player_id, team, slot_number):
    original = _assignment()
    store = SlotAssignmentStore(original)
    with pytest.raises(TeamValidationError):
        store.move_or_swap(player_id, team, slot_number)
    assert store.current == original


def test_rejected_persistence_rolls_back():
    original = _assignment()
    store = SlotAssignmentStore(original, RejectingPersistence())

    with pytest.raises(PersistenceError) as excinfo:
        store.move_or_swap("a1", "B", 1)

    assert store.current == original
    assert isinstance(excinfo.value.command, MoveCommand)
    assert not store.can_undo


def test_persistence_exception_rolls_back():
    original = _assignment()
    store = SlotAssignmentStore(original, ExplodingPersistence())

    with pytest.raises(PersistenceError) as excinfo:
        store.clear()

    assert store.current == original
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_clear_and_undo():
    original = _assignment()
    store = SlotAssignmentStore(original)

    cleared = store.clear()
    assert cleared.unassigned == tuple(sorted(TEAM_A + TEAM_B))
    assert all(slot.player_id is None for slot in cleared.slots)

    assert store.undo() == original
    with pytest.raises(TeamValidationError):
        store.undo()


def test_undo_reverts_most_recent_move_only():
    store = SlotAssignmentStore(_assignment())
    store.move_or_swap("a1", "B", 1)
    after_first = store.current
    store.move_or_swap("a2", "B", 2)

    assert store.undo() == after_first


def test_replace_requires_same_players():
    store = SlotAssignmentStore(_assignment())
    formation = derive_formation(5)
    other = Assignment.from_teams(formation, formation, TEAM_A, ["b1", "b2", "b3", "b4", "x9"])
    with pytest.raises(TeamValidationError):
        store.replace(other)

    reshuffled = Assignment.from_teams(formation, formation, TEAM_B, TEAM_A)
    assert store.replace(reshuffled) == reshuffled


def test_concurrent_moves_keep_one_player_per_slot():
    store = SlotAssignmentStore(_assignment())
    players = TEAM_A + TEAM_B
    targets = [("A", n) for n in range(1, 6)] + [("B", n) for n in range(1, 6)] + [(UNASSIGNED, None)]

    def worker(seed: int) -> None:
        rng = random.Random(seed)
        for _ in range(50):
            team, slot_number = rng.choice(targets)
            store.move_or_swap(rng.choice(players), team, slot_number)

    threads = [threading.Thread(target=worker, args=(seed,)) for seed in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    final = store.current
    final.check_invariants()
    assert sorted(final.player_ids()) == sorted(players)
