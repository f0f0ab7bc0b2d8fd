import pytest

from pyteams.config import Formation, FormationOverrides, derive_formation, iter_formations, validate_team_size
from pyteams.errors import TeamValidationError


@pytest.mark.parametrize(
    ("team_size", "expected"),
    [
        (5, (2, 2, 1)),
        (6, (2, 3, 1)),
        (7, (2, 3, 2)),
        (8, (2, 4, 2)),
        (9, (3, 4, 2)),
        (10, (4, 3, 3)),
        (11, (4, 4, 3)),
    ],
)
def test_tabulated_formations(team_size, expected):
    formation = derive_formation(team_size)
    assert (formation.defenders, formation.midfielders, formation.attackers) == expected
    assert formation.team_size == team_size


def test_simplified_four_is_all_midfield():
    assert derive_formation(4, simplified=True) == Formation(defenders=0, midfielders=4, attackers=0)


def test_sizes_outside_table_use_proportional_split():
    assert derive_formation(12) == Formation(defenders=3, midfielders=7, attackers=2)
    assert derive_formation(20) == Formation(defenders=6, midfielders=10, attackers=4)
    assert derive_formation(4).team_size == 4


@pytest.mark.parametrize("team_size", [0, -3])
def test_non_positive_size_is_rejected(team_size):
    with pytest.raises(ValueError):
        derive_formation(team_size)


def test_every_tabulated_formation_sums_to_its_size():
    for team_size, _, formation in iter_formations():
        assert formation.team_size == team_size


def test_validate_team_size_bounds():
    for team_size in (4, 5, 9, 11):
        validate_team_size(team_size)
    for team_size in (3, 12):
        with pytest.raises(TeamValidationError):
            validate_team_size(team_size)


def test_position_for_slot_follows_bands():
    formation = derive_formation(9)
    positions = [formation.position_for_slot(n) for n in range(1, 10)]
    assert positions == ["defense"] * 3 + ["midfield"] * 4 + ["attack"] * 2
    assert list(formation.slot_range("attack")) == [8, 9]
    with pytest.raises(ValueError):
        formation.position_for_slot(10)


def test_overrides_take_precedence():
    overrides = FormationOverrides({9: Formation(defenders=4, midfielders=3, attackers=2)})
    assert derive_formation(9, overrides=overrides) == Formation(defenders=4, midfielders=3, attackers=2)
    assert derive_formation(7, overrides=overrides) == Formation(defenders=2, midfielders=3, attackers=2)


def test_override_with_wrong_sum_is_rejected():
    with pytest.raises(TeamValidationError):
        FormationOverrides({9: Formation(defenders=1, midfielders=1, attackers=1)})


def test_overrides_from_mapping():
    overrides = FormationOverrides.from_mapping({"7": {"defenders": 3, "midfielders": 2, "attackers": 2}})
    assert len(overrides) == 1
    assert overrides.get(7) == Formation(defenders=3, midfielders=2, attackers=2)
    assert overrides.as_dict() == {"7": {"defenders": 3, "midfielders": 2, "attackers": 2}}
