import pytest

from pokedex.catalog import display


@pytest.mark.parametrize("pid, expected", [(1, "#001"), (63, "#063"), (151, "#151"), (1025, "#1025")])
def test_display_id(pid, expected):
    assert display.display_id(pid) == expected


@pytest.mark.parametrize("name, expected", [
    ("hp", "Hp"),
    ("special-attack", "Special Attack"),
    ("special-defense", "Special Defense"),
])
def test_stat_label(name, expected):
    assert display.stat_label(name) == expected


def test_ability_label_replaces_every_hyphen():
    assert display.ability_label("rks-system-x") == "Rks system x"


def test_tenths():
    assert display.tenths(7, "m") == "0.7 m"
    assert display.tenths(1000, "kg") == "100.0 kg"


def test_capitalize_empty():
    assert display.capitalize("") == ""
