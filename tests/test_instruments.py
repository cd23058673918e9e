from soundcomm.services.instruments import INITIAL_LEVEL
from soundcomm.services.instruments import INSTRUMENTS
from soundcomm.services.instruments import clamp
from soundcomm.services.instruments import default_levels
from soundcomm.services.instruments import find_label
from soundcomm.services.instruments import instrument_keys
from soundcomm.services.instruments import label_for


def test_registry_has_seven_instruments_in_order():
    assert instrument_keys() == (
        "keyboard",
        "organ",
        "guitar",
        "drum",
        "conga",
        "monitor",
        "songleader",
    )
    assert len(INSTRUMENTS) == 7


def test_label_lookup():
    assert label_for("guitar") == "Guitar"
    assert label_for("conga") == "Conga Drum"
    assert label_for("songleader") == "Song Leader"


def test_unknown_keys_fall_back():
    assert label_for("kazoo") == "Unknown"
    assert label_for(None) == "Unknown"
    assert label_for(["guitar"]) == "Unknown"
    assert find_label("kazoo") is None


def test_default_levels_are_fresh_copies():
    first = default_levels()
    first["guitar"] = 9
    assert default_levels()["guitar"] == INITIAL_LEVEL
    assert set(default_levels().values()) == {5}


def test_clamp_is_a_hard_floor_and_ceiling():
    assert clamp(-20) == 0
    assert clamp(0) == 0
    assert clamp(7) == 7
    assert clamp(10) == 10
    assert clamp(99) == 10
