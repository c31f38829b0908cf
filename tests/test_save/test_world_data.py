import json
import pytest

from roomspawn.core.geometry import Point
from roomspawn.save.world_data import WorldData, WorldDataError


@pytest.fixture
def tag():
    tag = WorldData()
    tag.set("RoomMarkers_Count", 1)
    tag.set("Room0_XY", Point(12, 34))
    tag.set("Room0_Name", "Cave_Foo")
    tag.set("Room0_DidSpawns", True)
    return tag


def test_typed_getters(tag):
    assert tag.get_int("RoomMarkers_Count") == 1
    assert tag.get_point("Room0_XY") == Point(12, 34)
    assert tag.get_str("Room0_Name") == "Cave_Foo"
    assert tag.get_bool("Room0_DidSpawns") is True


def test_missing_keys_read_as_defaults():
    tag = WorldData()
    assert tag.get_int("nope") == 0
    assert tag.get_point("nope") == Point(0, 0)
    assert tag.get_str("nope") == ""
    assert tag.get_bool("nope") is False
    assert tag.get("nope", 7) == 7


def test_points_stored_as_lists(tag):
    assert tag.to_dict()["Room0_XY"] == [12, 34]


def test_bad_values_fall_back(caplog):
    tag = WorldData({"count": "lots", "xy": "here"})
    assert tag.get_int("count") == 0
    assert tag.get_point("xy") == Point(0, 0)
    assert "not an int" in caplog.text


def test_file_round_trip(tag, tmp_path):
    path = tmp_path / "saves" / "world_rooms.json"
    tag.save(path)

    loaded = WorldData.load(path)

    assert loaded.to_dict() == tag.to_dict()
    assert loaded.get_point("Room0_XY") == Point(12, 34)


def test_checksum_written(tag, tmp_path):
    path = tmp_path / "world.json"
    tag.save(path)

    with open(path) as f:
        data = json.load(f)
    assert data["version"] == WorldData.VERSION
    assert data["checksum"]


def test_tampered_file_rejected(tag, tmp_path):
    path = tmp_path / "world.json"
    tag.save(path)

    with open(path) as f:
        data = json.load(f)
    data["tags"]["Room0_DidSpawns"] = False
    with open(path, "w") as f:
        json.dump(data, f)

    with pytest.raises(WorldDataError):
        WorldData.load(path)

    # Validation can be skipped
    assert WorldData.load(path, validate=False).get_bool("Room0_DidSpawns") is False


def test_missing_file_is_empty(tmp_path):
    assert len(WorldData.load(tmp_path / "none.json")) == 0


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "world.json"
    path.write_text("{broken")
    with pytest.raises(WorldDataError):
        WorldData.load(path)
