import json
import os

from core.models import BridgeConfig


def test_save_writes_pretty_printed_record(bridge_repo):
    bridge = BridgeConfig(id="1700000000000", name="Lobby", channels=(1, 2), blacklist_roles=frozenset({5}))
    path = bridge_repo.save(bridge)

    with open(path, "r", encoding="utf-8") as handle:
        text = handle.read()
    assert "\n  " in text
    record = json.loads(text)
    assert record == {
        "id": "1700000000000",
        "name": "Lobby",
        "name_format": "{{USERNAME}} ({{GUILDNAME}})",
        "channels": ["1", "2"],
        "blacklist_roles": ["5"],
    }
    assert os.path.basename(path) == "1700000000000.json"


def test_load_round_trips_record(bridge_repo):
    bridge = BridgeConfig(id="7", name="Lobby", channels=(1, 2, 3))
    bridge_repo.save(bridge)
    assert bridge_repo.load("7") == bridge
    assert bridge_repo.load("8") is None


def test_load_all_skips_unreadable_records(bridge_repo):
    bridge_repo.save(BridgeConfig(id="1", name="One", channels=(1, 2)))
    with open(os.path.join(bridge_repo.directory, "broken.json"), "w", encoding="utf-8") as handle:
        handle.write("{not json")
    with open(os.path.join(bridge_repo.directory, "notes.txt"), "w", encoding="utf-8") as handle:
        handle.write("ignored")

    bridges = bridge_repo.load_all()
    assert [bridge.id for bridge in bridges] == ["1"]


def test_load_all_skips_records_of_the_wrong_shape(bridge_repo):
    bridge_repo.save(BridgeConfig(id="1", name="One", channels=(1, 2)))
    with open(os.path.join(bridge_repo.directory, "list.json"), "w", encoding="utf-8") as handle:
        json.dump([], handle)
    with open(os.path.join(bridge_repo.directory, "channels.json"), "w", encoding="utf-8") as handle:
        json.dump({"id": "2", "name": "Two", "channels": 5}, handle)

    bridges = bridge_repo.load_all()
    assert [bridge.id for bridge in bridges] == ["1"]


def test_from_record_drops_duplicate_channels():
    bridge = BridgeConfig.from_record({"id": "1", "name": "x", "channels": ["1", "2", "1"]})
    assert bridge.channels == (1, 2)


def test_delete(bridge_repo):
    bridge_repo.save(BridgeConfig(id="1", name="One", channels=(1, 2)))
    assert bridge_repo.delete("1") is True
    assert bridge_repo.delete("1") is False
    assert not bridge_repo.exists("1")
