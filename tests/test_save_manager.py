from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from save_system import LifecycleState, SaveConfig, SaveManager


def _manager(home: Path, **kwargs) -> SaveManager:
    return SaveManager(SaveConfig(app_identity="game", data_dir=home), **kwargs)


def test_save_path_is_derived_from_app_identity(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    assert mgr.save_path == tmp_path / "game.gameData"
    assert mgr.state is LifecycleState.LOADED


def test_typed_set_get(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    mgr.set_float("volume", 0.75)
    mgr.set_int("coins", 12)
    mgr.set_long("score", 2**40)
    mgr.set_string("name", "bob")
    mgr.set_bool("tutorial_done", True)
    assert mgr.set_string_array("tags", ["ab", "xyz"])

    assert mgr.get_float("volume") == 0.75
    assert mgr.get_int("coins") == 12
    assert mgr.get_long("score") == 2**40
    assert mgr.get_string("name") == "bob"
    assert mgr.get_bool("tutorial_done") is True
    assert mgr.get_string_array("tags") == ["ab", "xyz"]


def test_numeric_kinds_convert_across_accessors(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    mgr.set_float("f", 3.9)
    mgr.set_int("i", 5)
    mgr.set_bool("b", True)

    assert mgr.get_int("f") == 3
    assert mgr.get_long("f") == 3
    assert mgr.get_float("i") == 5.0
    assert mgr.get_int("b") == 1
    assert mgr.get_float("b") == 1.0
    assert mgr.get_bool("i") is False


def test_missing_key_returns_default(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    assert mgr.get_int("missing", 7) == 7
    assert mgr.get_string("missing") is None
    assert mgr.get_string_array("missing", ["d"]) == ["d"]
    assert mgr.get_bool("missing", True) is True


def test_every_setter_persists(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    mgr.set_int("coins", 3)
    doc = json.loads(mgr.save_path.read_text(encoding="utf-8"))
    assert doc == {"coins": 3}

    mgr.set_string_array("tags", ["ab", "xyz"])
    doc = json.loads(mgr.save_path.read_text(encoding="utf-8"))
    assert doc["tags"] == "AgM=|abxyz"


def test_bool_is_stored_as_number(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    mgr.set_bool("on", True)
    mgr.set_bool("off", False)
    assert mgr.raw_value("on") == 1
    assert mgr.raw_value("off") == 0


def test_save_then_load_restores_state(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    mgr.set_float("volume", 0.25)
    mgr.set_long("score", 2**35)
    mgr.set_string_array("tags", ["a|b", ""])
    before = mgr.get_save_json()

    restarted = _manager(tmp_path)
    assert restarted.get_save_json() == before
    assert restarted.keys() == ["score", "tags", "volume"]
    assert restarted.get_float("volume") == 0.25
    assert restarted.get_string_array("tags") == ["a|b", ""]


def test_bad_string_array_leaves_store_unchanged(tmp_path: Path, caplog) -> None:
    mgr = _manager(tmp_path)
    saves = []
    mgr.events.on_save(lambda: saves.append(1))

    with caplog.at_level(logging.ERROR):
        assert mgr.set_string_array("tags", ["ok", None]) is False
        assert mgr.set_string_array("tags", ["x" * 256]) is False

    assert not mgr.has_save_key("tags")
    assert saves == []
    assert not mgr.save_path.exists()
    assert all('key: "tags"' in r.getMessage() for r in caplog.records if r.name == "save_system.manager")


def test_corrupt_string_array_reads_empty(tmp_path: Path, caplog) -> None:
    mgr = _manager(tmp_path)
    mgr.set_string("tags", "ab|xyz")
    with caplog.at_level(logging.ERROR):
        assert mgr.get_string_array("tags", ["default"]) == []
    assert any("Corrupt preference file for tags" in r.getMessage() for r in caplog.records)


def test_corrupt_save_file_loads_empty(tmp_path: Path, caplog) -> None:
    mgr = _manager(tmp_path)
    mgr.set_int("coins", 3)
    mgr.save_path.write_text("{ this is not json", encoding="utf-8")

    loads = []
    mgr.events.on_load(lambda: loads.append(1))
    with caplog.at_level(logging.ERROR):
        mgr.load()

    assert mgr.keys() == []
    assert loads == [1]
    assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_save_failure_keeps_memory_state(tmp_path: Path, caplog) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    mgr = _manager(blocker)

    with caplog.at_level(logging.ERROR):
        mgr.set_int("coins", 9)
        assert mgr.save() is False

    assert mgr.get_int("coins") == 9
    assert any("only held in memory" in r.getMessage() for r in caplog.records)


def test_export_and_replace_document(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    mgr.set_int("a", 1)
    doc = json.loads(mgr.get_save_json())
    assert doc == {"a": 1}

    assert mgr.set_save_from_json('{"b": "two", "c": 3.5, "d": true}')
    assert mgr.keys() == ["b", "c", "d"]
    assert mgr.get_bool("d") is True
    # replacement is persisted
    assert json.loads(mgr.save_path.read_text(encoding="utf-8")) == {"b": "two", "c": 3.5, "d": 1}


def test_invalid_document_is_rejected(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    mgr.set_int("a", 1)
    assert mgr.set_save_from_json("[]") is False
    assert mgr.set_save_from_json('{"nested": {"x": 1}}') is False
    assert mgr.keys() == ["a"]


def test_delete_key(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    mgr.set_int("a", 1)
    mgr.set_int("b", 2)
    mgr.delete_key("a")
    mgr.delete_key("never-there")

    assert not mgr.has_save_key("a")
    assert json.loads(mgr.save_path.read_text(encoding="utf-8")) == {"b": 2}


def test_load_is_deferred_until_first_use(tmp_path: Path) -> None:
    _manager(tmp_path).set_int("coins", 4)

    mgr = _manager(tmp_path, autoload=False)
    assert mgr.state is LifecycleState.UNINITIALIZED
    assert mgr.get_int("coins") == 4
    assert mgr.state is LifecycleState.LOADED


def test_set_string_requires_text(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    with pytest.raises(TypeError):
        mgr.set_string("name", 5)  # type: ignore[arg-type]


def test_closed_manager_refuses_use(tmp_path: Path) -> None:
    with _manager(tmp_path) as mgr:
        mgr.set_int("a", 1)
    assert mgr.state is LifecycleState.CLOSED
    with pytest.raises(RuntimeError):
        mgr.get_int("a")


def test_config_from_env(tmp_path: Path) -> None:
    cfg = SaveConfig.from_env({"SAVE_SYSTEM_APP_ID": "com.example.game", "SAVE_SYSTEM_HOME": str(tmp_path)})
    assert cfg.save_path() == tmp_path / "com.example.game.gameData"
    assert cfg.legacy_path() == tmp_path / "legacy_prefs.json"

    cfg = SaveConfig.from_env({}, app_identity="other", data_dir=tmp_path)
    assert cfg.save_path() == tmp_path / "other.gameData"

    with pytest.raises(ValueError):
        SaveConfig(app_identity="../escape", data_dir=tmp_path)


def test_lone_surrogate_text_is_saved(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    mgr.set_string("name", "bad\ud800")
    assert mgr.save() is True

    assert _manager(tmp_path).get_string("name") == "bad\ud800"


def test_lone_surrogate_from_legacy_is_migrated(tmp_path: Path) -> None:
    from save_system import JsonLegacyPreferences

    mgr = _manager(tmp_path, legacy=JsonLegacyPreferences(data={"name": "bad\ud800"}))
    assert mgr.get_string("name", "d") == "bad\ud800"
    assert _manager(tmp_path).get_string("name", "d") == "bad\ud800"


def test_bad_string_array_keeps_previous_value(tmp_path: Path) -> None:
    mgr = _manager(tmp_path)
    assert mgr.set_string_array("tags", ["ab", "xyz"])
    on_disk = mgr.save_path.read_text(encoding="utf-8")

    assert mgr.set_string_array("tags", ["x" * 256]) is False
    assert mgr.set_string_array("tags", ["ok", None]) is False

    assert mgr.get_string_array("tags") == ["ab", "xyz"]
    assert mgr.save_path.read_text(encoding="utf-8") == on_disk


def test_open_save_manager_uses_legacy_file_next_to_save(tmp_path: Path) -> None:
    from save_system import open_save_manager

    (tmp_path / "legacy_prefs.json").write_text(json.dumps({"score": 10}), encoding="utf-8")
    with open_save_manager(home=tmp_path, app_identity="game") as mgr:
        assert mgr.has_any_save_key("score")
        assert mgr.get_int("score") == 10

    with open_save_manager(home=tmp_path / "empty", app_identity="game") as mgr:
        assert not mgr.has_any_save_key("score")
