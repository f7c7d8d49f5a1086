"""End-to-end tests for the dataset driver loop over real files on disk."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from lib_layered_db import (
    DatasetDefinition,
    DatasetLoader,
    DefaultLocationResolver,
    LoaderState,
    LocationSettings,
    Placement,
    Primitive,
    YAMLDocumentLoader,
    as_uint16,
    as_uint32,
)
from tests.support import events, records_at


class RecordingDocumentLoader(YAMLDocumentLoader):
    """Document loader remembering every path it was asked to read."""

    def __init__(self) -> None:
        self.paths: list[str] = []

    def load(self, path: str):
        self.paths.append(path)
        return super().load(path)


def _entries(count: int) -> list[dict[str, object]]:
    return [{"Id": index + 1, "Name": f"Item {index + 1}"} for index in range(count)]


def _loader(definition: DatasetDefinition, settings: LocationSettings, **kwargs) -> DatasetLoader:
    return DatasetLoader(definition, resolver=DefaultLocationResolver(settings), **kwargs)


def test_missing_overlay_fails_after_base_entries_were_processed(diagnostics, settings, write_database) -> None:
    base = write_database(Path(settings.data_root) / "item_db.yml", "ItemDb", 3, _entries(5))
    loader = _loader(DatasetDefinition("ItemDb", 3, 2), settings)
    seen: list[tuple[int, str]] = []

    def callback(node, path):
        seen.append((as_uint32(node, "Id").value, path))
        return True

    assert loader.parse("item_db.yml", Placement.PLAIN, callback) is False

    assert seen == [(index, str(base)) for index in range(1, 6)]
    assert loader.counts == {str(base): 5}
    assert loader.state is LoaderState.FAILED
    status = records_at(diagnostics, logging.INFO)
    assert [record.getMessage() for record in status] == [f"Done reading '5' entries in '{base}'"]
    failure = [record for record in records_at(diagnostics, logging.ERROR) if record.context["event"] == "database_read_failed"]
    assert failure and failure[0].context["path"] == str(Path(settings.data_root) / "import" / "item_db.yml")
    assert failure[0].context["reason"] == "NotFound"


def test_outdated_base_warns_before_failing_on_missing_overlay(diagnostics, settings, write_database) -> None:
    write_database(Path(settings.data_root) / "item_db.yml", "ItemDb", 2, _entries(5))
    loader = _loader(DatasetDefinition("ItemDb", 3, 1), settings)

    assert loader.parse("item_db.yml", Placement.PLAIN, lambda node, path: True) is False

    emitted = events(diagnostics)
    assert emitted.count("database_version_outdated") == 1
    assert emitted.index("database_version_outdated") < emitted.index("database_read_failed")
    assert len(records_at(diagnostics, logging.WARNING)) == 1


def test_base_then_overlay_are_processed_in_order(settings, write_database) -> None:
    base = write_database(Path(settings.data_root) / "mob_db.yml", "MOB_DB", 1, _entries(3))
    overlay = write_database(Path(settings.data_root) / "import" / "mob_db.yml", "MOB_DB", 1, [{"Id": 2, "Name": "Override"}])
    loader = _loader(DatasetDefinition("MOB_DB", 1), settings)
    table: dict[int, str] = {}
    order: list[str] = []

    def callback(node, path):
        order.append(path)
        table[node.get("Id").convert(Primitive.UINT32)] = node.get("Name").convert(Primitive.STRING)
        return True

    assert loader.parse("mob_db.yml", "plain", callback) is True

    assert order == [str(base)] * 3 + [str(overlay)]
    assert table == {1: "Item 1", 2: "Override", 3: "Item 3"}
    assert loader.counts == {str(base): 3, str(overlay): 1}
    assert loader.state is LoaderState.DONE
    assert loader.root is not None and loader.root.path == str(overlay)
    assert loader.current_file is None


def test_rejected_entries_are_counted_out_but_do_not_abort(diagnostics, settings, write_database) -> None:
    base = write_database(Path(settings.data_root) / "item_db.yml", "ITEM_DB", 3, _entries(4))
    overlay = write_database(Path(settings.data_root) / "import" / "item_db.yml", "ITEM_DB", 3, [])
    loader = _loader(DatasetDefinition("ITEM_DB", 3), settings)
    calls: list[int] = []

    def callback(node, path):
        identifier = as_uint32(node, "Id").value
        calls.append(identifier)
        return identifier % 2 == 0

    assert loader.parse("item_db.yml", Placement.PLAIN, callback) is True

    assert calls == [1, 2, 3, 4]
    assert loader.counts == {str(base): 2, str(overlay): 0}
    messages = [record.getMessage() for record in records_at(diagnostics, logging.INFO)]
    assert messages == [f"Done reading '2' entries in '{base}'", f"Done reading '0' entries in '{overlay}'"]


def test_null_entries_are_skipped(settings) -> None:
    root = Path(settings.data_root)
    (root / "import").mkdir(parents=True)
    (root / "item_db.yml").write_text(
        "Header:\n  Type: ITEM_DB\n  Version: 3\nBody:\n  - Id: 1\n  -\n  - ~\n  - Id: 2\n",
        encoding="utf-8",
    )
    (root / "import" / "item_db.yml").write_text("Header:\n  Type: ITEM_DB\n  Version: 3\n", encoding="utf-8")
    loader = _loader(DatasetDefinition("ITEM_DB", 3), settings)
    seen: list[int] = []

    assert loader.parse("item_db.yml", Placement.PLAIN, lambda node, path: seen.append(node.line) or True) is True

    assert seen == [5, 8]
    assert loader.counts[str(root / "import" / "item_db.yml")] == 0


def test_incompatible_base_stops_before_body_and_overlay(diagnostics, settings, write_database) -> None:
    write_database(Path(settings.data_root) / "item_db.yml", "ITEM_DB", 9, _entries(2))
    write_database(Path(settings.data_root) / "import" / "item_db.yml", "ITEM_DB", 3, _entries(2))
    documents = RecordingDocumentLoader()
    loader = _loader(DatasetDefinition("ITEM_DB", 3), settings, document_loader=documents)
    calls: list[object] = []

    assert loader.parse("item_db.yml", Placement.PLAIN, lambda node, path: calls.append(node) or True) is False

    assert calls == []
    assert documents.paths == [str(Path(settings.data_root) / "item_db.yml")]
    assert loader.counts == {}
    assert loader.root is None
    assert "database_check_failed" in events(diagnostics)


def test_malformed_base_reports_parser_position(diagnostics, settings) -> None:
    base = Path(settings.data_root) / "item_db.yml"
    base.parent.mkdir(parents=True)
    base.write_text("Header:\n  Type: ITEM_DB\n  Version: 3\nBody:\n  - Id: 1\n   bad: [\n", encoding="utf-8")
    loader = _loader(DatasetDefinition("ITEM_DB", 3), settings)

    assert loader.parse("item_db.yml", Placement.PLAIN, lambda node, path: True) is False

    parse_errors = [record for record in records_at(diagnostics, logging.ERROR) if record.context["event"] == "database_parse_error"]
    assert len(parse_errors) == 1
    assert parse_errors[0].context["line"] is not None
    assert "(Line " in parse_errors[0].getMessage()


def test_unknown_placement_loads_nothing_and_succeeds(settings) -> None:
    documents = RecordingDocumentLoader()
    loader = _loader(DatasetDefinition("ITEM_DB", 3), settings, document_loader=documents)
    calls: list[object] = []

    assert loader.parse("item_db.yml", "elsewhere", lambda node, path: calls.append(node) or True) is True

    assert documents.paths == []
    assert calls == []
    assert loader.counts == {}
    assert loader.state is LoaderState.DONE


def test_split_and_config_placements(settings, write_database) -> None:
    split_base = write_database(Path(settings.data_root) / "re" / "skill_db.yml", "SKILL_DB", 1, _entries(2))
    write_database(Path(settings.data_root) / "import" / "skill_db.yml", "SKILL_DB", 1, [])
    conf_base = write_database(Path(settings.config_root) / "battle.yml", "BATTLE_CONF", 1, _entries(1))
    write_database(Path(settings.config_root) / "import" / "battle.yml", "BATTLE_CONF", 1, _entries(1))

    skills = _loader(DatasetDefinition("SKILL_DB", 1), settings)
    battle = _loader(DatasetDefinition("BATTLE_CONF", 1), settings)

    assert skills.parse("skill_db.yml", Placement.SPLIT, lambda node, path: True) is True
    assert battle.parse("battle.yml", Placement.CONFIG, lambda node, path: True) is True
    assert skills.counts[str(split_base)] == 2
    assert list(battle.counts.values()) == [1, 1]
    assert next(iter(battle.counts)) == str(conf_base)


def test_header_only_file_has_no_entries(settings, write_database) -> None:
    path = write_database(Path(settings.data_root) / "item_db.yml", "ITEM_DB", 3, None)
    loader = _loader(DatasetDefinition("ITEM_DB", 3), settings)

    assert loader.load(str(path)) is True
    assert list(loader.root.root.get("Body")) == []


def test_load_replaces_root_only_on_success(tmp_path: Path, write_database) -> None:
    first = write_database(tmp_path / "first.yml", "ITEM_DB", 3, _entries(1))
    second = write_database(tmp_path / "second.yml", "ITEM_DB", 3, _entries(2))
    wrong = write_database(tmp_path / "wrong.yml", "MOB_DB", 3, _entries(2))
    loader = DatasetLoader(DatasetDefinition("ITEM_DB", 3))

    assert loader.load(str(first)) is True
    assert loader.root.path == str(first)
    assert loader.load(str(second)) is True
    assert loader.root.path == str(second)
    assert loader.load(str(wrong)) is False
    assert loader.load(str(tmp_path / "missing.yml")) is False
    assert loader.root.path == str(second)


def test_callback_exceptions_propagate(settings, write_database) -> None:
    write_database(Path(settings.data_root) / "item_db.yml", "ITEM_DB", 3, _entries(1))
    loader = _loader(DatasetDefinition("ITEM_DB", 3), settings)

    def explode(node, path):
        raise RuntimeError("entry parser bug")

    with pytest.raises(RuntimeError, match="entry parser bug"):
        loader.parse("item_db.yml", Placement.PLAIN, explode)


def test_each_parse_starts_fresh_counts(settings, write_database) -> None:
    write_database(Path(settings.data_root) / "item_db.yml", "ITEM_DB", 3, _entries(1))
    write_database(Path(settings.data_root) / "import" / "item_db.yml", "ITEM_DB", 3, [])
    loader = _loader(DatasetDefinition("ITEM_DB", 3), settings)

    assert loader.parse("item_db.yml", Placement.PLAIN, lambda node, path: True)
    assert loader.parse("other_db.yml", Placement.PLAIN, lambda node, path: True) is False
    assert loader.counts == {}


def test_field_diagnostics_name_the_file_being_iterated(diagnostics, settings, write_database) -> None:
    base = write_database(Path(settings.data_root) / "item_db.yml", "ITEM_DB", 3, [{"Id": "bad"}])
    overlay = write_database(Path(settings.data_root) / "import" / "item_db.yml", "ITEM_DB", 3, [{"Id": 7}])
    loader = _loader(DatasetDefinition("ITEM_DB", 3), settings)

    def callback(node, path):
        return bool(as_uint32(node, "Id", 0)) and bool(as_uint16(node, "Slots"))

    assert loader.parse("item_db.yml", Placement.PLAIN, callback) is True

    located = [
        (record.context["event"], record.context["path"])
        for record in diagnostics.records
        if record.name == "lib_layered_db" and record.context["event"] in {"field_defaulted", "field_missing"}
    ]
    assert located == [
        ("field_defaulted", str(base)),
        ("field_missing", str(base)),
        ("field_missing", str(overlay)),
    ]
    diagnostics.clear()
    as_uint16(loader.root.root, "Slots")
    assert "path" not in diagnostics.records[-1].context


def test_current_file_is_cleared_when_a_later_file_fails(settings, write_database) -> None:
    base = write_database(Path(settings.data_root) / "item_db.yml", "ITEM_DB", 3, _entries(1))
    loader = _loader(DatasetDefinition("ITEM_DB", 3), settings)
    during: list[str | None] = []

    assert loader.parse("item_db.yml", Placement.PLAIN, lambda node, path: during.append(loader.current_file) or True) is False

    assert during == [str(base)]
    assert loader.current_file is None
