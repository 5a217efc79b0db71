"""Unit tests for local flag storage."""

import json

from src.config.flag_store import InMemoryFlagStore, JsonFileFlagStore, ZONE_CREATED_FLAG


class TestJsonFileFlagStore:
    """Tests for the file-backed flag store."""

    def test_unset_flag_is_false(self, tmp_path):
        store = JsonFileFlagStore(str(tmp_path / "flags.json"))

        assert store.get_flag(ZONE_CREATED_FLAG) is False

    def test_flag_survives_new_instance(self, tmp_path):
        path = str(tmp_path / "nested" / "flags.json")
        JsonFileFlagStore(path).set_flag(ZONE_CREATED_FLAG, True)

        assert JsonFileFlagStore(path).get_flag(ZONE_CREATED_FLAG) is True
        with open(path) as fh:
            assert json.load(fh) == {ZONE_CREATED_FLAG: True}

    def test_other_flags_preserved(self, tmp_path):
        store = JsonFileFlagStore(str(tmp_path / "flags.json"))
        store.set_flag("other", True)
        store.set_flag(ZONE_CREATED_FLAG, True)
        store.set_flag("other", False)

        assert store.get_flag(ZONE_CREATED_FLAG) is True
        assert store.get_flag("other") is False

    def test_corrupt_file_reads_as_unset(self, tmp_path):
        path = tmp_path / "flags.json"
        path.write_text("{not json")

        store = JsonFileFlagStore(str(path))

        assert store.get_flag(ZONE_CREATED_FLAG) is False
        store.set_flag(ZONE_CREATED_FLAG, True)
        assert store.get_flag(ZONE_CREATED_FLAG) is True

    def test_non_object_file_reads_as_unset(self, tmp_path):
        path = tmp_path / "flags.json"
        path.write_text("[true]")

        assert JsonFileFlagStore(str(path)).get_flag(ZONE_CREATED_FLAG) is False

    def test_only_json_true_counts_as_set(self, tmp_path):
        path = tmp_path / "flags.json"
        path.write_text(json.dumps({ZONE_CREATED_FLAG: "true", "zero": "0", "one": 1, "real": True}))

        store = JsonFileFlagStore(str(path))

        assert store.get_flag(ZONE_CREATED_FLAG) is False
        assert store.get_flag("zero") is False
        assert store.get_flag("one") is False
        assert store.get_flag("real") is True


def test_in_memory_flag_store():
    store = InMemoryFlagStore({"a": True})

    assert store.get_flag("a") is True
    assert store.get_flag("b") is False
    store.set_flag("b", 1)
    assert store.get_flag("b") is True
