"""Unit tests for console rendering and the command-line entry point."""

import io

import pytest
from unittest.mock import patch

from src.__main__ import build_parser, build_view_model, main
from src.config.flag_store import InMemoryFlagStore
from src.error_handling.error_classifier import ErrorCategory
from src.error_handling.exceptions import QueryError
from src.models.sync_models import SyncState
from src.presentation.console_view import ConsoleContactsView, render_state
from src.sync.view_model import ContactsViewModel
from tests.fakes import InMemoryRecordStore, zone_error


class TestRenderState:
    """Tests for render_state."""

    def test_idle_renders_nothing(self):
        assert render_state(SyncState.idle()) == []

    def test_loading(self):
        assert render_state(SyncState.loading()) == ["Loading..."]

    def test_loaded_all_sorted(self):
        lines = render_state(SyncState.loaded(["Simon", "Bob", "Madi"]))

        assert lines == ["All Contacts", "  Bob", "  Madi", "  Simon"]

    def test_loaded_with_prefix(self):
        lines = render_state(SyncState.loaded(["Madi"], prefix="M"))

        assert lines == ["Contacts starting with “M”", "  Madi"]

    def test_error(self):
        error = QueryError("zone Contacts does not exist", category=ErrorCategory.UNKNOWN_ITEM)

        assert render_state(SyncState.errored(error)) == ["Error: zone Contacts does not exist"]


class TestConsoleContactsView:
    """Tests for the subscribed console view."""

    @pytest.mark.asyncio
    async def test_renders_each_transition(self):
        store = InMemoryRecordStore()
        view_model = ContactsViewModel(store, InMemoryFlagStore())
        stream = io.StringIO()
        view = ConsoleContactsView(view_model, stream)
        view.attach()
        view.attach()

        await view_model.initialize()
        await view_model.save_contacts(["Madi"])
        await view_model.refresh()

        assert stream.getvalue() == "Loading...\nAll Contacts\n  Madi\n"

        view.detach()
        await view_model.refresh()
        assert stream.getvalue().count("Loading...") == 1


class TestCommandLine:
    """Tests for the console entry point."""

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_add_then_list(self, capsys):
        view_model = ContactsViewModel(InMemoryRecordStore(), InMemoryFlagStore())

        with patch("src.__main__.build_view_model", return_value=view_model):
            assert main(["add", "Madi", "Bob"]) == 0
            assert main(["list", "--prefix", "M"]) == 0

        out = capsys.readouterr().out
        assert "All Contacts\n  Bob\n  Madi\n" in out
        assert "Contacts starting with “M”\n  Madi\n" in out

    def test_zone_failure_exit_code(self, capsys):
        store = InMemoryRecordStore()
        store.errors["ensure_zone"] = zone_error()
        view_model = ContactsViewModel(store, InMemoryFlagStore())

        with patch("src.__main__.build_view_model", return_value=view_model):
            assert main(["list"]) == 1

        assert "Error: zone creation failed" in capsys.readouterr().out

    def test_build_view_model_applies_overrides(self, monkeypatch):
        monkeypatch.setenv("CONTACTS_TABLE_NAME", "env-table")
        monkeypatch.setenv("AWS_REGION", "eu-west-1")
        monkeypatch.setenv("CONTACTS_ZONE_NAME", "Friends")

        with patch("src.__main__.DynamoDBRecordStore") as store_cls, \
                patch("src.__main__.JsonFileFlagStore", return_value=InMemoryFlagStore()):
            view_model = build_view_model(build_parser().parse_args(["--table", "cli-table", "list"]))

        config = store_cls.call_args[1]["config"]
        assert config.table_name == "cli-table"
        assert config.region == "eu-west-1"
        assert view_model.query.zone_id == "Friends"
