"""Unit tests for the contacts view model state machine."""

import asyncio

import pytest

from src.config.flag_store import InMemoryFlagStore, ZONE_CREATED_FLAG
from src.error_handling.error_classifier import ErrorCategory
from src.error_handling.exceptions import BatchError, QueryError, ZoneError
from src.models.sync_models import SyncState
from src.sync.view_model import ContactsViewModel
from tests.fakes import InMemoryRecordStore, zone_error


class GatedQueryStore(InMemoryRecordStore):
    """Store whose prefix queries wait for a per-prefix event before answering."""

    def __init__(self):
        super().__init__()
        self.gates = {}

    async def query_records(self, record_type, predicate, zone_id):
        gate = self.gates.get(predicate.prefix)
        if gate is not None:
            await gate.wait()
        return await super().query_records(record_type, predicate, zone_id)


def make_view_model(store=None):
    store = store or InMemoryRecordStore()
    flags = InMemoryFlagStore()
    view_model = ContactsViewModel(store, flags)
    states = []
    view_model.subscribe(states.append)
    return view_model, store, flags, states


class TestContactsViewModel:
    """Transitions of the contacts view model."""

    def test_starts_idle(self):
        view_model, _, _, states = make_view_model()

        assert view_model.state == SyncState.idle()
        assert view_model.active_filter_prefix is None
        assert states == []

    @pytest.mark.asyncio
    async def test_initialize_keeps_idle(self):
        view_model, store, flags, states = make_view_model()

        await view_model.initialize()

        assert view_model.state.kind == "idle"
        assert states == []
        assert flags.get_flag(ZONE_CREATED_FLAG) is True

    @pytest.mark.asyncio
    async def test_refresh_publishes_loading_then_loaded(self):
        view_model, _, _, states = make_view_model()
        await view_model.initialize()
        await view_model.save_contacts(["Madi", "Simon", "Bob"])

        await view_model.refresh()

        assert [state.kind for state in states] == ["loading", "loaded"]
        assert sorted(view_model.state.names) == ["Bob", "Madi", "Simon"]
        assert view_model.state.prefix is None

    @pytest.mark.asyncio
    async def test_save_then_filtered_and_full_reads(self):
        view_model, _, _, _ = make_view_model()
        await view_model.initialize()

        ids = await view_model.save_contacts(["Madi", "Simon", "Bob"])
        assert len(ids) == 3

        view_model.active_filter_prefix = "M"
        await view_model.refresh()
        assert view_model.state == SyncState.loaded(["Madi"], "M")

        view_model.active_filter_prefix = None
        await view_model.refresh()
        assert sorted(view_model.state.names) == ["Bob", "Madi", "Simon"]

    @pytest.mark.asyncio
    async def test_refresh_before_initialize_is_errored(self):
        view_model, _, _, states = make_view_model()

        await view_model.refresh()

        assert view_model.state.is_error
        assert isinstance(view_model.state.error, QueryError)
        assert view_model.state.error.category == ErrorCategory.UNKNOWN_ITEM
        assert [state.kind for state in states] == ["loading", "errored"]

    @pytest.mark.asyncio
    async def test_setting_filter_does_not_transition(self):
        view_model, _, _, states = make_view_model()
        await view_model.initialize()

        view_model.active_filter_prefix = "B"

        assert states == []
        assert view_model.state.kind == "idle"

    @pytest.mark.asyncio
    async def test_partial_save_failure_does_not_error(self):
        view_model, store, _, states = make_view_model()
        await view_model.initialize()
        store.reject_names = {"Simon"}

        ids = await view_model.save_contacts(["Madi", "Simon", "Bob"])

        assert len(ids) == 2
        assert states == []
        await view_model.refresh()
        assert sorted(view_model.state.names) == ["Bob", "Madi"]

    @pytest.mark.asyncio
    async def test_total_save_failure_errors(self):
        view_model, store, _, _ = make_view_model()
        await view_model.initialize()
        store.errors["save_records"] = BatchError("offline", category=ErrorCategory.NETWORK)

        with pytest.raises(BatchError):
            await view_model.save_contacts(["Madi"])

        assert view_model.state.is_error
        assert view_model.state.error.is_network_error

    @pytest.mark.asyncio
    async def test_initialize_failure_errors_and_raises(self):
        view_model, store, flags, states = make_view_model()
        store.errors["ensure_zone"] = zone_error(ErrorCategory.NOT_AUTHENTICATED)

        with pytest.raises(ZoneError):
            await view_model.initialize()

        assert view_model.state.is_error
        assert view_model.state.error.is_auth_error
        assert flags.get_flag(ZONE_CREATED_FLAG) is False

    @pytest.mark.asyncio
    async def test_initialize_and_refresh(self):
        view_model, _, _, states = make_view_model()

        await view_model.initialize_and_refresh()

        assert [state.kind for state in states] == ["loading", "loaded"]
        assert view_model.state.names == ()

    @pytest.mark.asyncio
    async def test_initialize_and_refresh_stops_on_zone_failure(self):
        view_model, store, _, states = make_view_model()
        store.errors["ensure_zone"] = zone_error()

        await view_model.initialize_and_refresh()

        assert [state.kind for state in states] == ["errored"]
        assert store.fetch_calls == []

    @pytest.mark.asyncio
    async def test_stale_refresh_is_discarded(self):
        store = GatedQueryStore()
        view_model, _, _, states = make_view_model(store)
        await view_model.initialize()
        await view_model.save_contacts(["Madi", "Bob"])

        slow_gate = asyncio.Event()
        store.gates["M"] = slow_gate

        view_model.active_filter_prefix = "M"
        slow = asyncio.create_task(view_model.refresh())
        await asyncio.sleep(0)

        view_model.active_filter_prefix = "B"
        await view_model.refresh()
        assert view_model.state == SyncState.loaded(["Bob"], "B")

        slow_gate.set()
        await slow

        assert view_model.state == SyncState.loaded(["Bob"], "B")
        assert [state.kind for state in states] == ["loading", "loading", "loaded"]

    @pytest.mark.asyncio
    async def test_listener_errors_do_not_break_others(self):
        view_model, _, _, states = make_view_model()

        def broken(state):
            raise RuntimeError("listener bug")

        view_model.subscribe(broken)
        await view_model.initialize()
        await view_model.refresh()

        assert view_model.state.kind == "loaded"
        assert [state.kind for state in states] == ["loading", "loaded"]

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        view_model, _, _, _ = make_view_model()
        received = []
        unsubscribe = view_model.subscribe(received.append)
        unsubscribe()
        unsubscribe()

        await view_model.initialize()
        await view_model.refresh()

        assert received == []

    @pytest.mark.asyncio
    async def test_unexpected_refresh_failure_errors(self):
        view_model, store, _, states = make_view_model()
        await view_model.initialize()
        store.errors["fetch_zone_changes"] = RuntimeError("decoder exploded")

        await view_model.refresh()

        assert [state.kind for state in states] == ["loading", "errored"]
        assert isinstance(view_model.state.error, RuntimeError)
        assert not view_model.state.is_loading

    @pytest.mark.asyncio
    async def test_initialize_retry_clears_error(self):
        view_model, store, flags, states = make_view_model()
        store.errors["ensure_zone"] = zone_error()

        with pytest.raises(ZoneError):
            await view_model.initialize()
        del store.errors["ensure_zone"]
        await view_model.initialize()

        assert [state.kind for state in states] == ["errored", "idle"]
        assert view_model.state == SyncState.idle()
        assert flags.get_flag(ZONE_CREATED_FLAG) is True
