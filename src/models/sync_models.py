"""Synchronization state, change feed and batch outcome models."""

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple

from .contact_models import RemoteRecord


@dataclass(frozen=True)
class ChangeToken:
    """Opaque cursor into one zone's change log.

    ``value`` is whatever the store issued; callers only ever pass it back.
    """
    zone_id: str
    value: str

    def __post_init__(self):
        """Validate fields."""
        if not self.zone_id.strip():
            raise ValueError("zone_id cannot be empty")


@dataclass
class ChangePage:
    """One page of a zone's change feed."""
    records: List[RemoteRecord]
    next_token: ChangeToken
    has_more: bool


@dataclass(frozen=True)
class StartsWith:
    """Case-sensitive, prefix-anchored match on a string field."""
    field_name: str
    prefix: str

    def matches(self, record: RemoteRecord) -> bool:
        value = record.get(self.field_name)
        return isinstance(value, str) and value.startswith(self.prefix)


@dataclass
class RecordFailure:
    """Why a single record in a batch was not saved."""
    record: RemoteRecord
    error_code: str
    message: str
    is_retryable: bool = False


@dataclass
class BatchSaveResult:
    """Outcome of a multi-record save: the persisted subset plus per-record failures."""
    saved: List[RemoteRecord] = field(default_factory=list)
    failures: List[RecordFailure] = field(default_factory=list)

    @property
    def saved_ids(self) -> List[str]:
        return [record.record_id for record in self.saved if record.record_id]

    @property
    def is_partial(self) -> bool:
        return bool(self.saved) and bool(self.failures)


StateKind = Literal["idle", "loading", "loaded", "errored"]


@dataclass(frozen=True)
class SyncState:
    """State published by the contacts view model.

    Use the ``idle``/``loading``/``loaded``/``errored`` constructors rather
    than building instances directly. ``names`` keeps the order records
    arrived in, duplicates included; that order carries no meaning.
    """
    kind: StateKind
    names: Tuple[str, ...] = ()
    prefix: Optional[str] = None
    error: Optional[BaseException] = None

    def __post_init__(self):
        """Validate state payload."""
        if self.kind not in ("idle", "loading", "loaded", "errored"):
            raise ValueError(f"Invalid state kind: {self.kind}")
        if self.kind == "errored" and self.error is None:
            raise ValueError("errored state requires an error")

    @classmethod
    def idle(cls) -> "SyncState":
        return cls(kind="idle")

    @classmethod
    def loading(cls) -> "SyncState":
        return cls(kind="loading")

    @classmethod
    def loaded(cls, names, prefix: Optional[str] = None) -> "SyncState":
        return cls(kind="loaded", names=tuple(names), prefix=prefix)

    @classmethod
    def errored(cls, error: BaseException) -> "SyncState":
        return cls(kind="errored", error=error)

    @property
    def is_loading(self) -> bool:
        return self.kind == "loading"

    @property
    def is_error(self) -> bool:
        return self.kind == "errored"
