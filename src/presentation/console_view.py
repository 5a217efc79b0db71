"""Plain-text rendering of the contacts view model's state."""

import sys
from typing import Callable, List, Optional, TextIO

from ..models.sync_models import SyncState
from ..sync.view_model import ContactsViewModel


def render_state(state: SyncState) -> List[str]:
    """Return the lines that represent ``state``; idle renders nothing."""
    if state.kind == "loading":
        return ["Loading..."]

    if state.kind == "errored":
        return [f"Error: {state.error}"]

    if state.kind == "loaded":
        if state.prefix:
            header = f"Contacts starting with “{state.prefix}”"
        else:
            header = "All Contacts"
        return [header] + [f"  {name}" for name in sorted(state.names)]

    return []


class ConsoleContactsView:
    """Writes each state the view model publishes to a text stream."""

    def __init__(self, view_model: ContactsViewModel, stream: Optional[TextIO] = None):
        self.view_model = view_model
        self.stream = stream or sys.stdout
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.view_model.subscribe(self.render)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def render(self, state: SyncState) -> None:
        for line in render_state(state):
            print(line, file=self.stream)
        self.stream.flush()
