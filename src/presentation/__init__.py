"""Console presentation of contacts."""

from .console_view import ConsoleContactsView, render_state

__all__ = ["ConsoleContactsView", "render_state"]
