"""Base class for message routers."""

from __future__ import annotations

from typing import Any


class Router:
    """Handles requests for one message id.

    The three hooks run in order for every request; all do nothing here, so a
    subclass overrides only the ones it needs.
    """

    def pre_handle(self, request: Any) -> None:
        """Run before :meth:`handle`."""

    def handle(self, request: Any) -> None:
        """Handle the request."""

    def post_handle(self, request: Any) -> None:
        """Run after :meth:`handle`."""