"""User-facing alert and confirmation surface.

``RecordTable`` never prints.  Blocking alerts and delete confirmations go
through a ``Notifier`` supplied by the front end.
"""

from typing import Protocol


class Notifier(Protocol):
    """Alert/confirm interface the table reports through."""

    def alert(self, message: str) -> None:
        """Show a blocking message to the user."""
        ...

    def confirm(self, message: str) -> bool:
        """Ask the user a yes/no question; block until answered."""
        ...
