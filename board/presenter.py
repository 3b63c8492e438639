"""
Contract between the board controller and whatever renders it.

The controller only ever calls these methods; it never builds markup.
Subclasses override what they display. The base class draws nothing and
declines every confirmation, so destructive actions need a presenter
that actually asks.
"""
from board.models import FormState
from board.view_model import BoardView


class BoardPresenter:
    """Rendering layer for the events board."""

    def show_board(self, view: BoardView) -> None:
        """Paint the event list (or its empty state)."""

    def show_form(self, form: FormState) -> None:
        """Open the add/edit form."""

    def close_form(self) -> None:
        """Dismiss the add/edit form."""

    def show_error(self, message: str) -> None:
        """Tell the user something went wrong."""

    def confirm(self, message: str) -> bool:
        """Ask the user to confirm a destructive action."""
        return False
