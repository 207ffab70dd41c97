"""
Bulk action bar: a view over a selection count and a set of callbacks.

The bar owns no selection. Delete is the only irreversible action and only
runs through request_delete() -> confirm_delete(); cancel_delete() leaves
everything as it was.
"""

from typing import Any, Callable, Dict, Optional


class ConfirmationRequired(Exception):
    """Raised when a delete is confirmed without an open confirmation dialog."""


class BulkActionBar:
    def __init__(
        self,
        selected_count: int,
        on_mark_in_progress: Callable[[], Any],
        on_mark_completed: Callable[[], Any],
        on_delete: Callable[[], Any],
        on_clear_selection: Callable[[], Any],
    ):
        self.selected_count = selected_count
        self.on_mark_in_progress = on_mark_in_progress
        self.on_mark_completed = on_mark_completed
        self.on_delete = on_delete
        self.on_clear_selection = on_clear_selection
        self.delete_dialog_open = False

    @property
    def visible(self) -> bool:
        return self.selected_count > 0

    def render(self) -> Optional[Dict[str, Any]]:
        if not self.visible:
            return None
        plural = "" if self.selected_count == 1 else "s"
        view = {
            "label": f"{self.selected_count} request{plural} selected",
            "hint": "Bulk actions available",
            "actions": ["mark_in_progress", "mark_completed", "delete", "clear_selection"],
        }
        if self.delete_dialog_open:
            view["dialog"] = {
                "title": f"Delete {self.selected_count} requests?",
                "description": (
                    "This action cannot be undone. This will permanently delete "
                    "the selected requests from the database."
                ),
                "actions": ["cancel", "delete"],
            }
        return view

    def _require_visible(self) -> None:
        if not self.visible:
            raise ValueError("No requests selected")

    def mark_in_progress(self) -> Any:
        self._require_visible()
        return self.on_mark_in_progress()

    def mark_completed(self) -> Any:
        self._require_visible()
        return self.on_mark_completed()

    def clear_selection(self) -> Any:
        self._require_visible()
        return self.on_clear_selection()

    def request_delete(self) -> None:
        """Open the confirmation dialog. Nothing is deleted yet."""
        self._require_visible()
        self.delete_dialog_open = True

    def confirm_delete(self) -> Any:
        if not self.delete_dialog_open:
            raise ConfirmationRequired("Delete must be confirmed through the dialog")
        try:
            return self.on_delete()
        finally:
            self.delete_dialog_open = False

    def cancel_delete(self) -> None:
        self.delete_dialog_open = False
