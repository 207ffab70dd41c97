"""
Error boundary for rendered view sections.

A boundary wraps one section. The first exception raised while rendering it
flips the boundary into the errored state for good; later renders return the
fallback without calling the renderer again. Recovery is a user action
(reload, or navigate back to the dashboard).
"""

import logging
from typing import Any, Callable, Dict, Optional
from toolhub.config import settings

logger = logging.getLogger(__name__)

HOME_PATH = "/dashboard"


def show_error_details() -> bool:
    """Error messages are exposed in development builds only."""
    return not settings.is_production


def error_detail(exc: BaseException) -> Optional[str]:
    return str(exc) if show_error_details() else None


class ErrorBoundary:
    def __init__(self, name: str, show_details: Optional[bool] = None, fallback: Optional[Dict[str, Any]] = None):
        self.name = name
        self.show_details = show_error_details() if show_details is None else show_details
        self.custom_fallback = fallback
        self.error: Optional[BaseException] = None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def render(self, renderer: Callable[..., Any], *args, **kwargs) -> Any:
        if self.has_error:
            return self.fallback()
        try:
            return renderer(*args, **kwargs)
        except Exception as e:
            logger.exception(f"ErrorBoundary[{self.name}] caught an error: {e}")
            self.error = e
            return self.fallback()

    def fallback(self) -> Dict[str, Any]:
        if self.custom_fallback is not None:
            return dict(self.custom_fallback)
        view: Dict[str, Any] = {
            "error": True,
            "section": self.name,
            "title": "Something went wrong",
            "message": (
                "We're sorry, but something unexpected happened. "
                "Please try refreshing the page or go back to the dashboard."
            ),
            "actions": ["reload", "go_to_dashboard"],
            "home": HOME_PATH,
        }
        if self.show_details and self.error is not None:
            view["detail"] = str(self.error)
        return view
