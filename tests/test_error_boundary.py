from unittest.mock import MagicMock

from toolhub.core.error_boundary import HOME_PATH, ErrorBoundary


def test_renders_children_when_nothing_fails():
    boundary = ErrorBoundary("card")
    assert boundary.render(lambda x: x * 2, 21) == 42
    assert boundary.has_error is False


def test_fallback_after_failure_with_details_in_development():
    boundary = ErrorBoundary("card", show_details=True)

    view = boundary.render(MagicMock(side_effect=RuntimeError("db down")))

    assert boundary.has_error is True
    assert view["title"] == "Something went wrong"
    assert view["actions"] == ["reload", "go_to_dashboard"]
    assert view["home"] == HOME_PATH
    assert view["detail"] == "db down"


def test_details_hidden_in_production():
    boundary = ErrorBoundary("card", show_details=False)
    view = boundary.render(MagicMock(side_effect=RuntimeError("secret")))
    assert "detail" not in view


def test_errored_state_is_sticky():
    boundary = ErrorBoundary("card", show_details=True)
    boundary.render(MagicMock(side_effect=RuntimeError("first")))
    renderer = MagicMock(return_value="fine")

    view = boundary.render(renderer)

    renderer.assert_not_called()
    assert view["detail"] == "first"


def test_custom_fallback():
    boundary = ErrorBoundary("card", fallback={"error": True, "message": "Card unavailable"})
    assert boundary.render(MagicMock(side_effect=ValueError())) == {"error": True, "message": "Card unavailable"}
