"""Tests for the error hierarchy and the shared error handler."""

import logging

import pytest

from tileview.errors import (
    DomainError,
    InfrastructureError,
    MapSourceNotFoundError,
    ProjectionError,
    TileAccessError,
    TileLoadingError,
    TileOutOfRangeError,
    TileViewError,
    ZoomUnsupported,
)
from tileview.errors.handler import ErrorHandler, ErrorSeverity


@pytest.mark.parametrize(
    "error, layer",
    [
        (ProjectionError("nan"), DomainError),
        (ZoomUnsupported("19"), DomainError),
        (TileOutOfRangeError("9, 9"), DomainError),
        (TileAccessError("gone"), InfrastructureError),
        (MapSourceNotFoundError("osm"), InfrastructureError),
    ],
)
def test_errors_share_one_root(error: Exception, layer: type) -> None:
    assert isinstance(error, layer)
    assert isinstance(error, TileViewError)


def test_tile_access_error_is_a_loading_error() -> None:
    assert issubclass(TileAccessError, TileLoadingError)


def test_handler_logs_at_the_severity_level(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tileview.tests.errors")
    handler = ErrorHandler(logger)
    seen = []
    handler.error_occurred.connect(lambda error, severity, context: seen.append((severity, context)))

    with caplog.at_level(logging.WARNING, logger="tileview.tests.errors"):
        handler.handle(TileAccessError("3/1/1 missing"), ErrorSeverity.WARNING, {"x": 1})

    assert [record.levelno for record in caplog.records] == [logging.WARNING]
    assert "TileAccessError" in caplog.records[0].getMessage()
    assert seen == [(ErrorSeverity.WARNING, {"x": 1})]


def test_ui_callback_only_for_errors() -> None:
    handler = ErrorHandler(logging.getLogger("tileview.tests.errors"))
    messages = []
    handler.register_ui_callback(lambda message, severity: messages.append((message, severity)))

    handler.handle(TileAccessError("quiet"), ErrorSeverity.INFO)
    handler.handle(TileAccessError("loud"), ErrorSeverity.ERROR)

    assert messages == [("loud", ErrorSeverity.ERROR)]
