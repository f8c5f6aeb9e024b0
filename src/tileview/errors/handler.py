import logging
from enum import Enum
from typing import Callable, Optional

from tileview.utils.signal import Signal


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorHandler:
    """Log recoverable failures and forward them to interested observers."""

    def __init__(self, logger: logging.Logger = None):
        self._logger = logger or logging.getLogger("tileview")
        self._ui_callback: Optional[Callable[[str, ErrorSeverity], None]] = None
        self.error_occurred = Signal()

    def register_ui_callback(self, callback: Callable[[str, ErrorSeverity], None]):
        self._ui_callback = callback

    def handle(self, error: Exception, severity: ErrorSeverity = ErrorSeverity.ERROR, context: dict = None):
        # Log the error
        log_method = getattr(self._logger, severity.value, self._logger.error)
        log_method("%s: %s", error.__class__.__name__, error, extra={"context": context or {}})

        self.error_occurred.emit(error, severity, context or {})

        # Notify UI
        if self._ui_callback and severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            self._ui_callback(str(error), severity)
