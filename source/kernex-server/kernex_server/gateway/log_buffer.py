"""In-memory ring buffer of recent gateway log lines."""

import logging
from collections import deque

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Loggers whose records are captured
GATEWAY_LOGGERS = ("kernex_server.gateway", "kernex_core.gateway", "pyftpdlib")


class GatewayLogBuffer(logging.Handler):
    """Logging handler keeping the last ``capacity`` formatted records."""

    def __init__(self, capacity: int = 200, level: int = logging.INFO) -> None:
        super().__init__(level)
        self._lines: deque[str] = deque(maxlen=capacity)
        self.setFormatter(logging.Formatter(LOG_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
        except Exception:
            self.handleError(record)
            return
        with self.lock:
            self._lines.append(line)

    def lines(self, limit: int | None = None) -> list[str]:
        """Return buffered lines, oldest first, optionally only the last ``limit``."""
        with self.lock:
            lines = list(self._lines)
        if limit is not None:
            lines = lines[-limit:] if limit > 0 else []
        return lines

    def clear(self) -> None:
        with self.lock:
            self._lines.clear()

    def attach(self, names: tuple[str, ...] = GATEWAY_LOGGERS) -> None:
        """Attach this handler to the gateway loggers."""
        for name in names:
            logging.getLogger(name).addHandler(self)

    def detach(self, names: tuple[str, ...] = GATEWAY_LOGGERS) -> None:
        """Remove this handler from the gateway loggers."""
        for name in names:
            logging.getLogger(name).removeHandler(self)
