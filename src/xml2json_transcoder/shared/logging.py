"""Structured logging for XML to JSON transcoding.

Every record carries the emitting component and the correlation ID of the
conversion it belongs to, so log lines from concurrent conversions can be
told apart. The pipeline only logs at debug level; callers guard costly
summaries with ``is_enabled_for``.
"""

import logging
from typing import Any, Dict, Optional


class CorrelationLogger:
    """Debug logger tagging each record with ``component`` and ``correlation_id``.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Conversion the records belong to
        component: Pipeline stage; defaults to the last part of ``name``
    """

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.rsplit(".", 1)[-1]

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        tagged = {"component": self.component, "correlation_id": self.correlation_id}
        if extra:
            tagged.update(extra)
        return tagged

    def is_enabled_for(self, level: int) -> bool:
        """Check whether records of ``level`` would be emitted."""
        return self.logger.isEnabledFor(level)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.logger.debug(message, extra=self._get_extra(extra))


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a logger for one pipeline stage of one conversion."""
    return CorrelationLogger(name, correlation_id, component)
