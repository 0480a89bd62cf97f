# control-plane/core/logutils.py
"""
Request-scoped loggers

Components receive a logger from their caller instead of reaching for a
module global, so each admission request or reconcile pass carries its own
context fields (subnet name, operation, pod) in every line it emits.
"""

import logging
from typing import Any, MutableMapping, Tuple, Union


class ContextLogger(logging.LoggerAdapter):
    """LoggerAdapter that renders its context as key=value pairs"""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        if not self.extra:
            return msg, kwargs
        fields = " ".join(f"{key}={value}" for key, value in self.extra.items())
        return f"{msg} [{fields}]", kwargs

    def with_fields(self, **fields: Any) -> "ContextLogger":
        merged = dict(self.extra or {})
        merged.update(fields)
        return ContextLogger(self.logger, merged)


LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


def request_logger(name: str, **fields: Any) -> ContextLogger:
    """Build a fresh logger for one request"""
    return ContextLogger(logging.getLogger(name), fields)
