"""
Structured logging normalization.

Single contract for notification lifecycle logs:
- component
- operation
- identifier (optional)
- outcome
- duration_ms (optional, omitted if None)
- reason (optional)

Do not log notification titles, bodies or payloads.
"""
from logging import Logger
from typing import Optional


def log_event(
    logger: Logger,
    *,
    component: str,
    operation: str,
    outcome: str,
    identifier: Optional[str] = None,
    duration_ms: Optional[int] = None,
    reason: Optional[str] = None,
    level: str = "info",
    message: Optional[str] = None,
) -> None:
    """
    Emit structured log event.

    Args:
        logger: Logger instance
        component: Component name (e.g., "scheduling", "authorization")
        operation: Operation name (e.g., "schedule", "update", "refresh")
        outcome: Outcome (e.g., "success", "failed", "rejected")
        identifier: Notification identifier (optional)
        duration_ms: Duration in milliseconds (omitted if None)
        reason: Short non-PII explanation (optional)
        level: Log level ("info", "warning", "error", "critical", "debug")
        message: Optional override message (defaults to operation)
    """
    extra: dict = {
        "component": component,
        "operation": operation,
        "outcome": outcome,
    }
    if identifier is not None:
        extra["identifier"] = identifier
    if duration_ms is not None:
        extra["duration_ms"] = duration_ms
    if reason is not None:
        extra["reason"] = reason

    msg = message or f"{component} {operation} outcome={outcome}"
    if identifier is not None and message is None:
        msg = f"{msg} identifier={identifier}"
    log_method = getattr(logger, level.lower(), logger.info)
    log_method(msg, extra=extra)
