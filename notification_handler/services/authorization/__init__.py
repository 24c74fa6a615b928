"""
Authorization Service Package
"""

from notification_handler.services.authorization.service import (
    AuthorizationMonitor,
    MonitorState,
)

__all__ = [
    "AuthorizationMonitor",
    "MonitorState",
]
