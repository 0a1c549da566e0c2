"""
Audit trail for schedule generation and substitution decisions.

The sink is an outside collaborator: a failing sink is logged and never
blocks the operation being audited.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional


logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("shiftroster.audit")


class BaseAuditSink(ABC):
    """Abstract base for audit sinks."""

    @abstractmethod
    def record(
        self,
        action: str,
        actor_id: Optional[int],
        description: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        ...


class LoggingAuditSink(BaseAuditSink):
    """Writes audit entries to the shiftroster.audit logger."""

    def record(self, action, actor_id, description, metadata=None) -> None:
        audit_logger.info(f"{action} by employee {actor_id}: {description} {metadata or {}}")


def record_safely(
    sink: Optional[BaseAuditSink],
    action: str,
    actor_id: Optional[int],
    description: str,
    metadata: Optional[dict[str, Any]] = None,
) -> bool:
    """Record an audit entry; returns False if the sink failed."""
    if sink is None:
        return True
    try:
        sink.record(action, actor_id, description, metadata)
        return True
    except Exception as e:
        logger.error(f"Audit sink failed for {action}: {e}")
        return False


def get_audit_sink() -> BaseAuditSink:
    return LoggingAuditSink()
