"""
Opsboard — Domain errors

NormalizationError and CollaboratorError abort the reload in progress and
leave the previous snapshot in place. NotFound marks a targeted update or
selection that referenced an absent identity.
"""
from typing import Optional


class OpsboardError(Exception):
    """Base class for errors surfaced by the engine."""


class NormalizationError(OpsboardError):
    """A raw record does not satisfy the shape contract for its kind."""

    def __init__(self, kind: str, reason: str, record_id: Optional[str] = None):
        self.kind = kind
        self.reason = reason
        self.record_id = record_id
        where = f" id={record_id}" if record_id else ""
        super().__init__(f"invalid {kind} record{where}: {reason}")


class NotFound(OpsboardError):
    """No record with the given identity exists in the current snapshot."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class CollaboratorError(OpsboardError):
    """The external data source failed (network, storage, query)."""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")
