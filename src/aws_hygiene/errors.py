"""Error taxonomy for audit runs."""

from __future__ import annotations


class AuditError(Exception):
    """Base exception for audit failures."""

    pass


class ConfigurationError(AuditError):
    """Raised when the rule set or settings cannot be assembled.

    Always fatal to run startup: no resource is evaluated once this is raised.
    """

    pass


class ResourceTypeMismatch(AuditError):
    """Raised when a rule is invoked against a resource type it does not support."""

    def __init__(self, rule_name: str, resource_type: str, resource_id: str) -> None:
        self.rule_name = rule_name
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"Rule '{rule_name}' does not support {resource_type} resources "
            f"(resource '{resource_id}')"
        )


class PersistenceError(AuditError):
    """Raised when the store rejects a write after all retries."""

    def __init__(self, message: str, record: object | None = None) -> None:
        super().__init__(message)
        self.record = record


class ResourceSourceError(AuditError):
    """Raised when the resource source cannot list a resource kind."""

    def __init__(self, service: str, operation: str, message: str) -> None:
        self.service = service
        self.operation = operation
        super().__init__(f"{service}:{operation} failed: {message}")
