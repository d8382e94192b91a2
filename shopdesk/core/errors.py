"""
Error taxonomy for Shopdesk core operations

Services raise these; the API layer turns every ShopdeskError into a tagged
JSON error body (see shopdesk.main). Repositories wrap psycopg2 failures in
StoreError so callers never have to know about the driver.
"""
from typing import Any, Dict


class ShopdeskError(Exception):
    """Base class for all domain errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Tagged representation used in API error responses"""
        return {"type": self.kind, "message": self.message}


class ValidationError(ShopdeskError):
    """Caller-supplied input violates a precondition"""

    status_code = 422


class EmptySelectionError(ValidationError):
    """A batch operation was called with no orders selected"""

    def __init__(self, message: str = "At least one order must be selected"):
        super().__init__(message)


class NotFoundError(ShopdeskError):
    """Referenced order/variant/category does not exist"""

    status_code = 404

    def __init__(self, resource: str, identifier: Any):
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"resource": self.resource, "id": self.identifier})
        return data


class InsufficientStockError(ShopdeskError):
    """Stock reservation could not be satisfied for a variant"""

    status_code = 409

    def __init__(self, variant_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for variant {variant_id}: "
            f"requested {requested}, available {available}"
        )
        self.variant_id = variant_id
        self.requested = requested
        self.available = available

    @property
    def shortfall(self) -> int:
        return self.requested - self.available

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "variant_id": self.variant_id,
            "requested": self.requested,
            "available": self.available,
            "shortfall": self.shortfall,
        })
        return data


class InvalidTransitionError(ShopdeskError):
    """Requested status change is not reachable from the current status"""

    status_code = 409

    def __init__(self, from_status: str, to_status: str):
        super().__init__(f"Cannot move order from '{from_status}' to '{to_status}'")
        self.from_status = from_status
        self.to_status = to_status

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"from": self.from_status, "to": self.to_status})
        return data


class StoreError(ShopdeskError):
    """The persistence layer failed (network, constraint, timeout)"""

    status_code = 503

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"Store failure during {operation}: {cause}")
        self.operation = operation
        self.cause = cause
        # psycopg2 exposes SQLSTATE as pgcode (e.g. 23503 = foreign key violation)
        self.pgcode = getattr(cause, "pgcode", None)

    @property
    def is_foreign_key_violation(self) -> bool:
        return self.pgcode == "23503"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"operation": self.operation, "pgcode": self.pgcode})
        return data
