"""
Domain errors raised by the service layer.

Every service validates before it writes, so when one of these escapes the
session holds no partial change. The API maps them to HTTP statuses in
backend.app.main.
"""
from __future__ import annotations


class DomainError(Exception):
    """Base class: recoverable at the call boundary, message is user-facing."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InsufficientStockError(DomainError):
    def __init__(self, part_name: str, available: int):
        super().__init__(f"Insufficient stock for {part_name}. Available: {available}")
        self.part_name = part_name
        self.available = available


class OverReceiptError(DomainError):
    def __init__(self, part_name: str, outstanding: int, requested: int):
        super().__init__(
            f"Cannot receive {requested} of {part_name}: only {outstanding} outstanding"
        )
        self.part_name = part_name
        self.outstanding = outstanding
        self.requested = requested


class EmptyReceiptError(DomainError):
    def __init__(self, message: str = "Please specify at least one item to receive"):
        super().__init__(message)


class InvalidStateTransitionError(DomainError):
    pass


class InactiveSupplierError(InvalidStateTransitionError):
    def __init__(self, supplier_name: str):
        super().__init__(f"Supplier {supplier_name} is inactive")
        self.supplier_name = supplier_name


class AuthorizationError(DomainError):
    pass


class ConflictError(DomainError):
    pass


class DuplicateError(ConflictError):
    pass
