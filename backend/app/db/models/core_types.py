import enum


class Role(str, enum.Enum):
    admin = "Admin"
    storekeeper = "Storekeeper"
    technician = "Technician"
    viewer = "Viewer"


class PartStatus(str, enum.Enum):
    spare = "Spare"
    installed = "Installed"
    faulty = "Faulty"
    obsolete = "Obsolete"


class Criticality(str, enum.Enum):
    high = "High"
    medium = "Medium"
    low = "Low"


class TxnType(str, enum.Enum):
    issue = "ISSUE"
    return_ = "RETURN"
    receive = "RECEIVE"
    adjustment = "ADJUSTMENT"


class PRStatus(str, enum.Enum):
    draft = "DRAFT"
    submitted = "SUBMITTED"
    approved = "APPROVED"
    rejected = "REJECTED"
    cancelled = "CANCELLED"


class POStatus(str, enum.Enum):
    draft = "DRAFT"
    sent = "SENT"
    partially_received = "PARTIALLY_RECEIVED"
    closed = "CLOSED"
    cancelled = "CANCELLED"


class ScheduleStatus(str, enum.Enum):
    scheduled = "SCHEDULED"
    completed = "COMPLETED"
    cancelled = "CANCELLED"


class ScheduleDisplayState(str, enum.Enum):
    """Derived from status, date and receipts; never stored."""

    scheduled = "Scheduled"
    due_soon = "Due Soon"
    delayed = "Delayed"
    partial_receive = "Partial Receive"
    completed = "Completed"
    cancelled = "Cancelled"
