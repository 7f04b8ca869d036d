from __future__ import annotations


class BulkResult:
    """
    Per-record outcome of a bulk call.

    Bulk calls are a sequence of independent single-record operations: there
    is no atomicity across the set, a failure on one id leaves the others
    applied.
    """

    def __init__(self) -> None:
        self.succeeded: list[int] = []
        self.failed: list[dict] = []

    def ok(self, record_id: int) -> None:
        self.succeeded.append(record_id)

    def fail(self, record_id: int, error: str) -> None:
        self.failed.append({"id": record_id, "error": error})
