from typing import TypedDict

OperationId = str

TERMINAL_STATUSES = ('completed', 'failed', 'cancelled')


class OperationJson(TypedDict):
    id: OperationId
    type: str
    status: str
    progress: int
    logs: list[str]
    start_time: str
    end_time: str | None
    error: str | None
    metadata: dict


def is_operation_done(operation: OperationJson) -> bool:
    return operation['status'] in TERMINAL_STATUSES
