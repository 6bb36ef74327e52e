from copy import deepcopy
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from datetime import timezone
from enum import Enum
from typing import Callable
from uuid import uuid4

from devenvd.core.config import Config
from devenvd.errors.lifecycle import OperationStateError

OperationId = str


class OperationType(str, Enum):
    CREATE = 'create'
    START = 'start'
    STOP = 'stop'
    RESTART = 'restart'
    DESTROY = 'destroy'
    SCALE = 'scale'
    BACKUP = 'backup'
    RESTORE = 'restore'


class OperationStatus(str, Enum):
    PENDING = 'pending'
    RUNNING = 'running'
    COMPLETED = 'completed'
    FAILED = 'failed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in (OperationStatus.COMPLETED, OperationStatus.FAILED, OperationStatus.CANCELLED)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def make_operation_id() -> OperationId:
    return f'op_{uuid4().hex[:12]}'


@dataclass
class Operation:
    id: OperationId
    type: OperationType
    status: OperationStatus = OperationStatus.PENDING
    progress: int = 0
    logs: list[str] = field(default_factory=list)
    start_time: datetime = field(default_factory=utc_now)
    end_time: datetime | None = None
    error: str | None = None
    metadata: dict = field(default_factory=dict)

    def as_json(self) -> dict:
        return {
            'id': self.id,
            'type': self.type.value,
            'status': self.status.value,
            'progress': self.progress,
            'logs': list(self.logs),
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'error': self.error,
            'metadata': deepcopy(self.metadata),
        }


class OperationTracker:
    """
    Owns every Operation record of the process.

    pending -> running -> completed | failed | cancelled
    Progress only grows and reaches 100 on completion only.
    Terminal records are immutable, oldest of them are evicted past retention limit.
    Readers get copies.
    """

    def __init__(self, config=Config, on_update: Callable[[Operation], None] | None = None):
        self.config = config()
        self._retention = self.config.operations_retention
        self._operations: dict[OperationId, Operation] = {}
        self._on_update = on_update

    def _notify(self, operation: Operation) -> None:
        if self._on_update is not None:
            self._on_update(deepcopy(operation))

    def _get(self, operation_id: OperationId) -> Operation:
        if operation_id not in self._operations:
            raise OperationStateError(f'Unknown operation: {operation_id}')
        return self._operations[operation_id]

    def _get_active(self, operation_id: OperationId) -> Operation:
        operation = self._get(operation_id)
        if operation.status.is_terminal:
            raise OperationStateError(
                f'Operation {operation_id} is already {operation.status.value}'
            )
        return operation

    def _finish(self, operation: Operation, status: OperationStatus) -> None:
        operation.status = status
        operation.end_time = utc_now()
        self._evict()
        self._notify(operation)

    def _evict(self) -> None:
        terminal = [op_id for op_id, op in self._operations.items() if op.status.is_terminal]
        for op_id in terminal[:max(len(terminal) - self._retention, 0)]:
            del self._operations[op_id]

    def begin(self, type: OperationType, metadata: dict | None = None) -> Operation:
        operation = Operation(id=make_operation_id(), type=type, metadata=dict(metadata or {}))
        self._operations[operation.id] = operation
        self._notify(operation)
        return deepcopy(operation)

    def run(self, operation_id: OperationId) -> None:
        operation = self._get_active(operation_id)
        if operation.status != OperationStatus.PENDING:
            raise OperationStateError(f'Operation {operation_id} is already running')
        operation.status = OperationStatus.RUNNING
        self._notify(operation)

    def advance(self, operation_id: OperationId, progress: int, log_line: str | None = None) -> None:
        operation = self._get_active(operation_id)
        if operation.status != OperationStatus.RUNNING:
            raise OperationStateError(f'Operation {operation_id} is not running')
        if not operation.progress <= progress < 100:
            raise OperationStateError(
                f'Progress of {operation_id} can only grow below 100: {operation.progress} -> {progress}'
            )
        operation.progress = progress
        if log_line is not None:
            operation.logs.append(log_line)
        self._notify(operation)

    def log(self, operation_id: OperationId, line: str) -> None:
        operation = self._get_active(operation_id)
        operation.logs.append(line)

    def set_metadata(self, operation_id: OperationId, key: str, value) -> None:
        operation = self._get_active(operation_id)
        operation.metadata[key] = value

    def complete(self, operation_id: OperationId, log_line: str | None = None) -> None:
        operation = self._get_active(operation_id)
        if operation.status != OperationStatus.RUNNING:
            raise OperationStateError(f'Operation {operation_id} is not running')
        operation.progress = 100
        if log_line is not None:
            operation.logs.append(log_line)
        self._finish(operation, OperationStatus.COMPLETED)

    def fail(self, operation_id: OperationId, error: str) -> None:
        operation = self._get_active(operation_id)
        operation.error = error
        operation.logs.append(f'Failed: {error}')
        self._finish(operation, OperationStatus.FAILED)

    def cancel(self, operation_id: OperationId) -> None:
        operation = self._get_active(operation_id)
        self._finish(operation, OperationStatus.CANCELLED)

    def get(self, operation_id: OperationId) -> Operation | None:
        if operation_id not in self._operations:
            return None
        return deepcopy(self._operations[operation_id])

    def list(self) -> list[Operation]:
        return [deepcopy(operation) for operation in self._operations.values()]
