import vedro

from devenvd.core.operations import OperationTracker
from devenvd.core.operations import OperationType
from helpers.fast_config import make_config


class Scenario(vedro.Scenario):
    async def given_tracker_keeping_two_finished_operations(self):
        self.tracker = OperationTracker(config=make_config(operations_retention=2))

    async def given_running_operation(self):
        self.running = self.tracker.begin(OperationType.CREATE)
        self.tracker.run(self.running.id)

    async def when_user_finishes_three_operations(self):
        self.finished = []
        for _ in range(3):
            operation = self.tracker.begin(OperationType.STOP)
            self.tracker.run(operation.id)
            self.tracker.complete(operation.id)
            self.finished.append(operation.id)

    async def then_oldest_finished_operation_should_be_evicted(self):
        assert self.tracker.get(self.finished[0]) is None

    async def and_latest_finished_operations_should_be_kept(self):
        assert [operation.id for operation in self.tracker.list()] == [self.running.id, *self.finished[1:]]
