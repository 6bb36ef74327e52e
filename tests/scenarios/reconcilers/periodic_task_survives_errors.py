import asyncio

import vedro

from devenvd.core.periodic import PeriodicTask


class Scenario(vedro.Scenario):
    async def given_tick_failing_every_other_time(self):
        self.ticks = 0
        self.errors = []

        async def tick():
            self.ticks += 1
            if self.ticks % 2:
                raise ValueError(f'tick {self.ticks} failed')

        self.task = PeriodicTask('flaky', interval=0.01, tick=tick, on_error=self.errors.append)

    async def when_task_runs_for_a_while(self):
        self.task.start()
        await asyncio.sleep(0.2)
        self.was_running = self.task.running
        await self.task.stop()

    async def then_loop_should_keep_ticking_after_errors(self):
        assert self.was_running
        assert self.ticks > 2
        assert len(self.errors) >= 2
        assert str(self.errors[0]) == 'tick 1 failed'

    async def and_task_should_be_stopped(self):
        ticks = self.ticks
        await asyncio.sleep(0.05)
        assert not self.task.running
        assert self.ticks == ticks
