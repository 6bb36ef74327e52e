import asyncio
from typing import Awaitable
from typing import Callable

from rich.text import Text

from devenvd.output.console import CONSOLE
from devenvd.output.styles import Style


class PeriodicTask:
    """
    Runs `tick` every `interval` seconds until stopped.
    Tick failures go to `on_error` and don't break the loop.
    """

    def __init__(self,
                 name: str,
                 interval: float,
                 tick: Callable[[], Awaitable[None]],
                 on_error: Callable[[Exception], None] | None = None):
        self.name = name
        self.interval = interval
        self._tick = tick
        self._on_error = on_error
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _loop(self) -> None:
        while True:
            try:
                await self._tick()
            except asyncio.CancelledError:
                raise
            except Exception as error:
                if self._on_error is None:
                    CONSOLE.print(Text(f'{self.name} tick failed: {error!r}', style=Style.bad))
                else:
                    self._on_error(error)
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
