from enum import Enum
from enum import auto


class JobResult(Enum):
    GOOD = auto()
    BAD = auto()


class OperationError:
    """Failed runtime call. Keeps raw output so callers can decide what it means."""

    def __init__(self, log: str, command: str = '', returncode: int | None = None):
        self.log = log
        self.command = command
        self.returncode = returncode

    def __eq__(self, other):
        return other == JobResult.BAD

    def __contains__(self, text: str) -> bool:
        return text.lower() in self.log.lower()

    def __str__(self):
        return self.log.strip()

    def __repr__(self):
        return f'Runtime call `{self.command}` finished unsuccessful ({self.returncode}):\n{self.log}'


def failure_text(stdout: bytes, stderr: bytes) -> str:
    return f'Stdout:\n{stdout.decode("utf-8", "replace")}\n\nStderr:\n{stderr.decode("utf-8", "replace")}'
