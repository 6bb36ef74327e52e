from rich.console import Console
from rich.text import Text

from devenvd.output.styles import Style


class Logger:
    """Collects report lines and prints them as one block."""

    def __init__(self, console: Console, indent: str = ''):
        self._console = console
        self._indent = indent
        self._log: Text | None = None

    def log(self, text: Text | str, style: str = Style.regular):
        if isinstance(text, str):
            text = Text(text, style=style)
        line = Text(self._indent, style=Style.regular).append(text)
        if self._log is None:
            self._log = line
            return
        self._log.append(Text('\n', style=Style.regular).append(line))

    def flush(self):
        if self._log:
            self._console.print(self._log + Text(' ', style=Style.regular))
        self._log = None
