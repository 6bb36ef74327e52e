from devenvd.errors.base import DevEnvError


class ControlServerError(DevEnvError):
    def __init__(self, message: str, kind: str = '', status: int | None = None):
        self.kind = kind
        self.status = status
        super().__init__(message)
