from devenvd.errors.base import DevEnvError


class RuntimeCommandError(DevEnvError):
    def __init__(self, stage: str, message: str, log: str = ''):
        self.stage = stage
        self.log = log
        super().__init__(f'{message}\n{log}'.strip())


class HealthTimeoutError(DevEnvError):
    def __init__(self, timeout: float, not_ready: list[str]):
        self.timeout = timeout
        self.not_ready = not_ready
        super().__init__(
            f'Timeout waiting for services to become healthy after {timeout}s, '
            f'not ready: {", ".join(not_ready) or "-"}'
        )


class OperationStateError(DevEnvError):
    pass


class UnknownServiceError(DevEnvError):
    def __init__(self, service: str):
        self.service = service
        super().__init__(f'No such service: {service}')
