from devenvd.errors.base import DevEnvError


class EnvironmentConfigError(DevEnvError):
    pass


class CyclicDependencyError(EnvironmentConfigError):
    def __init__(self, service: str, path: list[str] | None = None):
        self.service = service
        self.path = path or [service]
        super().__init__(f'Circular dependency detected: {" -> ".join(self.path)}')


class BackupDisabledError(EnvironmentConfigError):
    def __init__(self, project_name: str):
        super().__init__(f'Backup is not enabled for {project_name}')
