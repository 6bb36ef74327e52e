import os
from pathlib import Path


class Config:
    def __init__(self):
        self.runtime_binary: str | None = os.environ.get('DEVENVD_RUNTIME_BINARY')
        self.docker_host: str | None = os.environ.get('DOCKER_HOST')
        self.verbose_runtime_commands = bool(os.environ.get('VERBOSE_RUNTIME_OUTPUT', False))
        self.debug_runtime_commands = bool(os.environ.get('DEBUG_RUNTIME_COMMANDS', False))
        # create: wait for all services up
        self.health_convergence_timeout = float(os.environ.get('HEALTH_CONVERGENCE_TIMEOUT', 120))
        self.health_convergence_interval = float(os.environ.get('HEALTH_CONVERGENCE_INTERVAL', 5))
        self.metrics_interval = float(os.environ.get('METRICS_INTERVAL', 30))
        self.operations_retention = int(os.environ.get('OPERATIONS_RETENTION', 100))
        self.backups_directory: Path = Path(os.environ.get('BACKUPS_DIRECTORY', '.devenv-backups'))
        self.backup_image: str = os.environ.get('BACKUP_IMAGE', 'alpine:latest')
        self.port = int(os.environ.get('PORT', 80))
        # control server events feed, oldest events are dropped past it
        self.events_buffer = int(os.environ.get('EVENTS_BUFFER', 1000))
