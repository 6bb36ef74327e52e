from abc import ABC
from abc import abstractmethod
from pathlib import Path

import yaml
from rich.text import Text

from devenvd.core.config import Config
from devenvd.core.environment_status import EnvironmentStatus
from devenvd.core.operations import utc_now
from devenvd.core.runtime_interface import RuntimeInterface
from devenvd.env_description.env_types import EnvironmentConfig
from devenvd.env_description.env_types import VolumeSpec
from devenvd.errors.lifecycle import RuntimeCommandError
from devenvd.helpers.jobs_result import JobResult
from devenvd.output.console import CONSOLE
from devenvd.output.styles import Style

MANIFEST_FILE_NAME = 'manifest.yaml'


def write_manifest(filename: str | Path, manifest: dict) -> None:
    with open(filename, 'w') as f:
        f.write(yaml.dump(manifest, sort_keys=False))


def read_manifest(filename: str | Path) -> dict:
    with open(filename) as f:
        return yaml.safe_load(f)


class BackupCoordinator(ABC):
    """Receives copies of config and status, and only volumes that are allowed to be archived."""

    @abstractmethod
    async def backup(self,
                     environment_config: EnvironmentConfig,
                     status: EnvironmentStatus,
                     volumes: list[VolumeSpec]) -> Path:
        ...


class ArchiveBackupCoordinator(BackupCoordinator):
    """
    Writes `<destination>/<project>-<timestamp>/`:
        manifest.yaml - environment description and status at backup time
        <volume>.tar.gz - one archive per named volume, made by a throwaway container
    """

    def __init__(self, runtime: RuntimeInterface, config=Config):
        self.config = config()
        self.runtime = runtime

    def _backup_directory(self, environment_config: EnvironmentConfig) -> Path:
        destination = environment_config.backup.destination or self.config.backups_directory
        timestamp = utc_now().strftime('%Y%m%dT%H%M%SZ')
        return Path(destination) / f'{environment_config.project_name}-{timestamp}'

    async def backup(self,
                     environment_config: EnvironmentConfig,
                     status: EnvironmentStatus,
                     volumes: list[VolumeSpec]) -> Path:
        directory = self._backup_directory(environment_config)
        directory.mkdir(parents=True, exist_ok=True)

        write_manifest(directory / MANIFEST_FILE_NAME, {
            'created_at': utc_now().isoformat(),
            'environment': environment_config.as_json(),
            'status': status.as_json(),
            'volumes': [volume.name for volume in volumes],
        })

        for volume in volumes:
            CONSOLE.print(Text(f'Archiving volume {volume.name}', style=Style.info))
            result = await self.runtime.run_service(
                name=f'{environment_config.project_name}_backup_{volume.name}',
                image=self.config.backup_image,
                volumes=(f'{volume.name}:/source:ro', f'{directory.absolute()}:/backup'),
                command=('tar', 'czf', f'/backup/{volume.name}.tar.gz', '-C', '/source', '.'),
                detach=False,
                auto_remove=True,
            )
            if result == JobResult.BAD:
                raise RuntimeCommandError('backup', f"Can't archive volume {volume.name}", str(result))

        return directory
