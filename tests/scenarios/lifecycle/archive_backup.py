import shutil
import tempfile
from pathlib import Path

import vedro

from contexts.environment_config import db_web_config
from contexts.orchestrator import orchestrator
from devenvd import ArchiveBackupCoordinator
from devenvd import BackupPolicy
from devenvd.core.backup import MANIFEST_FILE_NAME
from devenvd.core.backup import read_manifest
from helpers.fake_runtime import FakeRuntime
from helpers.fast_config import FastConfig


class Scenario(vedro.Scenario):
    async def given_backup_destination(self):
        self.destination = tempfile.mkdtemp(prefix='devenvd-backup-')
        vedro.defer(shutil.rmtree, self.destination, ignore_errors=True)

    async def given_environment(self):
        self.runtime = FakeRuntime()
        environment_config = db_web_config()._replace(
            backup=BackupPolicy(enabled=True, destination=self.destination)
        )
        self.orchestrator = orchestrator(
            environment_config,
            runtime=self.runtime,
            backup_coordinator=ArchiveBackupCoordinator(self.runtime, config=FastConfig),
        )

    async def when_user_backs_up_environment(self):
        self.operation = await self.orchestrator.backup()

    async def then_backup_should_be_written_to_destination(self):
        self.path = Path(self.operation.metadata['path'])
        assert self.path.parent == Path(self.destination)
        assert self.path.name.startswith('shop-')

    async def and_manifest_should_describe_environment(self):
        manifest = read_manifest(self.path / MANIFEST_FILE_NAME)
        assert manifest['volumes'] == ['shop-data']
        assert manifest['environment']['project_name'] == 'shop'
        assert manifest['status']['state'] == 'initializing'

    async def and_volume_should_be_archived_by_throwaway_container(self):
        assert self.runtime.called('run_service') == ['shop_backup_shop-data']
