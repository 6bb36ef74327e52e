import vedro

from contexts.environment_config import db_web_config
from contexts.orchestrator import orchestrator
from devenvd.errors.lifecycle import RuntimeCommandError
from helpers.fake_runtime import FakeRuntime


class Scenario(vedro.Scenario):
    async def given_runtime_without_daemon(self):
        self.runtime = FakeRuntime(failures={
            ('runtime_version', ''): 'Cannot connect to the Docker daemon at unix:///var/run/docker.sock',
        })
        self.orchestrator = orchestrator(db_web_config(), runtime=self.runtime)

    async def when_user_creates_environment(self):
        with vedro.catched(RuntimeCommandError) as self.exc_info:
            await self.orchestrator.create()

    async def then_it_should_fail_on_initializing(self):
        assert self.exc_info.value.stage == 'initializing'

    async def and_operation_should_be_failed(self):
        operation, = self.orchestrator.list_operations()
        assert operation.status.value == 'failed'
        assert operation.progress == 0

    async def and_environment_should_be_in_error_state(self):
        assert self.orchestrator.state.value == 'error'

    async def and_no_images_should_be_pulled(self):
        assert self.runtime.called('pull_image') == []
