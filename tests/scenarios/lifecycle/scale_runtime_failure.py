import vedro

from contexts.environment_config import db_web_config
from contexts.orchestrator import orchestrator
from contexts.orchestrator import recorded_events
from devenvd import EventKind
from devenvd.errors.lifecycle import RuntimeCommandError
from helpers.fake_runtime import FakeRuntime


class Scenario(vedro.Scenario):
    async def given_runtime_outside_of_swarm(self):
        self.runtime = FakeRuntime(failures={
            ('scale_service', 'shop_web=2'): 'Error response from daemon: This node is not a swarm manager.',
        })
        self.orchestrator = orchestrator(db_web_config(), runtime=self.runtime)
        await self.orchestrator.create()
        self.events = recorded_events(self.orchestrator.events)

    async def when_user_scales_web_service(self):
        with vedro.catched(RuntimeCommandError) as self.exc_info:
            await self.orchestrator.scale('web', 2)

    async def then_it_should_raise_runtime_error(self):
        assert self.exc_info.value.stage == 'scaling'
        assert 'not a swarm manager' in self.exc_info.value.message

    async def and_operation_should_be_failed(self):
        operation = self.orchestrator.list_operations()[-1]
        assert operation.type.value == 'scale'
        assert operation.status.value == 'failed'

    async def and_service_error_should_be_emitted(self):
        assert EventKind.SERVICE_ERROR in [event.kind for event in self.events]

    async def and_environment_state_should_stay_running(self):
        assert self.orchestrator.state.value == 'running'
