import json

import vedro

from devenvd.core.runtime_data_types import ContainerHealth
from devenvd.core.runtime_data_types import ContainerInspection
from devenvd.core.runtime_data_types import ContainerState
from devenvd.core.runtime_data_types import RawContainerStats


class Scenario(vedro.Scenario):
    subject = 'inspect status {status} with health {health}'

    @vedro.params('running', {'Status': 'healthy'}, ContainerState.RUNNING, ContainerHealth.HEALTHY)
    @vedro.params('running', {'Status': 'starting'}, ContainerState.RUNNING, ContainerHealth.STARTING)
    @vedro.params('running', None, ContainerState.RUNNING, ContainerHealth.NONE)
    @vedro.params('exited', {'Status': 'unhealthy'}, ContainerState.EXITED, ContainerHealth.UNHEALTHY)
    @vedro.params('zombie', {'Status': 'weird'}, ContainerState.DEAD, ContainerHealth.UNHEALTHY)
    def __init__(self, status, health, state, container_health):
        self.status = status
        self.health = health
        self.state = state
        self.container_health = container_health

    async def given_inspect_output(self):
        state = {'Status': self.status, 'ExitCode': 0, 'StartedAt': '2026-10-17T10:00:00Z', 'Error': ''}
        if self.health is not None:
            state['Health'] = self.health
        self.output = json.dumps({'Name': '/shop_web', 'RestartCount': 2, 'State': state})

    async def when_output_is_parsed(self):
        self.inspection = ContainerInspection.from_json('shop_web', self.output)

    async def then_state_and_health_should_be_recognized(self):
        assert self.inspection.state == self.state
        assert self.inspection.health == self.container_health

    async def and_counters_should_be_read(self):
        assert self.inspection.restart_count == 2
        assert self.inspection.exit_code == 0
        assert self.inspection.error is None
