import vedro

from contexts.environment_config import environment_config
from contexts.environment_config import service
from contexts.orchestrator import orchestrator
from devenvd import EnvironmentConfig
from devenvd import ServiceSpec
from devenvd.errors.config import EnvironmentConfigError
from helpers.fake_runtime import FakeRuntime


class Scenario(vedro.Scenario):
    subject = 'invalid environment is rejected: {message}'

    @vedro.params(EnvironmentConfig(project_name='', services=(service('db'),)), 'Project name is required')
    @vedro.params(EnvironmentConfig(project_name='shop', services=()), 'At least one service is required')
    @vedro.params(environment_config(ServiceSpec(name='db', image='')), 'Service db has no image or build')
    @vedro.params(environment_config(service('db'), service('db')), 'Duplicate service name: db')
    @vedro.params(environment_config(service('web', 'db')), 'Service web depends on unknown service db')
    @vedro.params(environment_config(service('web', 'db', 'db'), service('db')),
                  'Service web lists a dependency more than once')
    def __init__(self, config, message):
        self.config = config
        self.message = message

    async def given_runtime(self):
        self.runtime = FakeRuntime()

    async def when_user_creates_orchestrator(self):
        with vedro.catched(EnvironmentConfigError) as self.exc_info:
            orchestrator(self.config, runtime=self.runtime)

    async def then_it_should_fail_with_config_error(self):
        assert self.exc_info.type is EnvironmentConfigError

    async def and_error_should_describe_problem(self):
        assert self.exc_info.value.message == self.message

    async def and_no_runtime_calls_should_be_issued(self):
        assert self.runtime.calls == []
