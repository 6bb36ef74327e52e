import vedro

from contexts.environment_config import db_web_config
from devenvd import DependencyResolver


class Scenario(vedro.Scenario):
    async def given_db_and_web_depending_on_db(self):
        self.config = db_web_config()

    async def when_user_resolves_dependencies(self):
        self.resolver = DependencyResolver(self.config)

    async def then_db_should_start_first(self):
        assert self.resolver.start_order() == ['db', 'web']

    async def and_web_should_stop_first(self):
        assert self.resolver.stop_order() == ['web', 'db']
