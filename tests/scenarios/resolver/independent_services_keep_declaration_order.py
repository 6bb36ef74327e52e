import vedro

from contexts.environment_config import environment_config
from contexts.environment_config import service
from devenvd import DependencyResolver


class Scenario(vedro.Scenario):
    async def given_environment_with_two_tiers(self):
        self.config = environment_config(
            service('web', 'db', 'cache'),
            service('mail'),
            service('db'),
            service('cache'),
        )

    async def when_user_resolves_dependencies(self):
        self.resolver = DependencyResolver(self.config)

    async def then_ties_should_follow_declaration_order(self):
        assert self.resolver.start_order() == ['db', 'cache', 'web', 'mail']

    async def and_levels_should_group_services_by_tier(self):
        assert self.resolver.levels() == [['db', 'cache', 'mail'], ['web']]
