import vedro

from contexts.environment_config import PROJECT
from contexts.environment_config import environment_config
from contexts.environment_config import service
from devenvd import EventBus
from devenvd.core.health_reconciler import HealthReconciler
from devenvd.core.runtime_data_types import ContainerHealth
from helpers.fake_runtime import FakeRuntime

HEALTHY = ContainerHealth.HEALTHY
UNHEALTHY = ContainerHealth.UNHEALTHY
STARTING = ContainerHealth.STARTING
NONE = ContainerHealth.NONE


class Scenario(vedro.Scenario):
    subject = 'overall health of {db} and {web} is {overall}'

    @vedro.params(HEALTHY, UNHEALTHY, UNHEALTHY)
    @vedro.params(STARTING, UNHEALTHY, UNHEALTHY)
    @vedro.params(HEALTHY, STARTING, STARTING)
    @vedro.params(HEALTHY, HEALTHY, HEALTHY)
    @vedro.params(HEALTHY, NONE, HEALTHY)
    @vedro.params(NONE, NONE, NONE)
    def __init__(self, db, web, overall):
        self.db = db
        self.web = web
        self.overall = overall

    async def given_services_with_health_checks(self):
        self.runtime = FakeRuntime(health={f'{PROJECT}_db': self.db, f'{PROJECT}_web': self.web})
        self.reconciler = HealthReconciler(
            environment_config(service('db', health_check=True), service('web', 'db', health_check=True)),
            self.runtime,
            EventBus(),
        )

    async def when_reconciler_checks_health(self):
        self.health = await self.reconciler.check()

    async def then_overall_health_should_be_worst_one(self):
        assert self.health.overall == self.overall
        assert self.health.services == {'db': self.db, 'web': self.web}

    async def and_declared_health_checks_should_be_queried(self):
        assert self.runtime.called('inspect_health') == ['shop_db', 'shop_web']

    async def and_snapshot_should_be_updated(self):
        assert self.reconciler.snapshot().overall == self.overall
        assert self.reconciler.snapshot().last_check is not None
