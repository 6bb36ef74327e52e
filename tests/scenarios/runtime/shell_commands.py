import vedro

from devenvd import HealthCheckSpec
from devenvd import NetworkSpec
from devenvd import PortMapping
from devenvd import ResourceLimits
from devenvd import RuntimeShellInterface
from devenvd.env_description.env_types import RestartPolicy
from devenvd.helpers.jobs_result import JobResult
from helpers.fast_config import make_config


class Scenario(vedro.Scenario):
    async def given_runtime_echoing_its_arguments(self):
        self.runtime = RuntimeShellInterface(config=make_config(runtime_binary='echo'))

    async def when_runtime_runs_service(self):
        self.result = await self.runtime.run_service(
            name='shop_web',
            image='shop-web:latest',
            ports=(PortMapping(host=8080, container=80),),
            environment={'DB_HOST': 'shop_db'},
            volumes=('shop-data:/data:ro',),
            networks=('shop-net',),
            resources=ResourceLimits(memory='512m', cpus='0.5'),
            restart=RestartPolicy.UNLESS_STOPPED,
            command=('gunicorn', 'app:app'),
            labels={'devenvd.project': 'shop'},
        )

    async def then_run_command_should_carry_every_setting(self):
        assert self.result == (
            'run --name shop_web --detach --publish 8080:80/tcp --env DB_HOST=shop_db '
            '--volume shop-data:/data:ro --network shop-net --memory 512m --cpus 0.5 '
            '--restart unless-stopped --label devenvd.project=shop shop-web:latest gunicorn app:app'
        )

    async def and_runtime_version_should_be_read_from_output(self):
        assert await self.runtime.runtime_version() == 'version --format {{.Server.Version}}'

    async def and_network_should_be_created(self):
        network = NetworkSpec('shop-net', subnet='172.28.0.0/16')
        assert await self.runtime.create_network(network) == JobResult.GOOD

    async def and_logs_tail_should_be_requested(self):
        assert await self.runtime.service_logs('shop_web', tail=5) == 'logs --tail 5 shop_web\n'

    async def and_exec_should_pass_user_and_command(self):
        result = await self.runtime.exec_in_service('shop_web', ['ls', '/app'], user='app')
        assert result.exit_code == 0
        assert result.stdout == 'exec --user app shop_web ls /app\n'

    async def and_logs_should_be_streamed_line_by_line(self):
        lines = [line async for line in self.runtime.stream_logs('shop_web')]
        assert lines == ['logs --follow shop_web']

    async def and_health_check_should_be_configured_on_container(self):
        result = await self.runtime.run_service(
            name='shop_db',
            image='postgres:16',
            detach=False,
            health_check=HealthCheckSpec(test=('CMD-SHELL', 'pg_isready'), interval='2s', start_period='10s'),
        )
        assert result == (
            'run --name shop_db --health-cmd pg_isready --health-interval 2s --health-timeout 3s '
            '--health-retries 3 --health-start-period 10s postgres:16'
        )
