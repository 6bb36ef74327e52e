import vedro

from contexts.control_server import control_server
from contexts.environment_config import db_web_config
from contexts.orchestrator import orchestrator
from devenvd.server.handlers.service import ExecRequestParams
from devenvd.server.handlers.service import LogsRequestParams
from helpers.fake_runtime import FakeRuntime
from interfaces.devenvd_api import DevEnvdApi
from schemas.http_codes import HTTPStatusOk


class Scenario(vedro.Scenario):
    async def given_control_server(self):
        runtime = FakeRuntime()
        runtime.logs['shop_web'] = ['GET / 200', 'GET /health 200']
        self.server = await control_server(orchestrator(db_web_config(), runtime=runtime))
        self.api = DevEnvdApi(str(self.server.make_url('')))

    async def when_user_executes_command_in_web(self):
        self.response = await self.api.exec(ExecRequestParams(service='web', command=['echo', 'hello'], user=None))

    async def then_it_should_return_command_result(self):
        assert self.response.status_code == HTTPStatusOk
        assert self.response.json() == {'stdout': 'echo hello', 'stderr': '', 'exit_code': 0}

    async def and_logs_should_be_available(self):
        response = await self.api.logs(LogsRequestParams(service='web', tail=1, since=None))
        assert response.status_code == HTTPStatusOk
        assert response.json() == {'logs': 'GET /health 200\n'}
