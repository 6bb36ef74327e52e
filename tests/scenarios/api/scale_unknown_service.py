import vedro
from d42 import schema

from contexts.control_server import control_server
from contexts.environment_config import db_web_config
from contexts.orchestrator import orchestrator
from devenvd.server.handlers.service import ScaleRequestParams
from interfaces.devenvd_api import DevEnvdApi
from schemas.http_codes import HTTPStatusUnprocessableEntity


class Scenario(vedro.Scenario):
    async def given_control_server(self):
        self.orchestrator = orchestrator(db_web_config())
        self.server = await control_server(self.orchestrator)
        self.api = DevEnvdApi(str(self.server.make_url('')))

    async def when_user_scales_unknown_service(self):
        self.response = await self.api.scale(ScaleRequestParams(service='mail', replicas=2))

    async def then_it_should_return_unprocessable_code(self):
        assert self.response.status_code == HTTPStatusUnprocessableEntity

    async def then_it_should_explain_error(self):
        assert self.response.json() == schema.dict({
            'error': schema.str('No such service: mail'),
            'kind': schema.str('UnknownServiceError'),
        })

    async def and_no_operation_should_be_created(self):
        assert self.orchestrator.list_operations() == []
