import vedro
from d42 import schema

from contexts.control_server import control_server
from contexts.environment_config import db_web_config
from contexts.orchestrator import orchestrator
from interfaces.devenvd_api import DevEnvdApi
from schemas.http_codes import HTTPStatusUnprocessableEntity


class Scenario(vedro.Scenario):
    subject = 'scale with params {params}'

    @vedro.params({}, 'Missing request params: service, replicas')
    @vedro.params({'service': 'web'}, 'Missing request params: replicas')
    @vedro.params({'service': 'web', 'replicas': 'two'}, "Replicas must be integer: 'two'")
    @vedro.params([], 'Request body must be json object')
    def __init__(self, params, error):
        self.params = params
        self.error = error

    async def given_control_server(self):
        self.orchestrator = orchestrator(db_web_config())
        self.server = await control_server(self.orchestrator)
        self.api = DevEnvdApi(str(self.server.make_url('')))

    async def when_user_scales_with_bad_params(self):
        self.response = await self.api.scale(self.params)

    async def then_it_should_return_unprocessable_code(self):
        assert self.response.status_code == HTTPStatusUnprocessableEntity

    async def and_it_should_explain_error(self):
        assert self.response.json() == schema.dict({
            'error': schema.str(self.error),
            'kind': schema.str('RequestParamsError'),
        })

    async def and_no_operation_should_be_created(self):
        assert self.orchestrator.list_operations() == []
