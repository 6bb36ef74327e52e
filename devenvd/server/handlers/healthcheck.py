from typing import TypedDict

from aiohttp import web
from aiohttp.web_request import Request

from devenvd.server.app_keys import ORCHESTRATOR
from devenvd.version import get_version


class HealthcheckResponseParams(TypedDict):
    status: str
    version: str
    project: str
    state: str


async def healthcheck(request: Request) -> web.Response:
    orchestrator = request.app[ORCHESTRATOR]
    return web.json_response(HealthcheckResponseParams(
        status='ok',
        version=get_version(),
        project=orchestrator.environment_config.project_name,
        state=orchestrator.state.value,
    ))
