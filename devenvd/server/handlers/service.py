from typing import TypedDict

from aiohttp import web
from aiohttp.web_request import Request

from devenvd.core.operations import OperationType
from devenvd.errors.server import RequestParamsError
from devenvd.server.app_keys import ORCHESTRATOR
from devenvd.server.handlers.env import OperationResponseParams
from devenvd.server.handlers.params import read_params


class ScaleRequestParams(TypedDict):
    service: str
    replicas: int


class ExecRequestParams(TypedDict):
    service: str
    command: list[str]
    user: str | None


class ExecResponseParams(TypedDict):
    stdout: str
    stderr: str
    exit_code: int


class LogsRequestParams(TypedDict):
    service: str
    tail: int | None
    since: str | None


class LogsResponseParams(TypedDict):
    logs: str


async def scale_service(request: Request) -> web.Response:
    params: ScaleRequestParams = await read_params(request, 'service', 'replicas')
    replicas = params['replicas']
    if not isinstance(replicas, int) or isinstance(replicas, bool):
        raise RequestParamsError(f'Replicas must be integer: {replicas!r}')
    operation = request.app[ORCHESTRATOR].submit(OperationType.SCALE, service=params['service'], replicas=replicas)
    return web.json_response(OperationResponseParams(operation=operation.as_json()), status=202)


async def exec_in_service(request: Request) -> web.Response:
    params: ExecRequestParams = await read_params(request, 'service', 'command')
    result = await request.app[ORCHESTRATOR].exec_in_service(
        params['service'], params['command'], user=params.get('user')
    )
    return web.json_response(ExecResponseParams(**result.as_json()), status=200)


async def service_logs(request: Request) -> web.Response:
    params: LogsRequestParams = await read_params(request, 'service')
    logs = await request.app[ORCHESTRATOR].service_logs(
        params['service'], tail=params.get('tail'), since=params.get('since')
    )
    return web.json_response(LogsResponseParams(logs=logs), status=200)
