from typing import TypedDict

from aiohttp import web
from aiohttp.web_request import Request

from devenvd.core.operations import OperationType
from devenvd.server.app_keys import ORCHESTRATOR


class OperationResponseParams(TypedDict):
    operation: dict


async def http_get_status(request: Request) -> web.Response:
    status = await request.app[ORCHESTRATOR].get_status()
    return web.json_response(status.as_json(), status=200)


async def http_get_health(request: Request) -> web.Response:
    health = request.app[ORCHESTRATOR].health.snapshot()
    return web.json_response(health.as_json(), status=200)


async def http_get_metrics(request: Request) -> web.Response:
    metrics = request.app[ORCHESTRATOR].metrics.snapshot()
    return web.json_response(metrics.as_json(), status=200)


def submit_handler(type: OperationType):
    async def handler(request: Request) -> web.Response:
        operation = request.app[ORCHESTRATOR].submit(type)
        return web.json_response(OperationResponseParams(operation=operation.as_json()), status=202)

    handler.__name__ = f'http_{type.value}'
    return handler


http_create = submit_handler(OperationType.CREATE)
http_start = submit_handler(OperationType.START)
http_stop = submit_handler(OperationType.STOP)
http_restart = submit_handler(OperationType.RESTART)
http_destroy = submit_handler(OperationType.DESTROY)
http_backup = submit_handler(OperationType.BACKUP)
