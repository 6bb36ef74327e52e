from typing import TypedDict

from aiohttp import web
from aiohttp.web_request import Request

from devenvd.server.app_keys import ORCHESTRATOR
from devenvd.server.handlers.env import OperationResponseParams


class OperationsResponseParams(TypedDict):
    operations: list[dict]


async def http_list_operations(request: Request) -> web.Response:
    operations = request.app[ORCHESTRATOR].list_operations()
    return web.json_response(
        OperationsResponseParams(operations=[operation.as_json() for operation in operations]), status=200
    )


async def http_get_operation(request: Request) -> web.Response:
    operation_id = request.match_info['id']
    operation = request.app[ORCHESTRATOR].get_operation(operation_id)
    if operation is None:
        return web.json_response({'error': f'Unknown operation: {operation_id}'}, status=404)
    return web.json_response(OperationResponseParams(operation=operation.as_json()), status=200)
