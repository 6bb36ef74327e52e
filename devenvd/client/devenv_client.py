import aiohttp
from aiohttp import ClientConnectorError
from rtry import retry

from devenvd.client.types import OperationId
from devenvd.client.types import OperationJson
from devenvd.client.types import is_operation_done
from devenvd.errors.client import ControlServerError
from devenvd.server.commands import ENV_BACKUP_PATH
from devenvd.server.commands import ENV_CREATE_PATH
from devenvd.server.commands import ENV_DESTROY_PATH
from devenvd.server.commands import ENV_HEALTH_PATH
from devenvd.server.commands import ENV_METRICS_PATH
from devenvd.server.commands import ENV_RESTART_PATH
from devenvd.server.commands import ENV_START_PATH
from devenvd.server.commands import ENV_STATUS_PATH
from devenvd.server.commands import ENV_STOP_PATH
from devenvd.server.commands import EVENTS_PATH
from devenvd.server.commands import HEALTHCHECK_PATH
from devenvd.server.commands import OPERATION_PATH
from devenvd.server.commands import OPERATIONS_PATH
from devenvd.server.commands import SERVICE_EXEC_PATH
from devenvd.server.commands import SERVICE_LOGS_PATH
from devenvd.server.commands import SERVICE_SCALE_PATH
from devenvd.server.handlers.env import OperationResponseParams
from devenvd.server.handlers.events import EventsResponseParams
from devenvd.server.handlers.operations import OperationsResponseParams
from devenvd.server.handlers.service import ExecRequestParams
from devenvd.server.handlers.service import ExecResponseParams
from devenvd.server.handlers.service import LogsRequestParams
from devenvd.server.handlers.service import LogsResponseParams
from devenvd.server.handlers.service import ScaleRequestParams


async def raise_for_error(response: aiohttp.ClientResponse) -> None:
    if response.status in (404, 422):
        body = await response.json()
        raise ControlServerError(body['error'], kind=body.get('kind', ''), status=response.status)


class DevEnvClient:
    def __init__(self, host, port=80):
        self._server_host = host
        self._server_port = port
        self._server_url = f'{self._server_host}:{self._server_port}'

    async def healthcheck(self) -> dict:
        async with aiohttp.ClientSession() as session:
            url = f'{self._server_url}{HEALTHCHECK_PATH}'
            async with session.get(url) as response:
                assert response.status == 200, response
                state = await response.json()
                assert state['status'] == 'ok', response
                return state

    @retry(attempts=5, delay=1, swallow=ClientConnectorError)
    async def _get(self, path: str) -> dict:
        async with aiohttp.ClientSession() as session:
            async with session.get(f'{self._server_url}{path}') as response:
                await raise_for_error(response)
                assert response.status == 200, response
                return await response.json()

    @retry(attempts=10, delay=1, swallow=ClientConnectorError)
    async def _post(self, path: str, params: dict | None = None) -> tuple[int, dict]:
        async with aiohttp.ClientSession() as session:
            async with session.post(f'{self._server_url}{path}', json=params or {}) as response:
                await raise_for_error(response)
                assert response.status in (200, 202), response
                return response.status, await response.json()

    async def _submit(self, path: str, params: dict | None = None) -> OperationJson:
        _, body = await self._post(path, params)
        return OperationResponseParams(**body)['operation']

    async def status(self) -> dict:
        return await self._get(ENV_STATUS_PATH)

    async def health(self) -> dict:
        return await self._get(ENV_HEALTH_PATH)

    async def metrics(self) -> dict:
        return await self._get(ENV_METRICS_PATH)

    async def events(self) -> list[dict]:
        return EventsResponseParams(**await self._get(EVENTS_PATH))['events']

    async def operations(self) -> list[OperationJson]:
        return OperationsResponseParams(**await self._get(OPERATIONS_PATH))['operations']

    async def operation(self, operation_id: OperationId) -> OperationJson:
        body = await self._get(OPERATION_PATH.format(id=operation_id))
        return OperationResponseParams(**body)['operation']

    async def wait_operation(self, operation_id: OperationId, attempts: int = 120, delay: float = 1) -> OperationJson:
        return await retry(attempts=attempts, delay=delay, until=lambda operation: not is_operation_done(operation))(
            self.operation
        )(operation_id)

    async def create(self) -> OperationJson:
        return await self._submit(ENV_CREATE_PATH)

    async def start(self) -> OperationJson:
        return await self._submit(ENV_START_PATH)

    async def stop(self) -> OperationJson:
        return await self._submit(ENV_STOP_PATH)

    async def restart(self) -> OperationJson:
        return await self._submit(ENV_RESTART_PATH)

    async def destroy(self) -> OperationJson:
        return await self._submit(ENV_DESTROY_PATH)

    async def backup(self) -> OperationJson:
        return await self._submit(ENV_BACKUP_PATH)

    async def scale(self, service: str, replicas: int) -> OperationJson:
        return await self._submit(SERVICE_SCALE_PATH, ScaleRequestParams(service=service, replicas=replicas))

    async def exec(self, service: str, command: list[str], user: str | None = None) -> ExecResponseParams:
        _, body = await self._post(SERVICE_EXEC_PATH, ExecRequestParams(service=service, command=command, user=user))
        return ExecResponseParams(**body)

    async def logs(self, service: str, tail: int | None = None, since: str | None = None) -> str:
        _, body = await self._post(SERVICE_LOGS_PATH, LogsRequestParams(service=service, tail=tail, since=since))
        return LogsResponseParams(**body)['logs']
