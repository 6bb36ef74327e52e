from typing import TypedDict

from aiohttp import web
from aiohttp.web_request import Request
from rich.text import Text

from devenvd.core.config import Config
from devenvd.core.lifecycle import LifecycleOrchestrator
from devenvd.errors.base import DevEnvError
from devenvd.output.console import CONSOLE
from devenvd.output.styles import Style
from devenvd.server.app_keys import EVENTS
from devenvd.server.app_keys import ORCHESTRATOR
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
from devenvd.server.handlers.env import http_backup
from devenvd.server.handlers.env import http_create
from devenvd.server.handlers.env import http_destroy
from devenvd.server.handlers.env import http_get_health
from devenvd.server.handlers.env import http_get_metrics
from devenvd.server.handlers.env import http_get_status
from devenvd.server.handlers.env import http_restart
from devenvd.server.handlers.env import http_start
from devenvd.server.handlers.env import http_stop
from devenvd.server.handlers.events import http_poll_events
from devenvd.server.handlers.healthcheck import healthcheck
from devenvd.server.handlers.operations import http_get_operation
from devenvd.server.handlers.operations import http_list_operations
from devenvd.server.handlers.service import exec_in_service
from devenvd.server.handlers.service import scale_service
from devenvd.server.handlers.service import service_logs


class ErrorResponseParams(TypedDict):
    error: str
    kind: str


@web.middleware
async def devenv_errors(request: Request, handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except DevEnvError as error:
        CONSOLE.print(Text(f'{request.method} {request.path}: {error.message}', style=Style.bad))
        return web.json_response(ErrorResponseParams(error=error.message, kind=type(error).__name__), status=422)


async def close_orchestrator(app: web.Application) -> None:
    app[EVENTS].close()
    await app[ORCHESTRATOR].close()


def make_app(orchestrator: LifecycleOrchestrator) -> web.Application:
    app = web.Application(middlewares=[devenv_errors])
    app[ORCHESTRATOR] = orchestrator
    app[EVENTS] = orchestrator.events.channel(maxsize=orchestrator.config.events_buffer)
    app.on_cleanup.append(close_orchestrator)
    app.add_routes([
        web.post(ENV_CREATE_PATH, http_create),
        web.post(ENV_START_PATH, http_start),
        web.post(ENV_STOP_PATH, http_stop),
        web.post(ENV_RESTART_PATH, http_restart),
        web.post(ENV_DESTROY_PATH, http_destroy),
        web.post(ENV_BACKUP_PATH, http_backup),
        web.post(SERVICE_SCALE_PATH, scale_service),
        web.post(SERVICE_EXEC_PATH, exec_in_service),
        web.post(SERVICE_LOGS_PATH, service_logs),

        # ============================
        web.get(HEALTHCHECK_PATH, healthcheck),
        web.get(ENV_STATUS_PATH, http_get_status),
        web.get(ENV_HEALTH_PATH, http_get_health),
        web.get(ENV_METRICS_PATH, http_get_metrics),
        web.get(OPERATIONS_PATH, http_list_operations),
        web.get(OPERATION_PATH, http_get_operation),
        web.get(EVENTS_PATH, http_poll_events),
    ])
    return app


def run_server(orchestrator: LifecycleOrchestrator, config=Config):
    web.run_app(make_app(orchestrator), port=config().port)
