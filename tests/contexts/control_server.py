import vedro
from aiohttp.test_utils import TestServer

from devenvd import LifecycleOrchestrator
from devenvd import make_app


async def control_server(orchestrator: LifecycleOrchestrator) -> TestServer:
    server = TestServer(make_app(orchestrator))
    await server.start_server()
    vedro.defer(server.close)
    return server
