from aiohttp import web

from devenvd.core.events import EventChannel
from devenvd.core.lifecycle import LifecycleOrchestrator

ORCHESTRATOR = web.AppKey('orchestrator', LifecycleOrchestrator)
EVENTS = web.AppKey('events', EventChannel)
