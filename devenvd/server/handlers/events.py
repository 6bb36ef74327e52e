from typing import TypedDict

from aiohttp import web
from aiohttp.web_request import Request

from devenvd.server.app_keys import EVENTS


class EventsResponseParams(TypedDict):
    events: list[dict]


async def http_poll_events(request: Request) -> web.Response:
    """
    Events emitted since previous poll.
    Feed is shared by all pollers, oldest events are dropped past config.events_buffer.
    """
    events = request.app[EVENTS].pending()
    return web.json_response(EventsResponseParams(events=[event.as_json() for event in events]), status=200)
