from aiohttp.web_request import Request

from devenvd.errors.server import RequestParamsError


async def read_params(request: Request, *required: str) -> dict:
    try:
        params = await request.json()
    except ValueError as error:
        raise RequestParamsError(f'Request body is not json: {error}') from error
    if not isinstance(params, dict):
        raise RequestParamsError('Request body must be json object')
    missing = [key for key in required if key not in params]
    if missing:
        raise RequestParamsError(f'Missing request params: {", ".join(missing)}')
    return params
