from devenvd.errors.base import DevEnvError


class RequestParamsError(DevEnvError):
    pass
