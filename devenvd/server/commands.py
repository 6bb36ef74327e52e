HEALTHCHECK_PATH = '/healthcheck'

ENV_STATUS_PATH = '/env/status'
ENV_HEALTH_PATH = '/env/health'
ENV_METRICS_PATH = '/env/metrics'

ENV_CREATE_PATH = '/env/create'
ENV_START_PATH = '/env/start'
ENV_STOP_PATH = '/env/stop'
ENV_RESTART_PATH = '/env/restart'
ENV_DESTROY_PATH = '/env/destroy'
ENV_BACKUP_PATH = '/env/backup'

OPERATIONS_PATH = '/operations'
OPERATION_PATH = '/operations/{id}'

SERVICE_SCALE_PATH = '/service/scale'
SERVICE_EXEC_PATH = '/service/exec'
SERVICE_LOGS_PATH = '/service/logs'

EVENTS_PATH = '/events'
