from d42 import schema

from schemas.health import EnvironmentHealthSchema
from schemas.health import ServiceHealthSchema
from schemas.metrics import EnvironmentMetricsSchema
from schemas.metrics import ResourceUsageSchema

ServiceStatusSchema = schema.dict({
    'name': schema.str,
    'state': schema.str,
    'health': ServiceHealthSchema,
    'resources': ResourceUsageSchema,
    'restarts': schema.int,
    'exit_code': schema.int | schema.none,
    'error': schema.str | schema.none,
})

EnvironmentStatusSchema = schema.dict({
    'state': schema.str,
    'services': schema.dict,
    'health': EnvironmentHealthSchema,
    'metrics': EnvironmentMetricsSchema,
    'uptime': schema.float,
    'last_update': schema.str,
})
