from d42 import schema

ServiceHealthSchema = schema.str('healthy') | schema.str('unhealthy') | schema.str('starting') | schema.str('none')

HealthIssueSchema = schema.dict({
    'service': schema.str,
    'severity': schema.str('low') | schema.str('medium') | schema.str('high') | schema.str('critical'),
    'message': schema.str,
    'timestamp': schema.str,
    'resolved': schema.bool,
})

EnvironmentHealthSchema = schema.dict({
    'overall': ServiceHealthSchema,
    'services': schema.dict,
    'issues': schema.list(HealthIssueSchema),
    'last_check': schema.str | schema.none,
})
