from d42 import schema

EventSchema = schema.dict({
    'kind': schema.str.regex(r'^[a-z]+:[a-z]+$'),
    'payload': schema.dict,
    'timestamp': schema.str,
})
