"""
This module used for http control server of devenvd

Client for this server - devenvd/client

Each command contains params set described in it's handler (for example scale_service: ScaleRequestParams)
Param set is used by client for serializing into json; and by server for deserializing same param set from json.
Same happens for response params (for example http_get_operation: OperationResponseParams).

Lifecycle commands don't wait for operation end: they answer with pending operation,
its progress is available by operation id.
Orchestrator instance is stored in application, see app_keys.ORCHESTRATOR.
"""
