HTTPStatusOk = 200
HTTPStatusAccepted = 202
HTTPStatusNotFound = 404
HTTPStatusUnprocessableEntity = 422
