from collections.abc import Mapping
import logging
from fastapi.responses import JSONResponse
from core.services import exceptions as service_exc
from gateways import exceptions as storage_exc


from fastapi import FastAPI, Request, status


class HTTPExceptionsMapper:
    """Maps service errors to corresponding http status code"""

    _EXCEPTION_MAPPING: Mapping[type[Exception], int] = {
        service_exc.ProviderScopeError: status.HTTP_503_SERVICE_UNAVAILABLE,
        service_exc.SynchronizerStateError: status.HTTP_503_SERVICE_UNAVAILABLE,
        storage_exc.StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
        storage_exc.StorageUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
        storage_exc.StorageTimeoutError: status.HTTP_504_GATEWAY_TIMEOUT,
    }

    def __init__(self, app: FastAPI, logger: logging.Logger):
        self._app = app
        self._logger = logger

    async def _handle(self, _: Request, exc: Exception):
        status_code: int | None = self._EXCEPTION_MAPPING.get(type(exc), None)
        if status_code is None:
            self._logger.error("Unknown exception in handler: %s", exc, exc_info=True)
            return JSONResponse(
                {"detail": "Internal server error."},
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        self._logger.warning("Handled service error: %s", exc)
        return JSONResponse({"detail": str(exc)}, status_code)

    def setup_handlers(self) -> None:
        for exc_class in self._EXCEPTION_MAPPING:
            self._app.add_exception_handler(exc_class, self._handle)
        self._app.add_exception_handler(Exception, self._handle)
