import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from calendar_admin.routers.admin import render_message
from calendar_admin.storage.base import StorageError

logger = logging.getLogger(__name__)

GENERIC_STORAGE_ERROR = "伺服器錯誤: 無法存取事件資料"


def _is_admin(request: Request) -> bool:
    return request.url.path.startswith("/admin")


def add_error_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def admin_aware_http_exception_handler(request: Request, exc: StarletteHTTPException):
        if _is_admin(request):
            return render_message(request, str(exc.detail), status_code=exc.status_code)
        return await http_exception_handler(request, exc)

    async def storage_exception_handler(request: Request, exc: Exception):
        logger.error("[storage] %s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
        if _is_admin(request):
            return render_message(request, GENERIC_STORAGE_ERROR, status_code=500)
        return JSONResponse(status_code=500, content={"detail": GENERIC_STORAGE_ERROR})

    app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
    app.add_exception_handler(StorageError, storage_exception_handler)
