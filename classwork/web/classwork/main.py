"""Main entry point for the Classwork web application."""

import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from classwork.core import BootConfiguration, ClassworkContainer, di
from classwork.core.config.web import ClassworkWebSettings
from classwork.errors import AuthError, NotFound, PermissionDenied, StorageError, ValidationError
from classwork.lib.json import FastAPIJSONResponse
from classwork.model import DeploymentEnvironment
from classwork.storage.object import LocalObjectStore, ObjectStore

from .route import router

logger = logging.getLogger(__name__)


def _error(status_code: int, detail: str, **kwargs) -> FastAPIJSONResponse:
    return FastAPIJSONResponse(status_code=status_code, content={"detail": detail, **kwargs})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> FastAPIJSONResponse:
        return _error(status.HTTP_422_UNPROCESSABLE_CONTENT, exc.message, field=exc.field)

    @app.exception_handler(PermissionDenied)
    async def permission_denied(request: Request, exc: PermissionDenied) -> FastAPIJSONResponse:
        # the reason stays in the log; callers learn only that they were refused
        return _error(status.HTTP_403_FORBIDDEN, "You do not have permission to perform this action")

    @app.exception_handler(NotFound)
    async def not_found(request: Request, exc: NotFound) -> FastAPIJSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc) or "Not found")

    @app.exception_handler(AuthError)
    async def auth_error(request: Request, exc: AuthError) -> FastAPIJSONResponse:
        response = _error(status.HTTP_401_UNAUTHORIZED, str(exc) or "Not authenticated")
        response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError) -> FastAPIJSONResponse:
        logger.error("storage unavailable", extra={"path": request.url.path, "error": str(exc)})
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc) or "Storage is unavailable")


@di.inject
def _create_app(
    config: ClassworkWebSettings = di.Provide["config.web.classwork", di.as_(ClassworkWebSettings)],
    env: DeploymentEnvironment = di.Provide["env"],
    store: ObjectStore = di.Provide["storage.object"],
) -> FastAPI:
    app = FastAPI(
        title="Classwork",
        description="Classroom assignments, submissions and grading",
    )

    if env is DeploymentEnvironment.Local and config.frontend is not None:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                f"http://{config.frontend.host}:{config.frontend.port}",
                f"http://localhost:{config.frontend.port}",
            ],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    _register_error_handlers(app)
    app.include_router(router)

    if isinstance(store, LocalObjectStore):
        app.mount(store.url_prefix, StaticFiles(directory=store.base_path), name="uploads")

    return app


def create_app() -> FastAPI:
    boot_vars = os.getenv("__Classwork_BOOT")
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = ClassworkContainer()
        ClassworkContainer.boot(ct, **dict(boot_cf))
        return _create_app(
            config=ClassworkWebSettings(**ct.config.web.classwork()),
            env=boot_cf.env,
            store=ct.storage().object(),
        )
    return _create_app()
