from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from routemaker import __version__
from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.constants import CLIENT_URL
from routemaker.server.errors import RouteMakerError
from routemaker.server.routes.locations import location_router
from routemaker.server.routes.org_invitations import invitation_router
from routemaker.server.routes.orgs import org_router
from routemaker.server.routes.profiles import profile_router
from routemaker.server.routes.projects import project_router
from routemaker.server.routes.technicians import technician_router
from routemaker.storage.base import utc_now


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = '.'.join(str(part) for part in error.get('loc', ()) if part != 'body')
        messages.append(f'{location}: {error.get("msg")}' if location else error.get('msg'))
    return '; '.join(messages) or 'Invalid request'


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={'error': exc.detail},
        headers=getattr(exc, 'headers', None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'error': _format_validation_errors(exc)},
    )


async def domain_exception_handler(
    request: Request, exc: RouteMakerError
) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={'error': str(exc)})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        'Unhandled error',
        extra={'path': request.url.path, 'error': str(exc)},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'error': 'An unexpected error occurred'},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title='RouteMaker API',
        description='Organizations, team invitations, projects, locations and technicians',
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[CLIENT_URL],
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RouteMakerError, domain_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(org_router)
    app.include_router(invitation_router)
    app.include_router(location_router)
    app.include_router(project_router)
    app.include_router(technician_router)
    app.include_router(profile_router)

    @app.get('/health')
    @app.get('/api/health')
    async def health() -> dict:
        return {'status': 'ok', 'timestamp': utc_now().isoformat() + 'Z'}

    return app


app = create_app()
