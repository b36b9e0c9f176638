# (c) Copyright Datacraft, 2026
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from club_auth.config import Settings, get_settings
from club_auth.db.engine import build_sessionmaker
from club_auth.exceptions import ClubAuthError, InternalError
from club_auth.routers import bootstrap_router, credentials_router
from club_auth.routers.bootstrap import CORS_HEADERS

logger = logging.getLogger(__name__)

BOOTSTRAP_PATH = "/functions/v1/biometric-auth"


def create_app(
	settings: Settings | None = None,
	session_factory: sessionmaker | None = None,
) -> FastAPI:
	"""Application with the session bootstrap bridge and credential management."""
	settings = settings or get_settings()
	logging.basicConfig(level=settings.log_level.upper())

	app = FastAPI(title="Club Auth")
	app.state.settings = settings
	app.state.session_factory = session_factory or build_sessionmaker(str(settings.db_url))

	@app.exception_handler(ClubAuthError)
	async def club_auth_error_handler(request: Request, exc: ClubAuthError) -> JSONResponse:
		if exc.status_code >= 500:
			logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.details})")
		else:
			logger.info(f"{request.method} {request.url.path} rejected with {exc.status_code}: {exc.message}")

		content = {"error": exc.message}
		if settings.debug and exc.details:
			content["details"] = exc.details
		return JSONResponse(status_code=exc.status_code, content=content, headers=CORS_HEADERS)

	@app.exception_handler(Exception)
	async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
		logger.exception(f"{request.method} {request.url.path} failed unexpectedly")
		error = InternalError(details=str(exc))

		content = {"error": error.message}
		if settings.debug:
			content["details"] = error.details
		return JSONResponse(status_code=error.status_code, content=content, headers=CORS_HEADERS)

	app.include_router(credentials_router)
	app.include_router(bootstrap_router, prefix=BOOTSTRAP_PATH)

	return app
