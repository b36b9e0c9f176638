# (c) Copyright Datacraft, 2026
"""Session bootstrap bridge endpoint.

Runs with the service-role key; the browser only ever reaches it with the
anonymous API key and a verified `{userId, credentialId}` pair.
"""
import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from club_auth import schema
from club_auth.config import Settings
from club_auth.db.engine import get_db
from club_auth.exceptions import ClubAuthError, InternalError
from club_auth.identity import GoTrueAdmin
from club_auth.services import CredentialStore, SessionBootstrapService, UserDirectory
from club_auth.utils import get_app_settings, require_client_role

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Biometric session bootstrap"])

CORS_HEADERS = {
	"Access-Control-Allow-Origin": "*",
	"Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
	"Access-Control-Allow-Methods": "POST, OPTIONS",
}


def get_bootstrap_service(
	db: Session = Depends(get_db),
	settings: Settings = Depends(get_app_settings),
) -> SessionBootstrapService:
	"""A fresh administrative client per request."""
	return SessionBootstrapService(
		credentials=CredentialStore(db),
		users=UserDirectory(db),
		admin=GoTrueAdmin.from_settings(settings),
	)


@router.options("", include_in_schema=False)
@router.options("/{path:path}", include_in_schema=False)
async def preflight() -> Response:
	"""CORS preflight."""
	return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
	"",
	dependencies=[Depends(require_client_role)],
	response_model=schema.BootstrapResponse,
	responses={
		400: {"model": schema.ErrorResponse},
		401: {"model": schema.ErrorResponse},
		403: {"model": schema.ErrorResponse},
		404: {"model": schema.ErrorResponse},
		500: {"model": schema.ErrorResponse},
	},
)
async def bootstrap_session(
	request: Request,
	service: SessionBootstrapService = Depends(get_bootstrap_service),
) -> JSONResponse:
	"""Exchange a verified biometric assertion for a one-time login artifact."""
	try:
		payload = await request.json()
	except ValueError as e:
		logger.error(f"Malformed bootstrap request body: {e}")
		raise InternalError(details=str(e)) from e

	if not isinstance(payload, dict):
		payload = {}

	try:
		result = await service.bootstrap(payload.get("userId"), payload.get("credentialId"))
	except ClubAuthError:
		raise
	except Exception as e:
		logger.exception("Unexpected error during session bootstrap")
		raise InternalError(details=str(e)) from e

	return JSONResponse(result.model_dump(), headers=CORS_HEADERS)
