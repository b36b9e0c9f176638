# (c) Copyright Datacraft, 2026
import base64
import binascii
import re
from uuid import UUID

from fastapi import Request, Depends
from fastapi.security.utils import get_authorization_scheme_param
import jwt
from pydantic import ValidationError as PydanticValidationError

from .config import Settings
from .exceptions import AuthenticationRequired
from .schema import TokenData

TOKEN_ALGORITHMS = ["HS256"]


def bytes_to_b64(data: bytes) -> str:
    """Standard (padded) base64, the storage encoding of credential ids and keys."""
    return base64.b64encode(data).decode("ascii")


def b64_to_bytes(value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 value: {e}") from e


def parse_uuid(value) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def from_header(request: Request) -> str | None:
    authorization = request.headers.get("Authorization")
    scheme, token = get_authorization_scheme_param(authorization)

    if not authorization or scheme.lower() != "bearer":
        return None

    return token


def get_api_key(request: Request) -> str | None:
    """API key from the `apikey` header, falling back to the bearer token."""
    return request.headers.get("apikey") or from_header(request)


_ANDROID_MODEL = re.compile(r"Android[^;]*;\s*([^;)]+)")
_FACE_ID_IPHONE = re.compile(r"iPhone1[0-9],[0-9]|iPhone[2-9][0-9],[0-9]")


def device_label(user_agent: str | None) -> str:
    """Best-effort human readable device name from a user agent string."""
    ua = user_agent or ""

    for device in ("iPhone", "iPad", "iPod"):
        if device in ua:
            return device
    if "Macintosh" in ua:
        return "Mac"
    if "Android" in ua:
        match = _ANDROID_MODEL.search(ua)
        return match.group(1).strip() if match else "Android"
    if "Windows" in ua:
        return "Windows"
    if "Linux" in ua:
        return "Linux"

    return "Unknown Device"


def biometric_name(user_agent: str | None) -> str:
    """Display name of the biometric method the device most likely offers."""
    ua = user_agent or ""

    if re.search(r"iPhone|iPad|iPod", ua):
        return "Face ID" if _FACE_ID_IPHONE.search(ua) else "Touch ID"
    if "Macintosh" in ua:
        return "Touch ID"
    if "Android" in ua:
        return "Fingerprint"

    return "Biometrics"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def decode_token(token: str, settings: Settings, *, audience: str | None = None) -> TokenData:
    """Validate an identity-provider JWT signed with the project secret."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=TOKEN_ALGORITHMS,
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationRequired("Token has expired")
    except jwt.InvalidTokenError:
        raise AuthenticationRequired("Invalid token")

    try:
        return TokenData.model_validate(payload)
    except PydanticValidationError:
        raise AuthenticationRequired("Invalid token payload")


def require_client_role(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> TokenData:
    """The caller must present an API key whose role is allowed to call the bridge."""
    api_key = get_api_key(request)
    if not api_key:
        raise AuthenticationRequired("Invalid API key")

    try:
        claims = decode_token(api_key, settings)
    except AuthenticationRequired:
        raise AuthenticationRequired("Invalid API key")

    if claims.role not in settings.bootstrap_allowed_roles:
        raise AuthenticationRequired("Invalid API key")
    return claims


def get_current_auth_id(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> UUID:
    """Identity-provider user id (`sub`) of the bearer access token."""
    token = from_header(request)
    if not token:
        raise AuthenticationRequired()

    claims = decode_token(token, settings, audience=settings.access_token_audience)
    auth_id = parse_uuid(claims.sub)
    if auth_id is None:
        raise AuthenticationRequired("Invalid token payload")
    return auth_id
