import secrets
from typing import Any

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

API_KEY_HEADER = "Authorization"
SCHEME_NAME = "ApiKey"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, scheme_name=SCHEME_NAME, auto_error=False)


class ApiKeyVerifier:
    """Checks the request key against the single configured secret."""

    def __init__(self, expected_key: str):
        self._expected = expected_key.encode()

    def __call__(self, api_key: str | None = Security(api_key_header)) -> dict[str, Any]:
        if not api_key:
            raise self._unauthorized("Missing API key")
        if not self._expected or not secrets.compare_digest(api_key.encode(), self._expected):
            raise self._unauthorized("Invalid API key")
        return {"sub": "api-key", "scheme": SCHEME_NAME}

    @staticmethod
    def _unauthorized(detail: str) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": SCHEME_NAME},
        )


def require_api_key(request: Request, api_key: str | None = Security(api_key_header)) -> dict[str, Any]:
    verifier: ApiKeyVerifier = request.app.state.api_key_verifier
    return verifier(api_key)
