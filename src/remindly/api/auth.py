from __future__ import annotations

import hmac

from fastapi import HTTPException, Request

from remindly.config.settings import API_AUTH_TOKEN
from remindly.logger import logger

if not API_AUTH_TOKEN:
    logger.warning("API_AUTH_TOKEN is not set, the HTTP API will reject every request")


def extract_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip()
    token_header = request.headers.get("X-Remindly-Token", "").strip()
    return token_header or None


def make_auth_dependency(expected_token: str = API_AUTH_TOKEN):
    async def require_auth(request: Request) -> dict[str, str]:
        if not expected_token:
            raise HTTPException(status_code=503, detail="API_AUTH_TOKEN is not configured")

        token = extract_token(request)
        if token and hmac.compare_digest(token, expected_token):
            return {"auth": "token"}

        raise HTTPException(status_code=401, detail="Unauthorized")

    return require_auth
