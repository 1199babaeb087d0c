"""
nimauth API Server

FastAPI backend exposing the credential provider registry and model discovery.
"""

import math
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from ..oauth import get_oauth_provider, get_oauth_providers
from ..oauth.base import Credentials, OAuthProvider, is_absolute_url
from ..oauth.errors import (
    CredentialValidationError,
    ModelListParseError,
    UpstreamConnectionError,
    UpstreamHTTPError,
)


app = FastAPI(title="nimauth", description="Credential provider and model discovery API")


class ProviderSummary(BaseModel):
    id: str
    name: str


class ScanModelsRequest(BaseModel):
    api_key: str
    base_url: Optional[str] = None


class ScanModelsResponse(BaseModel):
    models: List[Dict[str, Any]]


def _lookup(provider_id: str) -> OAuthProvider:
    try:
        return get_oauth_provider(provider_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _credentials_from_request(request: ScanModelsRequest) -> Credentials:
    api_key = request.api_key.strip()
    if not api_key:
        raise CredentialValidationError("API key is required")
    base_url = (request.base_url or "").strip() or None
    if base_url and not is_absolute_url(base_url):
        raise CredentialValidationError("Invalid base URL format")
    return Credentials(refresh="manual", access=api_key, expires=math.inf, base_url=base_url)


@app.get("/api/oauth/providers", response_model=List[ProviderSummary])
async def list_providers():
    """List registered credential providers."""
    return [ProviderSummary(id=p.id, name=p.name) for p in get_oauth_providers().values()]


@app.post("/api/oauth/{provider_id}/models", response_model=ScanModelsResponse)
async def scan_models(provider_id: str, request: ScanModelsRequest):
    """Fetch the models a provider exposes for the given key."""
    provider = _lookup(provider_id)
    try:
        credentials = _credentials_from_request(request)
        models = await provider.scan_models(credentials)
    except CredentialValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (UpstreamHTTPError, UpstreamConnectionError, ModelListParseError) as e:
        raise HTTPException(status_code=502, detail=str(e))
    return ScanModelsResponse(models=[m.to_dict() for m in models])


def run_server(host: str = "127.0.0.1", port: int = 8080):
    """Run the server."""
    import uvicorn
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
