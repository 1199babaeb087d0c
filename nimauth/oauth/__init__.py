"""
OAuth-style Provider Registry for nimauth.

Providers are lazy-loaded via OAUTH_PROVIDER_MODULES; each module exports a
module-level provider instance named `<snake_id>_oauth_provider`.
"""

from typing import Dict, List

from .base import AbortSignal, Credentials, LoginCallbacks, OAuthProvider, PromptRequest
from .errors import (
    CredentialValidationError,
    LoginCancelledError,
    ModelListParseError,
    OAuthError,
    UpstreamConnectionError,
    UpstreamHTTPError,
)

# Provider registry - maps provider id to module path (lazy loading)
OAUTH_PROVIDER_MODULES = {
    "nvidia-nim": "nimauth.oauth.nvidia_nim",
}

# Cache for loaded provider instances
_provider_cache: Dict[str, OAuthProvider] = {}


def get_oauth_provider(provider_id: str) -> OAuthProvider:
    """
    Get the provider instance for a given provider id.

    Args:
        provider_id: Registry id, e.g. 'nvidia-nim'

    Returns:
        Provider instance (shared, stateless)

    Raises:
        ValueError: If provider id is unknown
    """
    if provider_id in _provider_cache:
        return _provider_cache[provider_id]

    if provider_id not in OAUTH_PROVIDER_MODULES:
        available = list(OAUTH_PROVIDER_MODULES.keys())
        raise ValueError(f"Unknown OAuth provider '{provider_id}'. Available: {available}")

    import importlib
    module = importlib.import_module(OAUTH_PROVIDER_MODULES[provider_id])

    attr_name = f"{provider_id.replace('-', '_')}_oauth_provider"
    provider = getattr(module, attr_name)
    _provider_cache[provider_id] = provider
    return provider


def create_oauth_provider(provider_id: str, **options) -> OAuthProvider:
    """
    Create a fresh provider instance with non-default options.

    Args:
        provider_id: Registry id
        **options: Constructor options (e.g. timeout)

    Returns:
        New provider instance of the registered type
    """
    provider_class = type(get_oauth_provider(provider_id))
    return provider_class(**options)


def list_oauth_providers() -> List[str]:
    """List all registered provider ids."""
    return list(OAUTH_PROVIDER_MODULES.keys())


def get_oauth_providers() -> Dict[str, OAuthProvider]:
    """Return mapping of provider id -> provider instance, loading each."""
    return {pid: get_oauth_provider(pid) for pid in OAUTH_PROVIDER_MODULES}


__all__ = [
    "get_oauth_provider",
    "create_oauth_provider",
    "get_oauth_providers",
    "list_oauth_providers",
    "OAUTH_PROVIDER_MODULES",
    "OAuthProvider",
    "Credentials",
    "LoginCallbacks",
    "PromptRequest",
    "AbortSignal",
    "OAuthError",
    "LoginCancelledError",
    "CredentialValidationError",
    "UpstreamHTTPError",
    "UpstreamConnectionError",
    "ModelListParseError",
]
