"""
NVIDIA NIM credential provider.

NIM uses long-lived static API keys, so there is no real OAuth exchange here:
login prompts for the key (and an optional base URL), refresh is an identity,
and model discovery lists `/v1/models` on the configured endpoint.
"""

import math
import re
from typing import List, Optional

from ..api.model_discovery import DEFAULT_TIMEOUT, _log, fetch_model_records
from ..core.models import OPENAI_COMPLETIONS_API, Model, ModelCost
from .base import (
    AbortSignal,
    Credentials,
    LoginCallbacks,
    OAuthProvider,
    PromptRequest,
    is_absolute_url,
)
from .errors import CredentialValidationError, LoginCancelledError

PROVIDER_ID = "nvidia-nim"
PROVIDER_NAME = "NVIDIA NIM"
DEFAULT_BASE_URL = "https://integrate.api.nvidia.com/v1"

DEFAULT_CONTEXT_WINDOW = 8192
MAX_OUTPUT_TOKENS = 4096

_V1_SUFFIX = re.compile(r"/v1/?$")


def _check_cancelled(signal: Optional[AbortSignal]) -> None:
    if signal is not None and signal.aborted:
        raise LoginCancelledError()


def resolve_base_url(credentials: Credentials) -> str:
    """Stored base URL, or the public NIM endpoint."""
    return credentials.base_url or DEFAULT_BASE_URL


def models_url(base_url: str) -> str:
    """Listing URL for `base_url`, without doubling a trailing /v1."""
    return f"{_V1_SUFFIX.sub('', base_url)}/v1/models"


async def login_nvidia_nim(callbacks: LoginCallbacks) -> Credentials:
    """
    Collect an NVIDIA NIM API key and optional base URL.

    Args:
        callbacks: Prompt/progress hooks and optional abort signal

    Returns:
        Credentials that never expire

    Raises:
        LoginCancelledError: The abort signal was set after a prompt
        CredentialValidationError: Empty key or malformed base URL
    """
    if callbacks.on_progress:
        callbacks.on_progress("Enter your NVIDIA NIM API credentials...")

    api_key = await callbacks.on_prompt(PromptRequest(
        message="Enter your NVIDIA NIM API key (nvapi-...):",
        placeholder="nvapi-...",
        allow_empty=False,
    ))
    _check_cancelled(callbacks.signal)

    # The prompt layer is asked to refuse empty input, but don't rely on it
    api_key = api_key.strip()
    if not api_key:
        raise CredentialValidationError("API key is required")

    base_url_input = await callbacks.on_prompt(PromptRequest(
        message="Custom API base URL (leave empty for default):",
        placeholder=DEFAULT_BASE_URL,
        allow_empty=True,
    ))
    _check_cancelled(callbacks.signal)

    base_url = base_url_input.strip() or DEFAULT_BASE_URL
    if not is_absolute_url(base_url):
        raise CredentialValidationError("Invalid base URL format")

    if callbacks.on_progress:
        callbacks.on_progress("Credentials saved successfully.")

    return Credentials(
        refresh="manual",
        access=api_key,
        expires=math.inf,
        base_url=base_url,
    )


async def refresh_nvidia_nim_token(credentials: Credentials) -> Credentials:
    """NIM keys don't expire; hand back the same credentials."""
    return credentials


def _to_model(record: dict, base_url: str) -> Model:
    context_window = record.get("max_model_len") or DEFAULT_CONTEXT_WINDOW
    return Model(
        id=record["id"],
        name=record["id"],
        api=OPENAI_COMPLETIONS_API,
        provider=PROVIDER_ID,
        base_url=base_url,
        reasoning=False,
        input=("text",),
        cost=ModelCost(),
        context_window=context_window,
        max_tokens=min(context_window, MAX_OUTPUT_TOKENS),
    )


async def scan_nvidia_nim_models(
    credentials: Credentials,
    signal: Optional[AbortSignal] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[Model]:
    """
    List the models exposed by the credentials' NIM endpoint.

    The signal, when given, is checked before the request is sent and after
    the response arrives; an in-flight request is not interrupted.

    Raises:
        UpstreamHTTPError: Non-2xx response
        ModelListParseError: Response is not a model listing
        LoginCancelledError: Signal set before or during the request
    """
    base_url = resolve_base_url(credentials)
    url = models_url(base_url)

    _check_cancelled(signal)
    records = await fetch_model_records(url, credentials.access, timeout, PROVIDER_NAME)
    _check_cancelled(signal)

    models = [_to_model(record, base_url) for record in records]
    _log("scan_nvidia_nim_models: %d models from %s", len(models), url)
    return models


class NvidiaNimOAuthProvider(OAuthProvider):
    """Registry entry for NVIDIA NIM (static API key behind the OAuth interface)."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    @property
    def id(self) -> str:
        return PROVIDER_ID

    @property
    def name(self) -> str:
        return PROVIDER_NAME

    async def login(self, callbacks: LoginCallbacks) -> Credentials:
        return await login_nvidia_nim(callbacks)

    async def refresh_token(self, credentials: Credentials) -> Credentials:
        return await refresh_nvidia_nim_token(credentials)

    def get_api_key(self, credentials: Credentials) -> str:
        return credentials.access

    def modify_models(self, models: List[Model], credentials: Credentials) -> List[Model]:
        """Point every NIM model at the credentials' endpoint; leave others untouched."""
        base_url = resolve_base_url(credentials)
        return [m.replace(base_url=base_url) if m.provider == PROVIDER_ID else m for m in models]

    async def scan_models(self, credentials: Credentials) -> List[Model]:
        return await scan_nvidia_nim_models(credentials, timeout=self.timeout)


nvidia_nim_oauth_provider = NvidiaNimOAuthProvider()
