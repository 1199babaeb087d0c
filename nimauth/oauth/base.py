"""
Base types for OAuth-style credential providers.

Every provider exposes the same capability set (login, refresh_token,
get_api_key, modify_models, scan_models) so the registry can treat them
uniformly. Some providers only wrap a static secret; for those, login just
collects the key and refresh_token is an identity by contract.
"""

import math
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlparse

from ..core.models import Model


def is_absolute_url(value: str) -> bool:
    """True for a well-formed absolute URL (scheme and host). No network check."""
    try:
        parsed = urlparse(value)
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc) and " " not in value


@dataclass(frozen=True)
class Credentials:
    """Authentication payload issued by a provider's login.

    `base_url` is an optional per-credential endpoint override; providers that
    have no such concept leave it as None.
    """
    refresh: str
    access: str
    expires: float
    base_url: Optional[str] = None

    def is_expired(self, now_ms: float) -> bool:
        """True once `now_ms` (epoch milliseconds) is past the expiry."""
        if math.isinf(self.expires):
            return False
        return now_ms >= self.expires

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "refresh": self.refresh,
            "access": self.access,
            "expires": self.expires,
        }
        if self.base_url is not None:
            data["baseUrl"] = self.base_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credentials":
        return cls(
            refresh=data["refresh"],
            access=data["access"],
            expires=float(data["expires"]),
            base_url=data.get("baseUrl"),
        )


@dataclass(frozen=True)
class PromptRequest:
    """A single question put to the user during login."""
    message: str
    placeholder: Optional[str] = None
    allow_empty: bool = False


class AbortSignal:
    """Polled cancellation flag shared between a login and its caller.

    Example:
        signal = AbortSignal()
        callbacks = LoginCallbacks(on_prompt=ask, signal=signal)
        # From a key handler or another thread:
        signal.abort()
    """

    def __init__(self):
        self._aborted = False
        self._lock = threading.Lock()

    def abort(self) -> None:
        with self._lock:
            self._aborted = True

    @property
    def aborted(self) -> bool:
        with self._lock:
            return self._aborted


PromptFn = Callable[[PromptRequest], Awaitable[str]]
ProgressFn = Callable[[str], None]


@dataclass
class LoginCallbacks:
    """Hooks the caller hands to `OAuthProvider.login`."""
    on_prompt: PromptFn
    on_progress: Optional[ProgressFn] = None
    signal: Optional[AbortSignal] = None


class OAuthProvider(ABC):
    """
    Interface every registered credential provider implements.

    Providers are stateless descriptors; all state lives in the Credentials
    value returned by `login` and held by the caller.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Registry identifier (e.g. 'nvidia-nim')."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name."""
        pass

    @abstractmethod
    async def login(self, callbacks: LoginCallbacks) -> Credentials:
        """
        Run the interactive login flow.

        Args:
            callbacks: Prompt, progress and cancellation hooks

        Returns:
            Credentials on full success

        Raises:
            OAuthError: On cancellation or invalid input
        """
        pass

    @abstractmethod
    async def refresh_token(self, credentials: Credentials) -> Credentials:
        """Return credentials usable for continued authentication."""
        pass

    @abstractmethod
    def get_api_key(self, credentials: Credentials) -> str:
        """Return the bearer token for outbound requests."""
        pass

    def modify_models(self, models: List[Model], credentials: Credentials) -> List[Model]:
        """Post-process a model catalog for these credentials. Default: unchanged."""
        return list(models)

    async def scan_models(self, credentials: Credentials) -> List[Model]:
        """List models the provider currently exposes. Default: none."""
        return []
