"""
Configuration system for nimauth.

Loads configuration from:
1. nimauth.yaml (or ~/.nimauth/nimauth.yaml) for structure
2. .env for secrets (API keys)

Supports ${VAR} placeholder resolution from environment.
"""

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

import yaml
from dotenv import load_dotenv

from ..oauth.base import Credentials

DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_CREDENTIALS_FILE = Path.home() / ".nimauth" / "auth.json"


@dataclass
class ProviderConfig:
    """Configuration for a single credential provider.

    api_key and base_url seed non-interactive use (e.g. `nimauth models`
    without a stored login). API keys resolved from env via ${NVIDIA_API_KEY}.
    """
    name: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_credentials(self) -> Optional[Credentials]:
        """Static-key credentials from config, or None without an api_key."""
        if not self.api_key or not self.api_key.strip():
            return None
        return Credentials(
            refresh="manual",
            access=self.api_key.strip(),
            expires=float("inf"),
            base_url=self.base_url or None,
        )


@dataclass
class Config:
    """Main configuration object."""
    providers: Dict[str, ProviderConfig] = field(default_factory=dict)
    default_provider: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    credentials_file: Path = field(default_factory=lambda: DEFAULT_CREDENTIALS_FILE)

    def get_provider(self, name: Optional[str] = None) -> ProviderConfig:
        """Get provider config by name or default."""
        provider_name = name or self.default_provider
        if not provider_name or provider_name not in self.providers:
            raise ValueError(f"Provider '{provider_name}' not found. Available: {list(self.providers.keys())}")
        return self.providers[provider_name]

    def list_providers(self) -> List[str]:
        """List configured provider names."""
        return list(self.providers.keys())


def _resolve_env_vars(value: Any) -> Any:
    """Resolve ${VAR} placeholders from environment."""
    if isinstance(value, str):
        pattern = r'\$\{([^}]+)\}'
        def replacer(match):
            var_name = match.group(1)
            return os.environ.get(var_name, match.group(0))
        return re.sub(pattern, replacer, value)
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def _find_config_file() -> Optional[Path]:
    """Find nimauth.yaml in standard locations."""
    locations = [
        Path.cwd() / "nimauth.yaml",
        Path.cwd() / ".nimauth.yaml",
        Path.home() / ".nimauth" / "nimauth.yaml",
        Path.home() / ".config" / "nimauth" / "nimauth.yaml",
    ]
    for loc in locations:
        if loc.exists():
            return loc
    return None


def _parse_provider_config(name: str, data: Dict[str, Any]) -> ProviderConfig:
    """Parse a provider configuration entry."""
    api_key = data.get("api_key")
    # Unresolved placeholders mean the variable isn't set
    if isinstance(api_key, str) and api_key.startswith("${"):
        api_key = None

    standard_keys = {"api_key", "base_url"}
    extra = {k: v for k, v in data.items() if k not in standard_keys}

    return ProviderConfig(
        name=name,
        api_key=api_key,
        base_url=data.get("base_url"),
        extra=extra,
    )


def load_config(config_path: Optional[Path] = None, env_path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML and environment.

    Args:
        config_path: Path to nimauth.yaml (auto-detected if not provided)
        env_path: Path to .env file (auto-detected if not provided)

    Returns:
        Config object with all settings
    """
    # Load .env first so variables are available for resolution
    if env_path and env_path.exists():
        load_dotenv(env_path)
    else:
        env_locations = []
        try:
            env_locations.append(Path.cwd() / ".env")
        except OSError:
            pass
        env_locations.append(Path.home() / ".nimauth" / ".env")
        if config_path:
            env_locations.insert(0, config_path.parent / ".env")
        for loc in env_locations:
            if loc.exists():
                load_dotenv(loc)
                break

    yaml_path = config_path or _find_config_file()

    if not yaml_path or not yaml_path.exists():
        return Config()

    with open(yaml_path, "r") as f:
        raw_config = yaml.safe_load(f) or {}

    config_data = _resolve_env_vars(raw_config)

    providers = {}
    provider_section = config_data.get("providers", {}) or {}
    for provider_name, provider_data in provider_section.items():
        if provider_name != "default" and isinstance(provider_data, dict):
            providers[provider_name] = _parse_provider_config(provider_name, provider_data)

    default_provider = provider_section.get("default") or (list(providers.keys())[0] if providers else None)

    credentials_file = Path(config_data.get("credentials_file", DEFAULT_CREDENTIALS_FILE)).expanduser()

    return Config(
        providers=providers,
        default_provider=default_provider,
        request_timeout=float(config_data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
        credentials_file=credentials_file,
    )


# Credentials store (persisted separately, keyed by provider id)

def load_credentials(path: Optional[Path] = None) -> Dict[str, Credentials]:
    """Load stored credentials. Missing or unreadable store yields {}."""
    store_path = path or DEFAULT_CREDENTIALS_FILE
    if not store_path.exists():
        return {}
    try:
        with open(store_path, "r") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, IOError):
        return {}
    if not isinstance(raw, dict):
        return {}
    result = {}
    for provider_id, data in raw.items():
        try:
            result[provider_id] = Credentials.from_dict(data)
        except (KeyError, TypeError, ValueError):
            continue
    return result


def save_credentials(store: Dict[str, Credentials], path: Optional[Path] = None) -> None:
    """Write the whole store. Infinite expiry is written as JSON `Infinity`."""
    store_path = path or DEFAULT_CREDENTIALS_FILE
    store_path.parent.mkdir(parents=True, exist_ok=True)
    # Created owner-only; an existing file keeps its mode, so tighten that too
    fd = os.open(store_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    try:
        os.fchmod(fd, 0o600)
    except (AttributeError, OSError):
        pass
    with os.fdopen(fd, "w") as f:
        json.dump({pid: creds.to_dict() for pid, creds in store.items()}, f, indent=2)
