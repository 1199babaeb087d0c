"""
nimauth - credential providers for a multi-provider AI model gateway.

Ships the NVIDIA NIM provider: manual API-key login behind an OAuth-style
provider interface, plus model discovery against the NIM `/v1/models` API.
"""

__version__ = "0.1.0"
__author__ = "nimauth Contributors"

from .core.config import load_config, Config
from .oauth import get_oauth_provider, list_oauth_providers

__all__ = ["load_config", "Config", "get_oauth_provider", "list_oauth_providers", "__version__"]
