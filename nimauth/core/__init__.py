"""Core components for nimauth."""

from .config import Config, ProviderConfig, load_config, load_credentials, save_credentials
from .models import Model, ModelCost, OPENAI_COMPLETIONS_API

__all__ = [
    "Config",
    "ProviderConfig",
    "load_config",
    "load_credentials",
    "save_credentials",
    "Model",
    "ModelCost",
    "OPENAI_COMPLETIONS_API",
]
