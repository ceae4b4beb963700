"""
Bot Gateway - retrieval-augmented chat API for configured bots.
"""

__version__ = "1.0.0"

from .shared.config.settings import get_settings
from .shared.exceptions import BotGatewayError, ConfigurationError

__all__ = [
    "get_settings",
    "BotGatewayError",
    "ConfigurationError",
]
