"""Configuration package"""

from resolveit.config.settings import settings, validate_settings

__all__ = ["settings", "validate_settings"]
