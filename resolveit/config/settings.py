"""Dynaconf settings configuration"""

from pathlib import Path
from dynaconf import Dynaconf, Validator

PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"

settings = Dynaconf(
    envvar_prefix="APP",
    settings_files=[
        str(CONFIG_DIR / "settings.toml"),
        str(CONFIG_DIR / "settings.local.toml"),
        str(CONFIG_DIR / ".secrets.toml"),
    ],
    environments=True,
    env_switcher="APP_ENV",
)

settings.validators.register(
    Validator("DATABASE_URL", must_exist=True),
    Validator("JWT_SECRET", must_exist=True, min_len=32),
    Validator("ADMIN_USERNAME", "ADMIN_PASSWORD", must_exist=True),
    Validator("NOTIFICATION_DELAY_SECONDS", gte=0),
    Validator("RESPONSE_DEADLINE_DAYS", gte=1),
    Validator("MAX_UPLOAD_FILES", gte=1),
    Validator("STORAGE_BACKEND", is_in=["local", "cloudinary"]),
    Validator("RATE_LIMIT_WINDOW_SECONDS", "RATE_LIMIT_MAX_REQUESTS", gte=1),
)


def validate_settings():
    """Validate all settings on startup."""
    settings.validators.validate()
