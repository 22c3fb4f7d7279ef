import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# API Keys and Config - loaded from .env
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
BRAVE_API_KEY = os.getenv("BRAVE_API_KEY")
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
SITE_ROOT = Path(os.getenv("SITE_ROOT", "."))
OGP_FONT_PATH = os.getenv("OGP_FONT_PATH")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Site constants
SITE_URL = "https://kidsgoodslab.com"
SITE_NAME = "キッズグッズラボ"
AFFILIATE_TAG = "kidsgoodslab-22"

# Brave Search
BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"


class ConfigError(Exception):
    """Required configuration is missing."""
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing environment variables: {', '.join(missing)}")


def require(*names: str) -> dict[str, str]:
    """Return the requested environment values, raising if any is unset."""
    values = {name: os.getenv(name) for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigError(missing)
    return values
