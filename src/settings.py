"""Static configuration for cookie-janitor.

User-editable settings live in an optional ``config.json`` at the project
root. Environment variables (a ``.env`` file is honoured) override the paths
so a profile can be switched without editing the file.
"""

import json
import os

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

CONFIG_PATH = os.getenv("COOKIE_JANITOR_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json, falling back to built-in defaults when absent."""

    if not os.path.exists(CONFIG_PATH):
        return {}

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    path = os.path.expanduser(path)
    if not os.path.isabs(path):
        path = os.path.join(PROJECT_ROOT, path)
    return path


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Rule file with one "host,decision" record per line.
RULES_PATH = _resolve_path(os.getenv("COOKIE_RULES_PATH") or _CONFIG.get("rules_path", "cookies.csv"))

# Browser profile and optional explicit database path. When COOKIES_PATH is
# unset the path is derived from the home directory, platform and profile.
_browser = _CONFIG.get("browser", {})
BROWSER_PROFILE = os.getenv("CHROME_PROFILE") or _browser.get("profile", "Default")
COOKIES_PATH = os.getenv("CHROME_COOKIES_PATH") or _browser.get("cookies_path")

# Upper bound for the host discovery query and for waiting on a locked db.
QUERY_TIMEOUT_SECONDS = float(_CONFIG.get("query_timeout_seconds", 30))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
