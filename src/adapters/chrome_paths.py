"""Helpers for locating Chrome's cookie database.

Chrome keeps one ``Cookies`` SQLite file per profile under a platform-specific
user-data directory. Newer builds moved it into a ``Network`` subdirectory.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

DEFAULT_PROFILE = "Default"
COOKIES_FILENAME = "Cookies"


def user_data_dir(home: Path, platform: str) -> Path:
    """Return Chrome's user-data directory for a platform string (sys.platform)."""

    if platform.startswith("win") or platform == "cygwin":
        return home / "AppData" / "Local" / "Google" / "Chrome" / "User Data"
    if platform == "darwin":
        return home / "Library" / "Application Support" / "Google" / "Chrome"
    return home / ".config" / "google-chrome"


def _candidates(profile_dir: Path, platform: str) -> list[Path]:
    network = profile_dir / "Network" / COOKIES_FILENAME
    if platform.startswith("win") or platform == "cygwin":
        return [network]
    return [network, profile_dir / COOKIES_FILENAME]


def cookies_path_for_profile(home: Path, profile: str, platform: str) -> Path:
    """Return the cookie database path for a profile.

    The first existing candidate wins. When none exists the platform's
    usual location is returned so the caller can report where it looked.
    """

    candidates = _candidates(user_data_dir(home, platform) / profile, platform)
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[-1]


def resolve_cookies_path(
    explicit_path: Optional[str],
    profile: Optional[str],
    home: Optional[Path] = None,
    platform: Optional[str] = None,
) -> str:
    """Pick the cookie database path: explicit override, else derived."""

    if explicit_path:
        return str(Path(explicit_path).expanduser())
    return str(
        cookies_path_for_profile(
            home or Path.home(),
            profile or DEFAULT_PROFILE,
            platform or sys.platform,
        )
    )


def list_profiles(home: Path, platform: str) -> list[tuple[str, Path]]:
    """Return (profile name, cookie db path) for every profile that has one."""

    root = user_data_dir(home, platform)
    if not root.is_dir():
        return []

    profiles: list[tuple[str, Path]] = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir():
            continue
        for candidate in _candidates(entry, platform):
            if candidate.is_file():
                profiles.append((entry.name, candidate))
                break
    return profiles
