"""Host system and user locale probes."""

import locale
import logging
import os
import platform
import time
from functools import lru_cache

from errlog.reporting.record import SystemInfo, UserLocale

logger = logging.getLogger(__name__)

# platform.machine() spellings to canonical architecture names
_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
}

# Checked in order when the locale module reports nothing
_LOCALE_ENV_VARS = ("LC_ALL", "LC_MESSAGES", "LANG")


def _os_version(os_type: str) -> str:
    if os_type == "darwin":
        release = platform.mac_ver()[0]
        if release:
            return f"macOS {release}"
    elif os_type == "windows":
        return f"Windows {platform.release()} {platform.version()}".strip()
    elif os_type == "linux":
        try:
            return platform.freedesktop_os_release().get("PRETTY_NAME") or platform.release()
        except OSError:
            logger.debug("No os-release file, using kernel release")
    return platform.release()


@lru_cache(maxsize=1)
def host_system_info() -> SystemInfo:
    """
    Probe the host operating system.

    The result is cached: it is captured once per process and shared by
    every collector that does not supply its own.
    """
    os_type = platform.system().lower()
    machine = platform.machine().lower()
    return SystemInfo(
        os_type=os_type,
        os_version=_os_version(os_type),
        os_arch=_ARCH_ALIASES.get(machine, machine),
    )


def _locale_name() -> str:
    name = locale.getlocale()[0]
    if name:
        return name
    for var in _LOCALE_ENV_VARS:
        value = os.environ.get(var, "")
        if value and value not in ("C", "POSIX"):
            return value
    return ""


def parse_locale_name(name: str) -> tuple[str, str]:
    """
    Split a locale name into (language, country).

    Example:
        >>> parse_locale_name("en_US.UTF-8")
        ('en', 'US')
    """
    name = name.split(".", 1)[0].split("@", 1)[0]
    if not name or name in ("C", "POSIX"):
        return "", ""
    language, _, country = name.replace("-", "_").partition("_")
    return language.lower(), country.upper()


def detect_locale() -> UserLocale:
    """Probe the current time zone abbreviation and user language/country."""
    language, country = parse_locale_name(_locale_name())
    return UserLocale(
        time_zone=time.strftime("%Z"),
        language=language,
        country=country,
    )


__all__ = [
    "host_system_info",
    "detect_locale",
    "parse_locale_name",
]
