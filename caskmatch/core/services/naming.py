"""
Name normalization — turn display names into package-style keys.

Every lookup key in the catalog index and every app name passes through
``normalize_app_name`` so both sides of a comparison are shaped the same.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from caskmatch.core.models.catalog import strip_app_extension

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9\-_.]")
_HYPHEN_RUNS = re.compile(r"-+")


def normalize_app_name(name: str) -> str:
    """Normalize an application name for package lookup.

    Lowercases, turns whitespace into hyphens, strips anything outside
    ``[a-z0-9-_.]``, collapses hyphen runs and trims edge hyphens.

        >>> normalize_app_name("Visual Studio Code")
        'visual-studio-code'
    """
    value = _WHITESPACE.sub("-", name.lower())
    value = _DISALLOWED.sub("", value)
    value = _HYPHEN_RUNS.sub("-", value)
    return value.strip("-")


def compact(key: str) -> str:
    """Drop all hyphens from an already-normalized key."""
    return key.replace("-", "")


def extract_app_name(bundle_path: str) -> str:
    """Display name of a bundle: its file name without ``.app``."""
    return strip_app_extension(PurePosixPath(bundle_path).name)


def parse_command_output(output: str) -> list[str]:
    """Split command output into non-empty stripped lines."""
    return [line.strip() for line in output.splitlines() if line.strip()]


def should_ignore_app(
    normalized_name: str,
    package_name: str,
    ignored_apps: list[str],
) -> bool:
    """Check an app against the user's ignore list.

    An entry matches when it equals the app's normalized name or package
    name, or when it is a prefix followed by a hyphen — ignoring
    ``bartender`` also ignores ``bartender-5``.
    """
    for entry in ignored_apps:
        ignored = normalize_app_name(entry.strip())
        if not ignored:
            continue
        for name in (normalized_name, package_name):
            if name == ignored or name.startswith(f"{ignored}-"):
                return True
    return False
