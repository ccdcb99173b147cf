"""
Application scanner — enumerate ``.app`` bundles in a directory.

Produces one ``LocalApp`` per bundle, in directory-name order.  Only a
failure to read the directory itself is an error; an unreadable
``Info.plist`` just leaves the bundle identifier unset.
"""

from __future__ import annotations

import logging
import plistlib
from pathlib import Path
from xml.parsers.expat import ExpatError

from caskmatch.core.errors import DiscoveryError, ErrorType
from caskmatch.core.models.app import LocalApp
from caskmatch.core.models.catalog import APP_EXTENSION
from caskmatch.core.services.naming import extract_app_name, normalize_app_name

logger = logging.getLogger(__name__)


class ApplicationScanner:
    """Scan an applications directory for bundles.

    Args:
        applications_dir: Directory to scan (non-recursive).
    """

    def __init__(self, applications_dir: str | Path = "/Applications"):
        self.applications_dir = Path(applications_dir)

    def __repr__(self) -> str:
        return f"<ApplicationScanner dir={str(self.applications_dir)!r}>"

    def scan(self) -> list[LocalApp]:
        """List the bundles in the directory.

        Raises:
            DiscoveryError: FILE_NOT_FOUND, PERMISSION_DENIED or
                UNKNOWN_ERROR when the directory cannot be listed.
        """
        return [self._describe(path) for path in self.bundle_paths()]

    def bundle_paths(self) -> list[Path]:
        directory = self.applications_dir
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name.lower())
        except FileNotFoundError as e:
            raise DiscoveryError(
                f"Applications directory not found: {directory}",
                ErrorType.FILE_NOT_FOUND,
                e,
            ) from e
        except NotADirectoryError as e:
            raise DiscoveryError(
                f"Not a directory: {directory}",
                ErrorType.FILE_NOT_FOUND,
                e,
            ) from e
        except PermissionError as e:
            raise DiscoveryError(
                f"Permission denied accessing: {directory}",
                ErrorType.PERMISSION_DENIED,
                e,
            ) from e
        except OSError as e:
            raise DiscoveryError(
                f"Failed to scan applications directory: {e}",
                ErrorType.UNKNOWN_ERROR,
                e,
            ) from e

        return [
            p for p in entries
            if p.name.lower().endswith(APP_EXTENSION) and p.is_dir()
        ]

    def _describe(self, path: Path) -> LocalApp:
        original = extract_app_name(str(path))
        normalized = normalize_app_name(original)
        return LocalApp(
            original_name=original,
            normalized_name=normalized,
            bundle_path=str(path),
            package_name=normalized,
            bundle_identifier=read_bundle_identifier(path),
        )


def read_bundle_identifier(bundle: Path) -> str | None:
    """``CFBundleIdentifier`` from the bundle's Info.plist, if readable."""
    plist_path = bundle / "Contents" / "Info.plist"
    try:
        with plist_path.open("rb") as fh:
            info = plistlib.load(fh)
    except FileNotFoundError:
        return None
    except (OSError, ExpatError, ValueError) as e:
        logger.debug("Cannot read %s: %s", plist_path, e)
        return None

    identifier = info.get("CFBundleIdentifier") if isinstance(info, dict) else None
    if isinstance(identifier, str) and identifier.strip():
        return identifier.strip()
    return None
