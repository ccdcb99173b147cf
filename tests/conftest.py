"""
Shared test fixtures and configuration.
"""

import logging
import plistlib
from pathlib import Path

import pytest

from caskmatch.adapters.mock import MockCommandRunner
from caskmatch.core.models.app import LocalApp
from caskmatch.core.models.catalog import PackageRecord, parse_catalog
from caskmatch.core.services.catalog_store import CatalogFetchResult
from caskmatch.core.services.naming import normalize_app_name

SAMPLE_CATALOG = [
    {
        "token": "visual-studio-code",
        "name": ["Microsoft Visual Studio Code", "VS Code"],
        "desc": "Open-source code editor",
        "homepage": "https://code.visualstudio.com/",
        "artifacts": [
            {"app": ["Visual Studio Code.app"]},
            {"uninstall": [{"quit": "com.microsoft.VSCode"}]},
        ],
        "version": "1.90.0",
    },
    {
        "token": "google-chrome",
        "name": ["Google Chrome"],
        "desc": "Web browser",
        "homepage": "https://www.google.com/chrome/",
        "artifacts": [
            {"app": ["Google Chrome.app"]},
            {"uninstall": [{"launchctl": ["com.google.keystone.agent"], "quit": "com.google.Chrome"}]},
        ],
    },
    {
        "token": "quit-all",
        "name": ["QuitAll"],
        "desc": "Quit running apps",
        "homepage": "https://amicoapps.com/app/quit-all/",
        "artifacts": [{"app": ["Quit All.app"]}],
    },
    {
        "token": "yubico-yubikey-manager",
        "name": ["Yubikey Manager"],
        "desc": "Configure YubiKeys",
        "homepage": "https://developers.yubico.com/yubikey-manager-qt/",
        "artifacts": [{"app": [{"target": "YubiKey Manager.app"}]}],
    },
    {
        "token": "diashapes",
        "name": ["Dia"],
        "desc": "Diagram editor",
        "homepage": "https://dia-installer.de/",
        "artifacts": [{"app": ["Dia.app"]}],
    },
    {
        "token": "thebrowsercompany-dia",
        "name": ["Dia"],
        "desc": "AI browser",
        "homepage": "https://www.diabrowser.com/",
        "artifacts": [{"app": ["Dia.app"]}],
    },
]


def make_app(
    name: str,
    bundle_identifier: str | None = None,
    package_name: str = "",
    applications_dir: str = "/Applications",
) -> LocalApp:
    """Build a LocalApp the way the scanner would."""
    return LocalApp(
        original_name=name,
        normalized_name=normalize_app_name(name),
        bundle_path=f"{applications_dir}/{name}.app",
        package_name=package_name,
        bundle_identifier=bundle_identifier,
    )


class FakeStore:
    """Stands in for CatalogStore; returns a canned fetch result."""

    def __init__(self, result: CatalogFetchResult):
        self.result = result
        self.force_refresh_calls: list[bool] = []

    def fetch_all(self, force_refresh: bool = False) -> CatalogFetchResult:
        self.force_refresh_calls.append(force_refresh)
        return self.result


def make_bundle(directory: Path, name: str, bundle_identifier: str | None = None) -> Path:
    """Create a ``<name>.app`` directory, optionally with an Info.plist."""
    bundle = directory / f"{name}.app"
    contents = bundle / "Contents"
    contents.mkdir(parents=True)
    if bundle_identifier is not None:
        with (contents / "Info.plist").open("wb") as fh:
            plistlib.dump({"CFBundleIdentifier": bundle_identifier}, fh)
    return bundle


@pytest.fixture
def sample_catalog() -> list[dict]:
    """Raw catalog entries as the API returns them."""
    return [dict(entry) for entry in SAMPLE_CATALOG]


@pytest.fixture
def sample_records(sample_catalog: list[dict]) -> list[PackageRecord]:
    return parse_catalog(sample_catalog)


@pytest.fixture
def apps_dir(tmp_path: Path) -> Path:
    """Empty applications directory."""
    directory = tmp_path / "Applications"
    directory.mkdir()
    return directory


@pytest.fixture
def brew_runner() -> MockCommandRunner:
    """Runner with brew present and no packages installed; mas is absent."""
    runner = MockCommandRunner(available={"brew"})
    runner.set_response(["brew", "--version"], "Homebrew 4.3.0")
    runner.set_response(["brew", "ls", "-1", "--cask"], "")
    runner.set_response(["brew", "leaves"], "")
    return runner


@pytest.fixture(name="make_app")
def make_app_fixture():
    return make_app


@pytest.fixture(name="make_bundle")
def make_bundle_fixture():
    return make_bundle


@pytest.fixture(name="fake_store")
def fake_store_fixture():
    return FakeStore


@pytest.fixture
def restore_root_logger():
    """Undo handler changes made by setup_logging."""
    root = logging.getLogger()
    before, level = list(root.handlers), root.level
    raise_exceptions = logging.raiseExceptions
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
            handler.close()
    for handler in before:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging.raiseExceptions = raise_exceptions
