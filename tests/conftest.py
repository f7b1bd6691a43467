"""Pytest configuration and shared fixtures.

Every fixture here works inside a temporary home directory so tests
never look at the real ``~/Library``, the real ``/Applications`` or the
real process table.
"""

import plistlib
import time
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest
from appsweep.safety.guard import SafetyGuard
from appsweep.safety.index import InstalledApplicationIndex
from appsweep.safety.processes import RunningApplication

AppFactory = Callable[..., Path]
GuardFactory = Callable[..., SafetyGuard]


@pytest.fixture
def fake_home(tmp_path: Path) -> Path:
    """A home directory with empty Library and Applications folders."""
    home = tmp_path.resolve() / "home"
    (home / "Library").mkdir(parents=True)
    (home / "Applications").mkdir()
    return home


@pytest.fixture
def make_app(fake_home: Path) -> AppFactory:
    """Factory creating ``.app`` bundles in the fake ~/Applications."""

    def _make(name: str, bundle_identifier: str | None = None) -> Path:
        bundle = fake_home / "Applications" / f"{name}.app"
        contents = bundle / "Contents"
        contents.mkdir(parents=True)
        if bundle_identifier is not None:
            with open(contents / "Info.plist", "wb") as f:
                plistlib.dump({"CFBundleIdentifier": bundle_identifier}, f)
        return bundle

    return _make


@pytest.fixture
def make_guard(fake_home: Path) -> GuardFactory:
    """Factory creating a SafetyGuard isolated from the host machine."""

    def _make(
        *,
        running: Iterable[RunningApplication] = (),
        extra_identifiers: Iterable[str] = (),
        extra_protected_paths: Iterable[str] = (),
        clock: Callable[[], float] = time.time,
    ) -> SafetyGuard:
        running_apps = list(running)

        def process_lister() -> list[RunningApplication]:
            return running_apps

        index = InstalledApplicationIndex(
            home=fake_home,
            application_dirs=[str(fake_home / "Applications")],
            caskroom_dirs=(),
            process_lister=process_lister,
            extra_identifiers=extra_identifiers,
        )
        return SafetyGuard(
            home=fake_home,
            index=index,
            process_lister=process_lister,
            extra_protected_paths=extra_protected_paths,
            clock=clock,
        )

    return _make


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at a temporary directory for every test."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home
