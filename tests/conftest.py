import os
import zipfile
from pathlib import Path

import pytest

from jarstrap.config import clear_settings_cache
from jarstrap.core.build_config import BuildConfiguration


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep settings files, .env.local and JARSTRAP_* variables of the host out of the tests."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("JARSTRAP_")}
    monkeypatch.setattr(os, "environ", env)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def project_dir(tmp_path):
    path = tmp_path / "app"
    path.mkdir()
    return path


@pytest.fixture
def make_config(project_dir):
    def _make(**overrides):
        values = {
            "output_dir": project_dir,
            "dependencies": ("org.foo:bar:1.0",),
            "name": "demo",
            "version": "1.2",
        }
        values.update(overrides)
        return BuildConfiguration(**values)
    return _make


@pytest.fixture
def homes(tmp_path):
    """Fake Maven and Java installations."""
    maven = tmp_path / "maven"
    java = tmp_path / "java"
    (maven / "bin").mkdir(parents=True)
    (java / "bin").mkdir(parents=True)
    return maven, java


def write_zip(path: Path, entries):
    """Create a zip; entries maps names to content (None for a directory entry)."""
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in entries.items():
            if content is None:
                archive.writestr(zipfile.ZipInfo(name), "")
            else:
                archive.writestr(name, content)
    return path
