import os
import shutil

import pytest
import requests

from jarstrap.core import toolchain
from jarstrap.core.toolchain import (
    ResolvedToolchain,
    ToolchainError,
    default_java_home,
    download_archive,
    init_bundled_maven,
    maven_home_dir,
    resolve_toolchain,
)

from tests.conftest import write_zip

MAVEN_ZIP = {
    "apache-maven-3.9.9/": None,
    "apache-maven-3.9.9/bin/mvn": "#!/bin/sh\necho maven\n",
    "apache-maven-3.9.9/bin/mvn.cmd": "@echo maven\n",
    "apache-maven-3.9.9/conf/settings.xml": "<settings/>",
}


def toolchain_settings(**overrides):
    settings = {
        "maven_version": "3.9.9",
        "mode": "download",
        "download_url": "https://example.org/maven/{version}/apache-maven-{version}-bin.zip",
        "archive": None,
        "home": None,
    }
    settings.update(overrides)
    return settings


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload
        self.headers = {"content-length": str(len(payload))}

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False

    def raise_for_status(self):
        pass

    def iter_content(self, chunk_size):
        for i in range(0, len(self.payload), chunk_size):
            yield self.payload[i:i + chunk_size]


def test_maven_home_dir_from_setting(tmp_path):
    assert maven_home_dir(toolchain_settings(home=str(tmp_path / "mvn"))) == tmp_path / "mvn"


def test_maven_home_dir_default_is_versioned(monkeypatch, tmp_path):
    monkeypatch.setattr(toolchain.Path, "home", classmethod(lambda cls: tmp_path))
    home = maven_home_dir(toolchain_settings(maven_version="3.8.1"))
    assert home.name == "mvn-3.8.1"
    assert home.parent.name == "jarstrap"
    assert tmp_path in home.parents


def test_existing_installation_is_reused(tmp_path, monkeypatch):
    home = tmp_path / "mvn"
    (home / "bin").mkdir(parents=True)

    def fail(*args, **kwargs):
        raise AssertionError("must not download")
    monkeypatch.setattr(toolchain, "download_archive", fail)

    assert init_bundled_maven(toolchain_settings(home=str(home))) == home


def test_bundled_mode_installs_archive(tmp_path):
    archive = write_zip(tmp_path / "maven.zip", MAVEN_ZIP)
    home = tmp_path / "cache" / "mvn-3.9.9"

    result = init_bundled_maven(toolchain_settings(mode="bundled", archive=str(archive), home=str(home)))

    assert result == home
    assert (home / "conf" / "settings.xml").read_text() == "<settings/>"
    if os.name != "nt":
        assert os.access(home / "bin" / "mvn", os.X_OK)
    # no staging leftovers next to the installation
    assert [p.name for p in home.parent.iterdir()] == ["mvn-3.9.9"]


def test_bundled_mode_requires_archive(tmp_path):
    settings = toolchain_settings(mode="bundled", home=str(tmp_path / "mvn"))
    with pytest.raises(ToolchainError, match="No Maven archive"):
        init_bundled_maven(settings)

    settings["archive"] = str(tmp_path / "missing.zip")
    with pytest.raises(ToolchainError, match="does not exist"):
        init_bundled_maven(settings)
    assert not (tmp_path / "mvn").exists()


def test_broken_archive_leaves_no_installation(tmp_path):
    archive = tmp_path / "broken.zip"
    archive.write_text("garbage")
    home = tmp_path / "cache" / "mvn"

    with pytest.raises(ToolchainError, match="Failed to extract"):
        init_bundled_maven(toolchain_settings(mode="bundled", archive=str(archive), home=str(home)))

    assert not home.exists()
    assert list(home.parent.iterdir()) == []


def test_download_mode(tmp_path, monkeypatch):
    source = write_zip(tmp_path / "maven.zip", MAVEN_ZIP)
    urls = []

    def fake_download(url, dest):
        urls.append(url)
        shutil.copyfile(source, dest)
        return dest
    monkeypatch.setattr(toolchain, "download_archive", fake_download)
    home = tmp_path / "mvn"

    init_bundled_maven(toolchain_settings(home=str(home)))

    assert urls == ["https://example.org/maven/3.9.9/apache-maven-3.9.9-bin.zip"]
    assert (home / "bin" / "mvn").is_file()


def test_unknown_mode(tmp_path):
    with pytest.raises(ToolchainError, match="Unknown Maven provisioning mode"):
        init_bundled_maven(toolchain_settings(mode="magic", home=str(tmp_path / "mvn")))


def test_download_archive(tmp_path, monkeypatch):
    payload = b"x" * 200_000
    monkeypatch.setattr(toolchain.requests, "get", lambda url, **kwargs: FakeResponse(payload))

    target = tmp_path / "downloads"
    target.mkdir()

    dest = download_archive("https://example.org/file.zip", target / "file.zip")

    assert dest.read_bytes() == payload
    assert [p.name for p in target.iterdir()] == ["file.zip"]


def test_download_archive_failure(tmp_path, monkeypatch):
    def boom(url, **kwargs):
        raise requests.exceptions.ConnectionError("unreachable")
    monkeypatch.setattr(toolchain.requests, "get", boom)

    target = tmp_path / "downloads"
    target.mkdir()

    with pytest.raises(ToolchainError, match="Failed to download"):
        download_archive("https://example.org/file.zip", target / "file.zip")
    assert list(target.iterdir()) == []


def test_default_java_home_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("JAVA_HOME", str(tmp_path))
    assert default_java_home() == tmp_path


def test_default_java_home_from_path(monkeypatch, tmp_path):
    java = tmp_path / "jdk" / "bin" / "java"
    java.parent.mkdir(parents=True)
    java.write_text("")
    monkeypatch.delenv("JAVA_HOME", raising=False)
    monkeypatch.setattr(toolchain.shutil, "which", lambda name: str(java))
    assert default_java_home() == (tmp_path / "jdk").resolve()


def test_no_java_found(make_config, homes, monkeypatch):
    maven, _ = homes
    monkeypatch.delenv("JAVA_HOME", raising=False)
    monkeypatch.setattr(toolchain.shutil, "which", lambda name: None)
    with pytest.raises(ToolchainError, match="No Java home"):
        resolve_toolchain(make_config(maven_home=maven))


def test_resolve_explicit_homes(make_config, homes):
    maven, java = homes
    resolved = resolve_toolchain(make_config(maven_home=maven, java_home=java))
    assert resolved == ResolvedToolchain(maven_home=maven, java_home=java)
    assert resolved.mvn_executable.parent == maven / "bin"
    env = resolved.environment({"PATH": "/bin"})
    assert env == {"PATH": "/bin", "JAVA_HOME": str(java), "MAVEN_HOME": str(maven)}


def test_missing_maven_home(make_config, homes, tmp_path):
    _, java = homes
    with pytest.raises(ToolchainError, match="Maven home does not exist"):
        resolve_toolchain(make_config(maven_home=tmp_path / "nope", java_home=java))


def test_java_home_is_a_file(make_config, homes, tmp_path):
    maven, _ = homes
    not_a_dir = tmp_path / "java.txt"
    not_a_dir.write_text("")
    with pytest.raises(ToolchainError, match="Java home is not a directory"):
        resolve_toolchain(make_config(maven_home=maven, java_home=not_a_dir))


def test_provisioned_maven_used_without_explicit_home(make_config, homes, tmp_path):
    _, java = homes
    cached = tmp_path / "cached-mvn"
    (cached / "bin").mkdir(parents=True)
    resolved = resolve_toolchain(make_config(java_home=java), toolchain_settings(home=str(cached)))
    assert resolved.maven_home == cached
