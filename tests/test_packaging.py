import os

import pytest

from jarstrap.core.toolchain import ResolvedToolchain
from jarstrap.packaging import launch
from jarstrap.packaging.docker import create_docker_files, dockerfile
from jarstrap.packaging.launch import launch_main_class
from jarstrap.packaging.ospackage import create_debian_files, create_redhat_files
from jarstrap.packaging.scripts import create_scripts


def test_scripts(make_config):
    config = make_config(main_class="org.example.Main", jvm_args=("-Xmx512m", "-Dgreeting=hello world"))

    result = create_scripts(config)

    assert result.ok
    shell = (config.bin_dir / "start.sh").read_text(encoding="utf-8")
    assert shell.startswith("#!/bin/bash\n")
    assert "java -Xmx512m '-Dgreeting=hello world' -cp \"$CP\" org.example.Main \"$@\"" in shell
    if os.name != "nt":
        assert os.access(config.bin_dir / "start.sh", os.X_OK)
    batch = (config.bin_dir / "start.bat").read_bytes()
    assert b"\r\n" in batch
    assert b"org.example.Main %*" in batch


def test_scripts_next_to_lib(make_config, project_dir):
    config = make_config(main_class="org.example.Main", compress_dir_structure=True)
    assert create_scripts(config).ok
    assert (project_dir / "bin" / "start.sh").is_file()


def test_scripts_require_main_class(make_config, project_dir):
    result = create_scripts(make_config())

    assert not result.ok
    assert result.message == "No main class specified, cannot generate launch scripts!"
    assert list(project_dir.iterdir()) == []


def test_debian_files(make_config, project_dir):
    config = make_config(main_class="org.example.Main")

    assert create_debian_files(config).ok

    script = project_dir / "src" / "deb" / "resources" / "usr" / "bin" / "demo"
    assert '-cp "/usr/lib/demo/*" org.example.Main' in script.read_text(encoding="utf-8")
    control = (project_dir / "src" / "deb" / "control" / "control").read_text(encoding="utf-8")
    assert "Package: demo\n" in control
    assert "Version: 1.2\n" in control


def test_redhat_files(make_config, project_dir):
    config = make_config(main_class="org.example.Main")

    assert create_redhat_files(config).ok

    script = project_dir / "src" / "rpm" / "resources" / "usr" / "bin" / "demo"
    assert script.read_text(encoding="utf-8").startswith("#!/bin/bash\n")


@pytest.mark.parametrize("create", [create_debian_files, create_redhat_files])
def test_os_packages_require_main_class(create, make_config, project_dir):
    result = create(make_config())
    assert not result.ok
    assert result.message.startswith("No main class specified")
    assert not (project_dir / "src").exists()


def test_docker_requires_base_image(make_config, project_dir):
    result = create_docker_files(make_config(main_class="org.example.Main"))

    assert not result.ok
    assert result.message == "No base image specified, cannot generate Dockerfile!"
    assert not (project_dir / "Dockerfile").exists()
    assert not (project_dir / "docker").exists()


def test_docker_requires_main_class(make_config, project_dir):
    result = create_docker_files(make_config(docker_base_image="openjdk:11"))
    assert not result.ok
    assert result.message == "No main class specified, cannot generate Dockerfile!"
    assert list(project_dir.iterdir()) == []


def test_docker_files(make_config, project_dir, tmp_path, caplog):
    instructions = tmp_path / "instructions.txt"
    instructions.write_text("RUN apt-get update\n", encoding="utf-8")
    config = make_config(
        main_class="org.example.Main",
        docker_base_image="openjdk:11-jdk-slim-buster",
        docker_instructions=instructions,
        sources=True,
    )

    with caplog.at_level("INFO"):
        result = create_docker_files(config)

    assert result.ok
    lines = (project_dir / "Dockerfile").read_text(encoding="utf-8").splitlines()
    assert lines[0] == "FROM openjdk:11-jdk-slim-buster"
    assert lines.index("RUN apt-get update") < lines.index("COPY output/lib /jarstrap/lib")
    assert "COPY output/sources /jarstrap/sources" in lines
    assert "COPY docker/start.sh /jarstrap/bin/start.sh" in lines
    assert lines[-1] == 'CMD ["/jarstrap/bin/start.sh"]'
    script = (project_dir / "docker" / "start.sh").read_text(encoding="utf-8")
    assert '-cp "/jarstrap/lib/*" org.example.Main' in script
    assert "docker build -t demo:1.2" in caplog.text


def test_dockerfile_compressed_layout(make_config):
    config = make_config(main_class="org.example.Main", docker_base_image="alpine", compress_dir_structure=True)
    text = dockerfile(config)
    assert "COPY lib /jarstrap/lib\n" in text
    assert "sources" not in text


def test_launch(make_config, homes, monkeypatch):
    maven_home, java_home = homes
    toolchain = ResolvedToolchain(maven_home=maven_home, java_home=java_home)
    config = make_config(main_class="org.example.Main", jvm_args=("-Xmx1g",))
    calls = []

    def fake_stream(cmd, tag, env=None, cwd=None):
        calls.append(cmd)
        return 0
    monkeypatch.setattr(launch, "stream_process", fake_stream)

    assert launch_main_class(config, toolchain).ok
    assert calls == [[
        str(toolchain.java_executable),
        "-Xmx1g",
        "-cp",
        str(config.lib_dir) + os.sep + "*",
        "org.example.Main",
    ]]


def test_launch_failure_reports_exit_code(make_config, homes, monkeypatch):
    toolchain = ResolvedToolchain(*homes)
    monkeypatch.setattr(launch, "stream_process", lambda *args, **kwargs: 3)

    result = launch_main_class(make_config(main_class="org.example.Main"), toolchain)

    assert not result.ok
    assert result.message.startswith("Failed to launch class (")
    assert result.message.endswith(": 3")


def test_launch_requires_main_class(make_config, homes):
    result = launch_main_class(make_config(), ResolvedToolchain(*homes))
    assert result.message == "No main class specified, cannot launch application!"
