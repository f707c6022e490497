import pytest

from jarstrap.cli import EXIT_CONFIGURATION_ERROR, EXIT_PIPELINE_ERROR, EXIT_SUCCESS, main


def home_args(homes):
    maven_home, java_home = homes
    return ["-m", str(maven_home), "-j", str(java_home)]


def test_missing_output_dir():
    with pytest.raises(SystemExit) as excinfo:
        main(["-d", "org.foo:bar:1.0"])
    assert excinfo.value.code == EXIT_CONFIGURATION_ERROR


def test_no_dependencies(project_dir, capsys):
    assert main(["-o", str(project_dir)]) == EXIT_CONFIGURATION_ERROR
    assert "No dependencies supplied" in capsys.readouterr().err


def test_dry_run(project_dir, homes, capsys):
    code = main([
        "-o", str(project_dir),
        "-d", "org.foo:bar:1.0",
        "-n", "demo",
        "-V", "1.2",
        "-c", "org.example.Main",
        "--scripts",
        "--dry_run",
    ] + home_args(homes))

    assert code == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "BOOTSTRAP SUMMARY" in out
    assert "Status: SUCCESS" in out
    assert (project_dir / "pom.xml").is_file()
    assert (project_dir / "output" / "bin" / "start.sh").is_file()


def test_pipeline_failure(project_dir, homes, tmp_path, capsys):
    _, java_home = homes
    code = main([
        "-o", str(project_dir),
        "-d", "org.foo:bar:1.0",
        "-m", str(tmp_path / "no-maven"),
        "-j", str(java_home),
        "--dry_run",
    ])

    assert code == EXIT_PIPELINE_ERROR
    err = capsys.readouterr().err
    assert "Failed to perform bootstrapping:" in err
    assert "Maven home does not exist" in err


def test_docker_without_base_image(project_dir, homes, capsys):
    code = main([
        "-o", str(project_dir),
        "-d", "org.foo:bar:1.0",
        "-c", "org.example.Main",
        "--docker",
        "--dry_run",
    ] + home_args(homes))

    assert code == EXIT_PIPELINE_ERROR
    assert "No base image specified, cannot generate Dockerfile!" in capsys.readouterr().err
    assert not (project_dir / "Dockerfile").exists()


def test_invalid_settings_file(project_dir, tmp_path, monkeypatch, capsys):
    path = tmp_path / "settings.yaml"
    path.write_text("toolchain: [unclosed\n", encoding="utf-8")
    monkeypatch.setenv("JARSTRAP_CONFIG", str(path))

    assert main(["-o", str(project_dir), "-d", "org.foo:bar:1.0"]) == EXIT_CONFIGURATION_ERROR
    assert "Invalid settings" in capsys.readouterr().err
