"""
Command-line interface for jarstrap.

Exit codes:
    0  success
    1  invalid arguments/configuration
    2  pipeline failure
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from jarstrap import __version__
from jarstrap.config import get_log_level, get_toolchain_settings
from jarstrap.core.build_config import BuildConfiguration, ConfigurationError
from jarstrap.pipeline.orchestrator import run_pipeline

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIGURATION_ERROR = 1
EXIT_PIPELINE_ERROR = 2


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports errors with the configuration exit code."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_CONFIGURATION_ERROR, f"{self.prog}: error: {message}\n")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="jarstrap",
        description=f"Bootstraps applications from Maven dependencies (v{__version__}).",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # toolchain
    parser.add_argument("-m", "--maven_home", type=Path,
                        help="The directory with a local Maven installation to use instead of the provisioned one.")
    parser.add_argument("-u", "--maven_user_settings", type=Path,
                        help="The file with the Maven user settings to use other than $HOME/.m2/settings.xml.")
    parser.add_argument("-j", "--java_home", type=Path,
                        help="The Java home to use for the Maven execution.")

    # artifacts
    parser.add_argument("-d", "--dependency", dest="dependencies", action="append", default=[],
                        help="A Maven dependency to bootstrap the application with (group:artifact:version), "
                             "e.g.: nz.ac.waikato.cms.weka:weka-dev:3.9.4")
    parser.add_argument("-D", "--dependency_file", dest="dependency_files", type=Path, action="append", default=[],
                        help="A file with dependencies (group:artifact:version), one per line.")
    parser.add_argument("-x", "--exclusion", dest="exclusions", action="append", default=[],
                        help="An artifact to exclude from the dependencies (group:artifact).")
    parser.add_argument("-X", "--exclusion_file", dest="exclusion_files", type=Path, action="append", default=[],
                        help="A file with exclusions (group:artifact), one per line.")
    parser.add_argument("-r", "--repository", dest="repositories", action="append", default=[],
                        help="An additional Maven repository (id;name;url).")
    parser.add_argument("-R", "--repository_file", dest="repository_files", type=Path, action="append", default=[],
                        help="A file with additional repositories (id;name;url), one per line.")
    parser.add_argument("--external_jar", dest="external_jars", type=Path, action="append", default=[],
                        help="An external jar or a directory with jars to include.")
    parser.add_argument("--external_source", dest="external_sources", type=Path, action="append", default=[],
                        help="An external source jar or a directory with source jars to include.")
    parser.add_argument("-s", "--sources", action="store_true",
                        help="Download the source jars of the artifacts as well.")

    # project
    parser.add_argument("-n", "--name", help="The name of the project.")
    parser.add_argument("-V", "--version", help="The version of the project.")
    parser.add_argument("-p", "--pom_template", type=Path,
                        help="An alternative pom.xml template to use.")
    parser.add_argument("-o", "--output_dir", type=Path, required=True,
                        help="The directory to output the bootstrapped application in.")
    parser.add_argument("--clean", action="store_true",
                        help="Remove previous build artifacts before building.")
    parser.add_argument("--no_spring_boot", action="store_true",
                        help="Skip the generation of the single (spring-boot) jar.")
    parser.add_argument("--compress_dir_structure", action="store_true",
                        help="Place lib/bin/sources directly in the output directory instead of 'output'.")

    # main class
    parser.add_argument("-c", "--main_class", help="The main class of the application.")
    parser.add_argument("-v", "--jvm", action="append", default=[],
                        help="A parameter to pass to the JVM when launching the application "
                             "(use --jvm=-Xmx512m for values starting with '-').")
    parser.add_argument("-e", "--scripts", action="store_true",
                        help="Generate shell/batch scripts for launching the main class.")
    parser.add_argument("-l", "--launch", action="store_true",
                        help="Launch the main class after bootstrapping.")

    # packages
    parser.add_argument("--deb", action="store_true", help="Generate a Debian package.")
    parser.add_argument("--deb_snippet", type=Path,
                        help="A custom jdeb plugin snippet to use instead of the bundled one.")
    parser.add_argument("--rpm", action="store_true", help="Generate an RPM package.")
    parser.add_argument("--rpm_snippet", type=Path,
                        help="A custom rpm-maven-plugin snippet to use instead of the bundled one.")
    parser.add_argument("--docker", action="store_true", help="Generate a Dockerfile.")
    parser.add_argument("--docker_base_image",
                        help="The base image to use in the Dockerfile, e.g.: openjdk:11-jdk-slim-buster")
    parser.add_argument("--docker_instructions", type=Path,
                        help="A file with additional Dockerfile instructions to insert after FROM.")

    # run
    parser.add_argument("--dry_run", action="store_true",
                        help="Render all files, but do not run Maven or launch the application.")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    return parser


def print_summary(result) -> None:
    print("\n" + "=" * 60)
    print("BOOTSTRAP SUMMARY")
    print("=" * 60)
    print(f"Build ID: {result.build_id}")
    print(f"Status: {result.status.upper()}")
    print(f"Duration: {result.duration_seconds:.2f}s")
    print("\nSteps:")
    print(f"  Succeeded: {result.steps_succeeded}")
    print(f"  Failed: {result.steps_failed}")
    print(f"  Skipped: {result.steps_skipped}")

    if result.step_results:
        print("\nStep Details:")
        for name, details in result.step_results.items():
            status = details.get("status", "unknown")
            duration = details.get("duration", 0)
            print(f"  {name}: {status} ({duration:.2f}s)")

    print("=" * 60)


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_toolchain_settings()
        level = get_log_level()
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else level,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    try:
        config = BuildConfiguration.from_namespace(args)
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR

    result = run_pipeline(config, settings=settings, dry_run=args.dry_run)
    print_summary(result)

    if result.status != "success":
        print(f"Failed to perform bootstrapping:\n{result.message}", file=sys.stderr)
        return EXIT_PIPELINE_ERROR
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
