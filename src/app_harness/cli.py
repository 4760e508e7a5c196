"""Command line entry point.

Examples:
    app-harness run my_app:analyse
    app-harness run ./app.py:analyse --settings local.toml --mode session
    app-harness show-config --settings local.toml
"""

import importlib
import importlib.util
import sys
from dataclasses import replace
from pathlib import Path

import click

from .artifacts import clear_recent_output
from .configuration import ConfigResolver
from .logger import Logger
from .outcome import Failure, HaltWithCode
from .runner import AppFunction, AppRunner
from .settings import RuntimeSettings


def load_settings(settings_path: str | None) -> RuntimeSettings:
    if settings_path is None:
        return RuntimeSettings.from_env()
    try:
        return RuntimeSettings.from_toml(settings_path)
    except (FileNotFoundError, ValueError) as e:
        raise click.BadParameter(str(e), param_hint="--settings") from e


def load_app_function(target: str) -> AppFunction:
    """Resolve ``module:function`` or ``path/to/file.py:function``.

    Raises:
        click.BadParameter: If the target cannot be imported or is not callable
    """
    module_name, sep, function_name = target.rpartition(":")
    if not sep or not module_name or not function_name:
        msg = f"Expected 'module:function', got {target!r}"
        raise click.BadParameter(msg, param_hint="TARGET")

    try:
        if module_name.endswith(".py"):
            path = Path(module_name)
            spec = importlib.util.spec_from_file_location(path.stem, path)
            if spec is None or spec.loader is None:
                msg = f"Cannot load app module from {path}"
                raise click.BadParameter(msg, param_hint="TARGET")
            module = importlib.util.module_from_spec(spec)
            # results must stay picklable by module name
            sys.modules[spec.name] = module
            spec.loader.exec_module(module)
        else:
            module = importlib.import_module(module_name)

    except (ImportError, OSError) as e:
        msg = f"Cannot import {module_name!r}: {e}"
        raise click.BadParameter(msg, param_hint="TARGET") from e

    app_function = getattr(module, function_name, None)
    if not callable(app_function):
        msg = f"{module_name!r} has no callable {function_name!r}"
        raise click.BadParameter(msg, param_hint="TARGET")
    return app_function


@click.group()
def cli() -> None:
    """Run app functions against artifacts provided by the platform."""


@cli.command()
@click.argument("target")
@click.option("--settings", "settings_path", type=click.Path(dir_okay=False),
              help="TOML settings file; the environment is used when omitted.")
@click.option("--mode", type=click.Choice(["batch", "session"]), default="batch",
              show_default=True, help="Batch runs re-raise every failure.")
@click.option("--source-file", help="Override the input artifact path.")
@click.option("--output-file", help="Override the output artifact path.")
@click.option("--error-file", help="Override the error artifact path.")
@click.option("--clear-output/--keep-output", default=None,
              help="Reset the artifacts directory and output before running.")
@click.pass_context
def run(
        ctx: click.Context,
        target: str,
        settings_path: str | None,
        mode: str,
        source_file: str | None,
        output_file: str | None,
        error_file: str | None,
        clear_output: bool | None
) -> None:
    """Run the app function TARGET once."""
    settings = load_settings(settings_path).with_paths(source_file, output_file, error_file)
    if clear_output is not None:
        settings = replace(settings, clear_output=clear_output)

    app_function = load_app_function(target)
    runner = AppRunner(settings)
    clear_recent_output(settings, runner.logger)

    if mode == "batch":
        runner.run(app_function)
        return

    outcome = runner.run_session(app_function)
    if isinstance(outcome, Failure) and isinstance(outcome.termination, HaltWithCode):
        runner.logger.warn("Stopping session with code %s", outcome.termination.code)
        ctx.exit(outcome.termination.code)


@cli.command("show-config")
@click.option("--settings", "settings_path", type=click.Path(dir_okay=False),
              help="TOML settings file; the environment is used when omitted.")
def show_config(settings_path: str | None) -> None:
    """Log the app configuration with masked settings hidden."""
    settings = load_settings(settings_path)
    logger = Logger(settings.log_level)
    resolver = ConfigResolver(replace(settings, print_configuration=False), logger)
    resolver.print(resolver.load(), settings.mask_setting_ids)


def main() -> None:
    cli(prog_name="app-harness")

