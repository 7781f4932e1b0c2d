# prunewalk/cli/interface.py
import sys
from pathlib import Path
from typing import Any, Dict, List

import click
from click_option_group import optgroup
from rich.console import Console as RichConsole
from rich.table import Table
import structlog

from prunewalk import __version__ as app_version
from prunewalk.config.loader import (
    build_config, effective_patterns, load_and_merge_configs, save_config_to_profile,
)
from prunewalk.config.settings import WalkConfig
from prunewalk.core.discovery import DirectoryWalker, WalkStats, compile_pattern_set
from prunewalk.exceptions import PruneWalkError
from prunewalk.logging_setup import configure_logging

log = structlog.get_logger(__name__)

def _print_stats(stats: WalkStats) -> None:
    table = Table(title="walk statistics", show_header=False)
    table.add_column("counter", style="cyan")
    table.add_column("value", justify="right")
    for name, value in stats.as_dict().items():
        table.add_row(name.replace("_", " "), f"{value:,}")
    RichConsole(stderr=True).print(table)

def _run_collection(config: WalkConfig) -> None:
    include_patterns, exclude_patterns = effective_patterns(config)
    include = compile_pattern_set(include_patterns)
    exclude = compile_pattern_set(exclude_patterns)

    walker = DirectoryWalker(config.root, include, exclude)
    matches: List[Path] = walker.walk()

    if config.count_only:
        click.echo(f"{len(matches)}")
    else:
        terminator = "\0" if config.null_separated else "\n"
        for path in matches:
            shown = path.absolute() if config.absolute_paths else path
            click.echo(f"{shown}{terminator}", nl=False)

    if config.show_stats:
        _print_stats(walker.stats)


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("root", required=False, type=click.Path(path_type=Path))
@optgroup.group("Filtering Options", help="Control which files are collected and which directories are pruned.")
@optgroup.option("-i", "--include", "include_patterns", multiple=True, help="Glob pattern a file must match (repeatable). Replaces the default include set.")
@optgroup.option("-e", "--exclude", "exclude_patterns", multiple=True, help="Glob pattern that drops files and prunes directories (repeatable). Replaces the default exclude set.")
@optgroup.option("--include-from-file", "include_from_files", type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path, resolve_path=True), multiple=True, help="File(s) with include glob patterns, one per line.")
@optgroup.option("--exclude-from-file", "exclude_from_files", type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path, resolve_path=True), multiple=True, help="File(s) with exclude glob patterns, one per line.")
@optgroup.group("Output Options", help="Control what is printed.")
@optgroup.option("--count", "count_only", is_flag=True, default=False, help="Print only the number of matches.")
@optgroup.option("--absolute-paths", "absolute_paths", is_flag=True, default=False, help="Print absolute paths.")
@optgroup.option("-0", "--null", "null_separated", is_flag=True, default=False, help="Separate printed paths with NUL instead of newline.")
@optgroup.option("--stats", "show_stats", is_flag=True, default=False, help="Show walk statistics on stderr.")
@optgroup.group("Application Behavior", help="Configuration profiles, saving, and logging.")
@optgroup.option("--config-profile", "active_config_profile_name", default=None, help="Load a profile from config file(s).")
@optgroup.option("--save", "save_profile_name", type=str, metavar="PROFILE_NAME", default=None, help="Save options to a profile in the project's .prunewalk.toml. Exits after saving.")
@optgroup.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@optgroup.option("--force-json-logs", "force_json_logs", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="prunewalk", prog_name="prunewalk", help="Show version and exit.")
@click.pass_context
def main_cli(ctx: click.Context, **cli_params: Any):
    """prunewalk: collect files under ROOT (default '.') whose relative paths
    match glob patterns, pruning excluded directories before reading them."""

    log_level = "warning"
    if cli_params.get("verbosity_level", 0) == 1: log_level = "info"
    elif cli_params.get("verbosity_level", 0) >= 2: log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=cli_params.get("force_json_logs", False))

    log.debug("cli_command_invoked", params=cli_params)

    try:
        raw_configs_from_toml_files = load_and_merge_configs()

        overrides: Dict[str, Any] = {
            "root": cli_params.get("root"),
            "save_profile_name": cli_params.get("save_profile_name"),
        }
        # flags only override config files when actually typed on the command line.
        for attr in ("count_only", "absolute_paths", "null_separated", "show_stats"):
            if ctx.get_parameter_source(attr) == click.core.ParameterSource.COMMANDLINE:
                overrides[attr] = cli_params[attr]
        # multiple=True options arrive as tuples; an empty tuple means "not given".
        for attr in ("include_patterns", "exclude_patterns", "include_from_files", "exclude_from_files"):
            if cli_params.get(attr):
                overrides[attr] = list(cli_params[attr])

        final_config = build_config(
            raw_configs_from_toml_files,
            profile_name=cli_params.get("active_config_profile_name"),
            overrides=overrides,
        )

        if final_config.save_profile_name:
            save_config_to_profile(final_config, final_config.save_profile_name)
            click.echo(f"Info: Profile '{final_config.save_profile_name}' saved.", err=True)
            ctx.exit(0)

        _run_collection(final_config)

    except click.exceptions.Exit as e: raise e
    except PruneWalkError as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
