"""kuiper CLI - send HTTP requests described by files on disk."""

import sys
from pathlib import Path

import click

TOOL_HELP = """\
kuiper — send HTTP requests described by .kuiper files.

\b
USAGE
─────
  kuiper NAME [options]

  NAME is a path to a request file, relative to the requests root. If no
  file exists there, every .kuiper file under the root whose path contains
  NAME is a candidate. Exactly one candidate is sent; several are listed
  and nothing is sent.

  kuiper users/get_user.kuiper
  kuiper get_user
  kuiper get_user -e .env.local

\b
REQUEST FILE FORMAT (*.kuiper, JSON)
────────────────────────────────────
  \b
  {
    "uri": "http://localhost/api/user/{{env:USER_ID}}",
    "method": "GET",
    "headers": {"X-Request-Id": "{{expr:uuid}}", "X-Debug": null},
    "params": {"verbose": "true"},
    "body": {"sent_at": "{{expr:now}}"}
  }

  A header set to null is known but not sent.

\b
HEADER INHERITANCE (headers.json)
─────────────────────────────────
  Any directory between the root and the request file may hold a
  headers.json object. The request inherits every header it does not
  declare itself; a directory closer to the file wins over one further
  away.

\b
PLACEHOLDERS
────────────
  \b
  {{env:VAR_NAME}}   Environment variable (or from the .env file)
  {{expr:uuid}}      Random UUID v4
  {{expr:now}}       Current UTC time, RFC 3339

  A placeholder ends at the first "}}" after its "{{"; placeholders do
  not nest.

\b
CONFIG FILE FORMAT (.kuiper.yaml)
─────────────────────────────────
  Config resolution order:
    1. -c/--config flag (explicit path)
    2. .kuiper.yaml / .kuiper.yml / kuiper.yaml / kuiper.yml in CWD
    3. ~/.kuiper/config.yaml (global)

  \b
  defaults:
    root: requests              # relative to the config file
    env_file: .env
    timeout: 30                 # seconds
    extension: kuiper
    headers_file: headers.json
    interpolate_params: true

\b
LOGGING
───────
  KUIPER_LOG=debug kuiper get_user     Log resolution steps to stderr
"""


@click.command(
    cls=click.Command,
    help=TOOL_HELP,
    context_settings={"max_content_width": 88},
)
@click.argument("name", required=False)
@click.option(
    "-e",
    "--env-file",
    "env_file",
    default=None,
    help=".env file whose values are available to {{env:...}} placeholders.",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    default=None,
    help="Config file path. Default: .kuiper.yaml in CWD, then ~/.kuiper/config.yaml.",
)
@click.option(
    "-r",
    "--root",
    "root_dir",
    default=None,
    help="Requests root directory. Default: root from config, else CWD.",
)
@click.option(
    "--timeout",
    type=int,
    default=None,
    help="Request timeout in seconds. Default: 30.",
)
@click.option(
    "--interpolate-params/--no-interpolate-params",
    "interpolate_params",
    default=None,
    help="Resolve placeholders in query params. Default: on.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the resolved request instead of sending it.",
)
@click.option(
    "--list",
    "show_list",
    is_flag=True,
    default=False,
    help="List all request files under the root.",
)
@click.option(
    "--verbose",
    is_flag=True,
    default=False,
    help="Include response headers in output and log at debug level.",
)
@click.option(
    "--raw",
    is_flag=True,
    default=False,
    help="Output raw response body only. Useful for piping.",
)
def main(
    name,
    env_file,
    config_file,
    root_dir,
    timeout,
    interpolate_params,
    dry_run,
    show_list,
    verbose,
    raw,
):
    """Resolve a request file and send it."""
    from kuiper.core import (
        DEFAULT_TIMEOUT,
        HEADERS_FILE,
        REQUEST_EXTENSION,
        load_config,
        load_env,
        resolve_config_path,
        resolve_env_file,
        resolve_root,
        resolve_setting,
    )
    from kuiper.errors import AmbiguousRequest, KuiperError
    from kuiper.executor import execute_request
    from kuiper.log import configure_logging
    from kuiper.output import format_output, format_request

    configure_logging(verbose=verbose)

    # --- Load config ---
    config_path = resolve_config_path(config_file)
    config = load_config(config_path)

    root = resolve_root(root_dir, config)
    extension = resolve_setting(None, config, "extension", REQUEST_EXTENSION)

    # --- Dispatch ---

    if show_list:
        _cmd_list(root, extension)
        return

    if not name:
        ctx = click.get_current_context()
        click.echo(ctx.get_help())
        ctx.exit(1)

    if env_file and not Path(env_file).is_file():
        click.echo(f"ERROR: env file not found: {env_file}", err=True)
        sys.exit(1)
    env = load_env(resolve_env_file(env_file, config))

    try:
        request = _resolve_named(
            name,
            root,
            env,
            extension=extension,
            headers_file=resolve_setting(None, config, "headers_file", HEADERS_FILE),
            interpolate_params=resolve_setting(
                interpolate_params,
                config,
                "interpolate_params",
                True,
            ),
        )
    except AmbiguousRequest as e:
        click.echo(f"ERROR: '{e.term}' is ambiguous, it matches:", err=True)
        for candidate in e.candidates:
            click.echo(f"  - {_display_path(candidate, root)}", err=True)
        sys.exit(1)
    except KuiperError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)

    if dry_run:
        click.echo(format_request(request))
        return

    result = execute_request(
        request,
        timeout=resolve_setting(timeout, config, "timeout", DEFAULT_TIMEOUT),
    )
    if result.error:
        click.echo(f"ERROR: {result.error}", err=True)
        sys.exit(1)

    click.echo(format_output(result, verbose=verbose, raw=raw))


# ── Subcommand implementations ──────────────────────────────────────────


def _resolve_named(name, root, env, extension, headers_file, interpolate_params):
    from kuiper.locator import find_request
    from kuiper.resolver import resolve

    path = find_request(name, root, extension)
    return resolve(
        path,
        root=root,
        env=env,
        interpolate_params=interpolate_params,
        headers_file=headers_file,
    )


def _cmd_list(root, extension):
    from kuiper.errors import KuiperError
    from kuiper.locator import list_requests

    try:
        paths = list_requests(root, extension)
    except KuiperError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)

    if not paths:
        click.echo(f"No .{extension} files found in: {root}")
        return

    click.echo(f"Requests from: {root}")
    click.echo(f"{len(paths)} available:\n")
    for p in paths:
        click.echo(f"  {_display_path(p, root)}")


# ── Helpers ──────────────────────────────────────────────────────────────


def _display_path(path, root):
    """Path relative to root when possible, for shorter listings."""
    try:
        return str(Path(path).relative_to(root))
    except ValueError:
        return str(path)
