"""CLI entrypoint for agent-secretenv."""
import sys
import argparse
import logging

from .validators import validate_command, validate_secret_name

VERSION = "0.1.0"

# Configure logging to stderr so stdout only carries rendered entries
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s %(name)s: %(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _set_verbosity(verbose: int) -> None:
    if verbose >= 2:
        logging.getLogger().setLevel(logging.DEBUG)
    elif verbose == 1:
        logging.getLogger().setLevel(logging.INFO)


def cmd_version(args):
    """Show version information."""
    print(f"agent-secretenv {VERSION}")


def cmd_config_show(args):
    """Show the config file path and where it came from."""
    from agent_secretenv.vault.domains.config_loader import get_config_path

    config_path, source = get_config_path()
    if config_path.exists():
        print(f"Config path: {config_path}")
        print(f"Source: {source}")
    else:
        print(f"Config path: {config_path}")
        print(f"Source: {source} (file not found)")


def cmd_google(args):
    """Load JSON secrets from Google Secret Manager into the environment."""
    from agent_secretenv.vault.domains.config_loader import build_google_config, load_config_file
    from agent_secretenv.vault.workflows.env_operations import collect_env, render_env, run_with_env

    command = validate_command(args.command)

    config = build_google_config(
        project=args.project,
        credentials_file=args.credentials_file,
        connect_timeout=args.connect_timeout,
        json_secrets=args.json,
        prefix=args.prefix,
        config=load_config_file(),
    )
    for secret_name in config.data.json:
        validate_secret_name(secret_name)

    if not config.data.json and config.data.prefix is None:
        print("Error: Nothing to load. Pass --json NAME or --prefix PREFIX (or set them under 'data' in the config file)",
              file=sys.stderr)
        sys.exit(2)

    vault, data = config.into_vault()
    entries = collect_env(vault, data)

    if command:
        sys.exit(run_with_env(entries, command))

    output = render_env(entries, args.format)
    if output:
        print(output)
    sys.exit(0)


def main():
    """Main CLI entrypoint.

    Exit codes:
        0 - Success (or the wrapped command's exit code)
        1 - Runtime errors (credentials, network, secret not found, bad payload, etc.)
        2 - Usage errors (invalid arguments, invalid secret name format, etc.)
    """
    parser = argparse.ArgumentParser(
        prog="secretenv",
        description="Agent-secretenv CLI - load application environment from secret stores",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (credentials, network, secret not found, bad payload, etc.)
  2 - Usage error (invalid arguments, invalid secret name format, etc.)

Environment variables:
  GCP_PROJECT                    - Google project ID (overrides config file)
  GOOGLE_APPLICATION_CREDENTIALS - Path to credentials JSON (overrides config file)
  SECRETENV_CONFIG               - Path to config file

Configuration:
  Default location: ~/.config/agent-secretenv/config.yml
  View current: Run 'secretenv config show'
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for debug output)"
    )

    subparsers = parser.add_subparsers(dest="command_name", help="Available commands")

    # version command
    _version_parser = subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of agent-secretenv"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Inspect agent-secretenv configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    # config show command
    _config_show_parser = config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="""
Display the configuration file path and its source.

Sources:
  - env: Path set via SECRETENV_CONFIG
  - default: Default location (~/.config/agent-secretenv/config.yml)
        """
    )

    # google command
    google_parser = subparsers.add_parser(
        "google",
        help="Load secrets from Google Secret Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Fetch the latest version of JSON secrets from Google Secret Manager and
expose their keys as environment variables.

Each secret must hold a JSON object, e.g. {"DB_PASS": "secret123"}.

Without a command the variables are printed to stdout. With a command
(after '--') the command is run with the variables added to its
environment and its exit code is returned.

Examples:
  secretenv google -p my-project --json app-env
  secretenv google -p my-project --json app-env --format export
  secretenv google -p my-project --json app-env -- ./manage.py runserver
        """
    )
    google_parser.add_argument(
        "-p", "--project",
        help="Google project ID (defaults to GCP_PROJECT env var or config file)"
    )
    google_parser.add_argument(
        "-c", "--credentials-file",
        help="Path to credentials JSON. Leave blank to use GOOGLE_APPLICATION_CREDENTIALS "
             "or application default credentials"
    )
    google_parser.add_argument(
        "--connect-timeout",
        type=float,
        help="Seconds to wait for the TLS connection (default: 30)"
    )
    google_parser.add_argument(
        "--json",
        action="append",
        metavar="SECRET_NAME",
        help="Secret holding a JSON object of variables (repeatable, later secrets win)"
    )
    google_parser.add_argument(
        "--prefix",
        help="Load every secret whose name starts with PREFIX"
    )
    google_parser.add_argument(
        "--format",
        choices=["env", "export", "json"],
        default="env",
        help="Output format when no command is given (default: env). "
             "Values with line breaks need export or json"
    )
    google_parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to run with the loaded environment (after '--')"
    )

    args = parser.parse_args()
    _set_verbosity(args.verbose)

    # If no command provided, show help and exit with usage error code
    if not args.command_name:
        parser.print_help()
        sys.exit(2)

    # Route to command handlers
    try:
        if args.command_name == "version":
            cmd_version(args)
        elif args.command_name == "config":
            if args.config_command == "show":
                cmd_config_show(args)
            else:
                config_parser.print_help()
                sys.exit(2)
        elif args.command_name == "google":
            cmd_google(args)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
