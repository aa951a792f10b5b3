"""Input validation for CLI arguments."""
import re
import sys

# Secret Manager secret IDs: letters, digits, underscores, hyphens; at most 255 chars
SECRET_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9_-]{1,255}$')


def validate_secret_name(name: str) -> None:
    """
    Validate secret name matches Secret Manager requirements.

    Args:
        name: Secret name to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        print("Error: Secret name cannot be empty", file=sys.stderr)
        print("\nSecret names must match: [a-zA-Z0-9_-]", file=sys.stderr)
        sys.exit(2)

    if len(name) > 255:
        print(f"Error: Secret name is {len(name)} characters long, the maximum is 255", file=sys.stderr)
        sys.exit(2)

    if not SECRET_NAME_PATTERN.fullmatch(name):
        print(f"Error: Invalid secret name '{name}'", file=sys.stderr)
        print("\nAllowed characters: letters, numbers, underscores (_), hyphens (-)", file=sys.stderr)
        print("Not allowed: dots (.), spaces, slashes, special characters (@, $, !, etc.)", file=sys.stderr)
        print("\nExamples of valid names:", file=sys.stderr)
        print("  ✓ app-env", file=sys.stderr)
        print("  ✓ DB_CONFIG_PROD", file=sys.stderr)
        sys.exit(2)


def validate_command(command: list) -> list:
    """
    Strip the '--' separator from a trailing command.

    Returns:
        Command argv, possibly empty
    """
    if command and command[0] == "--":
        command = command[1:]
    return command
