"""Error formatting for CLI output."""

from pydantic import ValidationError


def pretty_print_manifest_error(error: ValidationError, source: str) -> str:
    """Format a manifest ValidationError to present useful information to the user.

    Example output:
        Invalid manifest
          --> repos.yaml

          repositories.1.url: 'ftp://host/repo' is not a valid repository URL
          repositories.2.all_branches: Input should be a valid boolean
    """
    lines = ["Invalid manifest", f"  --> {source}", ""]
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "manifest"
        message = err.get("msg", "invalid value")
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        lines.append(f"  {location}: {message}")
    return "\n".join(lines)
