"""
Exit codes for the Pomodoro CLI.

Semantic exit codes so scripts wrapping the CLI can tell what happened.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error (e.g. a rejected tag name)
ERROR_INVALID_ARGS = 2

# The server asked for re-authentication (``reauth: true``) or rejected the token
ERROR_AUTH_FAILURE = 3

# Network or API error (server unreachable, timeout, 5xx)
ERROR_NETWORK = 4

# Resource not found (unknown session, tag or task)
ERROR_NOT_FOUND = 5


_CODE_NAMES = {
    SUCCESS: "SUCCESS",
    ERROR_GENERAL: "ERROR_GENERAL",
    ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
    ERROR_AUTH_FAILURE: "ERROR_AUTH_FAILURE",
    ERROR_NETWORK: "ERROR_NETWORK",
    ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
}


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    return _CODE_NAMES.get(code, f"UNKNOWN({code})")
