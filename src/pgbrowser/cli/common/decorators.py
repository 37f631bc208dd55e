from functools import wraps
import sys

from sqlalchemy.exc import DBAPIError

from pgbrowser.cli.console import console, print_error, print_session_error
from pgbrowser.common.errors import SecretStoreError, SessionError


def handle_cli_errors(func):
    """
    Decorator to wrap CLI commands with unified error handling.

    - SessionError: Prints the description and its recovery suggestion.
    - DBAPIError: Prints the server's message; query errors pass through unchanged.
    - KeyError / ValueError / SecretStoreError: Prints a clean red error message.
    - KeyboardInterrupt: Exits gracefully.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SessionError as e:
            print_session_error(e)
            sys.exit(1)
        except DBAPIError as e:
            print_error(str(e.orig).strip() if e.orig is not None else str(e))
            sys.exit(1)
        except KeyError as e:
            print_error(str(e.args[0]) if e.args else str(e))
            sys.exit(1)
        except (ValueError, SecretStoreError) as e:
            print_error(str(e))
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[warning]Operation cancelled by user.[/warning]")
            sys.exit(130)

    return wrapper
