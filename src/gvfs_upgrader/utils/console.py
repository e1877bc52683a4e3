"""Console progress reporting around long-running upgrade steps."""

import logging
from typing import Callable, TextIO

from rich.console import Console

logger = logging.getLogger("gvfs_upgrader.console")

SUCCEEDED = "Succeeded"
FAILED = "Failed"


def is_interactive(stream: TextIO) -> bool:
    """True when ``stream`` is a terminal rather than a file or pipe."""
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        # Closed stream
        return False


def show_status_while_running(
    action: Callable[[], bool],
    message: str,
    output: TextIO,
    show_spinner: bool,
) -> bool:
    """Run ``action`` while telling the operator what is happening.

    With ``show_spinner`` a spinner is animated next to ``message`` until
    the action returns. Otherwise ``message`` is written once as plain text.
    The line is completed with Succeeded/Failed in both cases.

    Returns:
        The action's own result, unchanged
    """
    if show_spinner:
        console = Console(file=output, highlight=False)
        with console.status(f"{message}..."):
            result = action()
        output.write(f"{message}...{SUCCEEDED if result else FAILED}\n")
    else:
        output.write(f"{message}...")
        output.flush()
        result = action()
        output.write(f"{SUCCEEDED if result else FAILED}\n")

    output.flush()
    logger.debug(f"{message}: {'succeeded' if result else 'failed'}")
    return result
