"""Process launching for installers and gvfs service commands."""

import logging
import subprocess
from typing import Optional, Sequence

from gvfs_upgrader.models.result import Result


class ProcessLauncher:
    """Starts a process and waits for it to finish.

    Callers only use ``start``, ``has_exited``, ``exit_code`` and ``output``
    so tests can substitute a launcher returning canned values.
    """

    def __init__(self, timeout: Optional[float] = None):
        """Initialize process launcher.

        Args:
            timeout: Seconds to wait for the process (None waits forever)
        """
        self.logger = logging.getLogger("gvfs_upgrader.process")
        self.timeout = timeout
        self._exit_code: Optional[int] = None
        self._has_exited = False
        self._output = ""

    @property
    def has_exited(self) -> bool:
        return self._has_exited

    @property
    def exit_code(self) -> int:
        return -1 if self._exit_code is None else self._exit_code

    @property
    def output(self) -> str:
        return self._output

    def start(self, path: str, args: Sequence[str] = ()) -> bool:
        """Run ``path`` with ``args`` to completion.

        Returns:
            False if the process could not be launched, True otherwise
        """
        command = [str(path), *args]
        self.logger.info(f"Launching: {' '.join(command)}")
        self._exit_code = None
        self._has_exited = False
        self._output = ""

        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            # Launched but never finished
            self.logger.error(f"{path} did not exit within {self.timeout}s")
            self._output = e.output if isinstance(e.output, str) else ""
            return True
        except OSError as e:
            self.logger.error(f"Failed to launch {path}: {e}")
            return False

        self._has_exited = True
        self._exit_code = completed.returncode
        self._output = completed.stdout or ""
        self.logger.info(f"{path} exited with code {completed.returncode}")
        return True


def run_command(
    launcher: ProcessLauncher, path: str, args: Sequence[str] = ()
) -> Result[str]:
    """Run a command through ``launcher`` and require exit code 0.

    Returns:
        Result carrying the command output, or an error message
    """
    if not launcher.start(path, args):
        return Result.failure(f"Could not launch {path}")

    if not launcher.has_exited:
        return Result.failure(f"{path} did not exit")

    if launcher.exit_code != 0:
        output = launcher.output.strip()
        message = f"{path} exited with code {launcher.exit_code}"
        if output:
            message = f"{message}: {output}"
        return Result.failure(message)

    return Result.success(launcher.output)
