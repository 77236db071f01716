import logging
import subprocess
from pathlib import Path

from .constants import APP_NAME


class CommandError(RuntimeError):
    """Raised when a critical external command fails.

    Attributes:
        description (str): What the command was meant to do (e.g. 'git clone').
        cwd (Path): The directory the command ran in.
        returncode (int | None): The exit status, or None if it never started.
        output (str): Whatever the command printed before failing.
    """

    def __init__(
        self,
        description: str,
        cwd: Path,
        returncode: int | None = None,
        output: str = "",
    ):
        self.description = description
        self.cwd = cwd
        self.returncode = returncode
        self.output = output
        detail = (
            f"exit status {returncode}" if returncode is not None else "did not start"
        )
        super().__init__(f"Failed to {description} {cwd} ({detail})")


class CommandRunner:
    """Invokes external programs inside a working directory.

    Every call states whether a failure is critical. Critical failures raise
    `CommandError`; the rest are logged and the captured output is returned
    so the caller can carry on.

    Attributes:
        logger (logging.Logger): The sink for failure diagnostics.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(APP_NAME)

    def run(
        self, description: str, cwd: Path | str, *args: str, critical: bool = False
    ) -> str:
        """Runs a command and returns its merged stdout/stderr.

        Args:
            description (str): Short label used in diagnostics (e.g. 'git fetch').
            cwd (Path | str): The working directory for the subprocess.
            *args (str): The program followed by its arguments.
            critical (bool, optional):  Whether a failure should raise instead of
                                        being logged and ignored. Defaults to False.

        Returns:
            str: The combined output of the command, even if it failed softly.

        Raises:
            CommandError: If `critical` is set and the command fails.
        """
        cwd = Path(cwd)
        try:
            res = subprocess.run(
                list(args),
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            return self._failed(description, cwd, None, f"{e}\n", critical, output="")

        if res.returncode != 0:
            return self._failed(
                description, cwd, res.returncode, res.stdout, critical, res.stdout
            )
        return res.stdout

    def output(self, description: str, cwd: Path | str, *args: str) -> str:
        """Runs a command critically and returns its stripped stdout only.

        Raises:
            CommandError: If the command cannot start or exits non-zero.
        """
        cwd = Path(cwd)
        try:
            res = subprocess.run(
                list(args),
                cwd=cwd,
                stdout=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            self.logger.error(f"Failed to {description} {cwd}: {e}")
            raise CommandError(description, cwd) from e

        if res.returncode != 0:
            self.logger.error(
                f"Failed to {description} {cwd} (exit status {res.returncode})"
            )
            raise CommandError(description, cwd, res.returncode, res.stdout)
        return res.stdout.strip()

    def _failed(
        self,
        description: str,
        cwd: Path,
        returncode: int | None,
        details: str,
        critical: bool,
        output: str,
    ) -> str:
        if critical:
            self.logger.error(
                f"Failed to {description} {cwd}, see output below\n{details}"
            )
            raise CommandError(description, cwd, returncode, output)

        self.logger.warning(
            f"Failed to {description} {cwd}, see output below\n{details}Continuing..."
        )
        return output
