import logging
from pathlib import Path
from typing import Protocol

from .constants import APP_NAME, DEFAULT_REF, GIT_EXECUTABLE, REMOTE_NAME
from .driver import DriverConfig
from .patterns import find_head_branch
from .runner import CommandRunner


class RefDetector(Protocol):
    """Discovers which ref a working directory should track."""

    def detect_ref(self, directory: Path) -> str:
        """Returns the detected ref name, or an empty string if there is none."""
        ...


class HeadBranchDetector:
    """Detects the remote's default branch from `git remote show origin`.

    Attributes:
        runner (CommandRunner): Used to query the remote (failures are soft).
        logger (logging.Logger): Receives a diagnostic when detection fails.
        default_ref (str): Named in the diagnostic as the fallback.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        logger: logging.Logger | None = None,
        default_ref: str = DEFAULT_REF,
    ):
        self.logger = logger or logging.getLogger(APP_NAME)
        self.runner = runner or CommandRunner(self.logger)
        self.default_ref = default_ref

    def detect_ref(self, directory: Path) -> str:
        output = self.runner.run(
            "git show remote info",
            directory,
            GIT_EXECUTABLE,
            "remote",
            "show",
            REMOTE_NAME,
        )

        branch = find_head_branch(output)
        if branch is None:
            self.logger.warning(
                f"Could not determine target ref in {directory}. "
                f"Will fall back to default ref {self.default_ref}"
            )
            return ""

        return branch


def resolve_ref(
    config: DriverConfig,
    directory: Path,
    detector: RefDetector,
    default_ref: str = DEFAULT_REF,
) -> str:
    """Decides which remote ref to synchronize `directory` against.

    Precedence: the explicit `config.ref`, then the detector's answer when
    `config.detect_ref` is set, then `default_ref`.

    Args:
        config (DriverConfig): The driver settings.
        directory (Path): The working directory, passed through to the detector.
        detector (RefDetector): Consulted only when detection is enabled.
        default_ref (str, optional): The fallback ref. Defaults to DEFAULT_REF.

    Returns:
        str: The ref to fetch. Never empty.
    """
    target_ref = ""
    if config.ref:
        target_ref = config.ref
    elif config.detect_ref:
        target_ref = detector.detect_ref(directory)

    return target_ref or default_ref
