import logging
from pathlib import Path

from .constants import (
    APP_NAME,
    CLONE_DEPTH,
    DEFAULT_REF,
    GIT_ATTRIBUTES_FILE,
    GIT_EXECUTABLE,
    GIT_METADATA_DIR,
    REMOTE_NAME,
)
from .driver import Driver, DriverConfig
from .patterns import parse_generated_pattern
from .resolver import HeadBranchDetector, RefDetector, resolve_ref
from .runner import CommandRunner


class GitDriver(Driver):
    """Keeps a shallow git working copy in sync with its `origin` remote.

    The driver shells out to `git` for every operation and holds no state
    about the directories it manages beyond its immutable configuration.

    Attributes:
        config (DriverConfig): Which ref to track and whether to detect it.
        detector (RefDetector): Consulted when `config.detect_ref` is set.
        runner (CommandRunner): Executes git in the working directory.
        logger (logging.Logger): The sink for diagnostics.
    """

    def __init__(
        self,
        config: DriverConfig | None = None,
        detector: RefDetector | None = None,
        runner: CommandRunner | None = None,
        logger: logging.Logger | None = None,
    ):
        """Initializes the GitDriver instance.

        Args:
            config (DriverConfig | None, optional): Driver settings.
                                                    Defaults to DriverConfig().
            detector (RefDetector | None, optional): Ref detector. Defaults to a
                                                     HeadBranchDetector sharing
                                                     this driver's runner.
            runner (CommandRunner | None, optional): Command runner.
            logger (logging.Logger | None, optional): Diagnostic sink.
                                                      Defaults to the app logger.
        """
        self.config = config or DriverConfig()
        self.logger = logger or logging.getLogger(APP_NAME)
        self.runner = runner or CommandRunner(self.logger)
        self.detector = detector or HeadBranchDetector(self.runner, self.logger)

    @classmethod
    def from_bytes(cls, blob: bytes | None = None) -> "GitDriver":
        """Builds a driver from a serialized configuration blob.

        Raises:
            ValueError: If the blob is malformed.
        """
        return cls(DriverConfig.from_bytes(blob))

    def _git(self, description: str, directory: Path, *args: str) -> str:
        return self.runner.run(description, directory, GIT_EXECUTABLE, *args)

    def target_ref(self, directory: Path) -> str:
        """Returns the ref `pull` will synchronize `directory` against."""
        return resolve_ref(self.config, directory, self.detector, DEFAULT_REF)

    def clone(self, directory: Path | str, url: str) -> str:
        """Shallow-clones `url` into `directory`, then pulls the target ref.

        Args:
            directory (Path | str): The working copy to create. Its parent must exist.
            url (str): The remote repository URL.

        Returns:
            str: The full SHA-1 of the resulting HEAD.

        Raises:
            CommandError: If the clone itself or the final HEAD lookup fails.
        """
        directory = Path(directory)
        self.runner.run(
            f"clone {url} into {directory.name} in",
            directory.parent,
            GIT_EXECUTABLE,
            "clone",
            "--depth",
            str(CLONE_DEPTH),
            url,
            directory.name,
            critical=True,
        )
        return self.pull(directory)

    def pull(self, directory: Path | str) -> str:
        """Fetches the target ref from `origin` and hard-resets onto it.

        Fetch and reset failures are logged and ignored, so the returned
        revision may lag behind the remote.

        Args:
            directory (Path | str): An existing working copy.

        Returns:
            str: The full SHA-1 of HEAD after the update.

        Raises:
            CommandError: If HEAD cannot be resolved.
        """
        directory = Path(directory)
        ref = self.target_ref(directory)

        self._git(
            "git fetch",
            directory,
            "fetch",
            "--prune",
            "--no-tags",
            "--depth",
            str(CLONE_DEPTH),
            REMOTE_NAME,
            f"+{ref}:remotes/{REMOTE_NAME}/{ref}",
        )
        self._git("git reset", directory, "reset", "--hard", f"{REMOTE_NAME}/{ref}")

        return self.head_rev(directory)

    def head_rev(self, directory: Path | str) -> str:
        """Resolves HEAD to a full commit SHA-1.

        Raises:
            CommandError: If git cannot be started or HEAD is unreadable.
        """
        return self.runner.output(
            "resolve HEAD in", Path(directory), GIT_EXECUTABLE, "rev-parse", "HEAD"
        )

    def special_files(self) -> list[str]:
        return [GIT_METADATA_DIR]

    def auto_generated_file_patterns(self, directory: Path | str) -> list[str]:
        """Reads `.gitattributes` for paths marked `linguist-generated=true`.

        Args:
            directory (Path | str): The working copy to inspect.

        Returns:
            list[str]:  Regex-compatible patterns in file order. Empty if the
                        attributes file is missing or unreadable.
        """
        path = Path(directory) / GIT_ATTRIBUTES_FILE
        patterns: list[str] = []

        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                for line in f:
                    pattern = parse_generated_pattern(line.rstrip("\r\n"))
                    if pattern is not None:
                        patterns.append(pattern)
        except OSError as e:
            self.logger.debug(f"No attributes read from {path}: {e}")

        return patterns
