import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class DriverConfig:
    """Per-backend synchronization settings.

    Attributes:
        detect_ref (bool): Whether to ask the remote for its default branch
                           when no explicit ref is set.
        ref (str): The ref to track. Empty means unset.
    """

    detect_ref: bool = False
    ref: str = ""

    @classmethod
    def from_bytes(cls, blob: bytes | None) -> "DriverConfig":
        """Parses a serialized driver configuration.

        The blob is a JSON object with optional `detect-ref` (bool) and
        `ref` (string) keys. Unknown keys are ignored.

        Args:
            blob (bytes | None): The serialized configuration, possibly absent.

        Returns:
            DriverConfig: The parsed configuration, or defaults for an empty blob.

        Raises:
            ValueError: If the blob is not a JSON object or a key has the wrong type.
        """
        if blob is None or not blob.strip():
            return cls()

        data: Any = json.loads(blob)
        if not isinstance(data, dict):
            raise ValueError(
                f"Driver config must be a JSON object, got {type(data).__name__}"
            )

        detect_ref = data.get("detect-ref", False)
        if not isinstance(detect_ref, bool):
            raise ValueError(f"Invalid value for 'detect-ref': {detect_ref!r}")

        ref = data.get("ref")
        if ref is None:
            ref = ""
        elif not isinstance(ref, str):
            raise ValueError(f"Invalid value for 'ref': {ref!r}")

        return cls(detect_ref=detect_ref, ref=ref)

    def to_bytes(self) -> bytes:
        """Serializes the configuration into the form `from_bytes` accepts."""
        return json.dumps({"detect-ref": self.detect_ref, "ref": self.ref}).encode()


class Driver:
    """Base class defining the interface for a version-control backend.

    A driver brings a working directory in line with a remote and reports
    which files downstream consumers should skip. Implementations keep no
    state about the directories they operate on.
    """

    def clone(self, directory: Path, url: str) -> str:
        """Creates `directory` from `url` and returns the synced revision."""
        raise NotImplementedError

    def pull(self, directory: Path) -> str:
        """Updates an existing working copy and returns its revision."""
        raise NotImplementedError

    def head_rev(self, directory: Path) -> str:
        """Returns the full identifier of the checked-out revision."""
        raise NotImplementedError

    def special_files(self) -> list[str]:
        """Returns path fragments denoting version-control metadata."""
        raise NotImplementedError

    def auto_generated_file_patterns(self, directory: Path) -> list[str]:
        """Returns regex fragments for files flagged as generated."""
        raise NotImplementedError
