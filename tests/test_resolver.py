"""Tests for target-ref resolution and default-branch detection."""

import logging
import shutil
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from vcs_sync.constants import DEFAULT_REF
from vcs_sync.driver import DriverConfig
from vcs_sync.resolver import HeadBranchDetector, resolve_ref
from vcs_sync.runner import CommandRunner

REMOTE_SHOW_OUTPUT = """* remote origin
  Fetch URL: git@example.com:team/project.git
  Push  URL: git@example.com:team/project.git
  HEAD branch: trunk
  Remote branch:
    trunk tracked
"""


def test_resolve_ref_prefers_explicit_ref() -> None:
    """Verifies the configured ref short-circuits detection."""
    detector = MagicMock()
    config = DriverConfig(detect_ref=True, ref="release")

    assert resolve_ref(config, Path("/src"), detector) == "release"
    detector.detect_ref.assert_not_called()


def test_resolve_ref_uses_detector_when_enabled() -> None:
    """Verifies detection is consulted only when enabled and no ref is set."""
    detector = MagicMock()
    detector.detect_ref.return_value = "develop"

    assert resolve_ref(DriverConfig(detect_ref=True), Path("/src"), detector) == (
        "develop"
    )
    detector.detect_ref.assert_called_once_with(Path("/src"))


@pytest.mark.parametrize(
    ("config", "detected"),
    [
        (DriverConfig(), "develop"),
        (DriverConfig(detect_ref=True), ""),
    ],
)
def test_resolve_ref_falls_back_to_default(
    config: DriverConfig, detected: str
) -> None:
    """Verifies the default ref is used when nothing else yields a name."""
    detector = MagicMock()
    detector.detect_ref.return_value = detected

    assert resolve_ref(config, Path("/src"), detector) == DEFAULT_REF


def test_resolve_ref_custom_default() -> None:
    """Verifies the fallback ref can be supplied by the caller."""
    detector = MagicMock()
    assert resolve_ref(DriverConfig(), Path("/src"), detector, "main") == "main"


def test_head_branch_detector_parses_remote_show(tmp_path: Path) -> None:
    """Verifies the detector queries origin and extracts the HEAD branch."""
    runner = MagicMock()
    runner.run.return_value = REMOTE_SHOW_OUTPUT
    detector = HeadBranchDetector(runner, logging.getLogger("test"))

    assert detector.detect_ref(tmp_path) == "trunk"
    runner.run.assert_called_once_with(
        "git show remote info", tmp_path, "git", "remote", "show", "origin"
    )


def test_head_branch_detector_logs_fallback(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Verifies a missing HEAD line is logged and yields an empty ref."""
    caplog.set_level(logging.WARNING)
    runner = MagicMock()
    runner.run.return_value = "fatal: unable to access remote\n"
    detector = HeadBranchDetector(runner, logging.getLogger("test.detector"))

    assert detector.detect_ref(tmp_path) == ""
    assert f"Could not determine target ref in {tmp_path}" in caplog.text
    assert f"Will fall back to default ref {DEFAULT_REF}" in caplog.text


def test_head_branch_detector_uses_injected_logger(tmp_path: Path) -> None:
    """Verifies diagnostics go to the logger the detector was given."""
    runner = MagicMock()
    runner.run.return_value = ""
    sink = MagicMock(spec=logging.Logger)

    HeadBranchDetector(runner, sink).detect_ref(tmp_path)

    sink.warning.assert_called_once()
    assert str(tmp_path) in sink.warning.call_args[0][0]


@pytest.mark.skipif(shutil.which("sh") is None, reason="sh not available")
def test_head_branch_detector_survives_undecodable_output(tmp_path: Path) -> None:
    """Verifies a failing remote query with non-UTF-8 output never raises."""
    runner = CommandRunner(logging.getLogger("test.detector"))
    runner_run = runner.run

    def run_fake_git(description: str, cwd: Path, *args: str, **kwargs) -> str:
        return runner_run(
            description,
            cwd,
            "sh",
            "-c",
            "printf 'fatal: d\\351p\\303t introuvable\\n'; exit 128",
            **kwargs,
        )

    runner.run = run_fake_git  # type: ignore[method-assign]
    config = DriverConfig(detect_ref=True)

    ref = resolve_ref(config, tmp_path, HeadBranchDetector(runner))

    assert ref == DEFAULT_REF
