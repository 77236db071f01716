from pathlib import Path
from unittest.mock import MagicMock

from hypothesis import given
from hypothesis import strategies as st

from vcs_sync.constants import DEFAULT_REF
from vcs_sync.driver import DriverConfig
from vcs_sync.patterns import find_head_branch, glob_to_regex
from vcs_sync.resolver import resolve_ref

# Ref-like names: non-empty, no surrounding whitespace, single line.
refs_strategy = st.text(
    alphabet=st.characters(blacklist_categories=("Cc", "Cs", "Zs", "Zl", "Zp")),
    min_size=1,
)


def _detector(answer: str) -> MagicMock:
    detector = MagicMock()
    detector.detect_ref.return_value = answer
    return detector


@given(ref=refs_strategy, detect=st.booleans(), detected=st.text())
def test_explicit_ref_always_wins(ref: str, detect: bool, detected: str) -> None:
    """
    Property: A non-empty configured ref is used verbatim, whatever the
    detection flag or the detector would have answered.
    """
    detector = _detector(detected)
    config = DriverConfig(detect_ref=detect, ref=ref)

    assert resolve_ref(config, Path("/work"), detector) == ref
    detector.detect_ref.assert_not_called()


@given(detected=st.text())
def test_detection_disabled_uses_default(detected: str) -> None:
    """Property: With no ref and detection off, the default ref is used."""
    detector = _detector(detected)

    assert resolve_ref(DriverConfig(), Path("/work"), detector) == DEFAULT_REF
    detector.detect_ref.assert_not_called()


@given(detected=st.one_of(st.just(""), refs_strategy))
def test_detection_result_or_default(detected: str) -> None:
    """
    Property: With detection on, a non-empty detected name is used and an
    empty answer falls back to the default.
    """
    detector = _detector(detected)
    config = DriverConfig(detect_ref=True)

    expected = detected or DEFAULT_REF
    assert resolve_ref(config, Path("/work"), detector) == expected
    detector.detect_ref.assert_called_once_with(Path("/work"))


@given(branch=refs_strategy)
def test_head_branch_roundtrip(branch: str) -> None:
    """Property: Any single-line branch name is recovered from remote info."""
    output = f"* remote origin\n  HEAD branch: {branch}\n  Remote branches:\n"
    assert find_head_branch(output) == branch.strip()


@given(glob=st.text(alphabet="ab/.*", max_size=30))
def test_glob_conversion_has_no_bare_stars(glob: str) -> None:
    """Property: Every `*` in a converted pattern is part of a `.*` token."""
    converted = glob_to_regex(glob)

    assert "**" not in converted.replace(".*", "")
    for i, char in enumerate(converted):
        if char == "*":
            assert i > 0 and converted[i - 1] == "."
