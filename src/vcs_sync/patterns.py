"""Text pattern recognizers for git output and attribute files."""

import re

HEAD_BRANCH_RE = re.compile(r"HEAD branch: (?P<branch>.+)")
"""re.Pattern: Matches the default-branch line of `git remote show`."""

AUTO_GENERATED_RE = re.compile(r"(?P<path>.+) linguist-generated=true")
"""re.Pattern: Matches a `.gitattributes` line flagging a path as generated."""


def find_head_branch(text: str) -> str | None:
    """Extracts the remote's default branch from `git remote show` output.

    Args:
        text (str): The combined output of the remote-info command.

    Returns:
        str | None: The trimmed branch name, or None if no usable
                    `HEAD branch:` line is present.
    """
    match = HEAD_BRANCH_RE.search(text)
    if not match:
        return None
    branch = match.group("branch").strip()
    return branch or None


def glob_to_regex(glob: str) -> str:
    """Converts an attributes-file glob into a regular expression fragment.

    `**` collapses to a single wildcard first so that it does not produce a
    doubled `.*.*`. Other characters are passed through as-is.
    """
    return glob.replace("**", "*").replace("*", ".*")


def parse_generated_pattern(line: str) -> str | None:
    """Returns the converted path pattern of a `linguist-generated=true` line.

    Args:
        line (str): A single line from a `.gitattributes` file.

    Returns:
        str | None: The regex-compatible pattern, or None if the line does
                    not mark anything as generated.
    """
    match = AUTO_GENERATED_RE.search(line)
    if not match:
        return None
    return glob_to_regex(match.group("path"))
