"""Parsers for worktree listing and status output.

None of these functions raise on malformed input: unparseable pieces are
skipped, and a wholly unusable status document yields None.
"""

import json
import logging
import re
from dataclasses import replace
from pathlib import Path

from workview.core.json_fields import as_bool, as_dict, as_int, as_list, as_str
from workview.core.worktrees.types import WorkingTree, WorktreeSnapshot, WorktreeStatusEntry

logger = logging.getLogger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"
DETACHED_LABEL = "(detached)"
BARE_LABEL = "(bare)"

_LOWERCASE_START = re.compile(r"^[a-z]")


def is_gwt_worktree(path: Path) -> bool:
    """Guess whether a worktree was created by the worktree tool.

    This is a naming-convention heuristic, not authoritative data: the tool
    names directories after branches, so a directory name containing a dash
    or starting with a lowercase letter is treated as one of its worktrees.
    """
    name = path.name
    return "-" in name or _LOWERCASE_START.match(name) is not None


def _parse_block(lines: list[str]) -> WorkingTree | None:
    path: Path | None = None
    head = ""
    branch = ""
    is_bare = False
    is_detached = False

    for line in lines:
        if line.startswith("worktree "):
            path = Path(line.removeprefix("worktree "))
        elif line.startswith("HEAD "):
            head = line.removeprefix("HEAD ")
        elif line.startswith("branch "):
            branch = line.removeprefix("branch ")
        elif line == "bare":
            is_bare = True
        elif line == "detached":
            is_detached = True

    if path is None:
        return None

    short_branch = branch.removeprefix(BRANCH_REF_PREFIX)
    if not short_branch:
        short_branch = DETACHED_LABEL if is_detached else BARE_LABEL

    return WorkingTree(
        path=path,
        branch=branch,
        short_branch=short_branch,
        head=head,
        is_bare=is_bare,
        is_detached=is_detached,
        is_gwt=is_gwt_worktree(path),
    )


def parse_worktree_list(text: str) -> list[WorkingTree]:
    """Parse ``git worktree list --porcelain`` output.

    Blocks are separated by blank lines. Blocks without a ``worktree`` line
    are skipped. The first entry is marked main (git guarantees this ordering).
    Enrichment fields are left unset.
    """
    worktrees: list[WorkingTree] = []
    block: list[str] = []

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line == "":
            if block:
                parsed = _parse_block(block)
                if parsed is not None:
                    worktrees.append(parsed)
                block = []
            continue
        block.append(line)

    if block:
        parsed = _parse_block(block)
        if parsed is not None:
            worktrees.append(parsed)

    if worktrees:
        worktrees[0] = replace(worktrees[0], is_main=True)

    return worktrees


def sort_worktrees(worktrees: list[WorkingTree]) -> list[WorkingTree]:
    """Main worktree first, then tool-created worktrees, then by branch name."""
    return sorted(
        worktrees,
        key=lambda wt: (not wt.is_main, not wt.is_gwt, wt.short_branch.casefold()),
    )


def parse_worktree_status(text: str) -> list[WorktreeStatusEntry] | None:
    """Parse the worktree tool's ``status --json`` document.

    Returns:
        Status rows, or None when the output is empty or not a status document
    """
    stripped = text.strip()
    if not stripped:
        return None

    try:
        data = json.loads(stripped)
    except json.JSONDecodeError as e:
        logger.debug("Worktree status is not valid JSON: %s", e)
        return None

    if not isinstance(data, dict) or not isinstance(data.get("worktrees"), list):
        logger.debug("Worktree status has no 'worktrees' array")
        return None

    entries: list[WorktreeStatusEntry] = []
    for row in as_list(data["worktrees"]):
        if not isinstance(row, dict):
            continue
        fields = as_dict(row)
        entries.append(
            WorktreeStatusEntry(
                branch=as_str(fields.get("branch")),
                path=as_str(fields.get("path")),
                head=as_str(fields.get("head")),
                is_gwt=as_bool(fields.get("isGwt")),
                is_main=as_bool(fields.get("isMain")),
                has_changes=as_bool(fields.get("hasChanges")),
                agent_running=as_bool(fields.get("claudeRunning")),
                agent_pid=as_int(fields.get("claudePid")),
            )
        )
    return entries


def find_status_match(
    entries: list[WorktreeStatusEntry], worktree: WorkingTree
) -> WorktreeStatusEntry | None:
    """Find the status row for a worktree: branch equality first, then path."""
    for entry in entries:
        if entry.branch and entry.branch == worktree.short_branch:
            return entry
    for entry in entries:
        if entry.path and Path(entry.path) == worktree.path:
            return entry
    return None


def enrich_worktree(worktree: WorkingTree, entry: WorktreeStatusEntry) -> WorkingTree:
    return replace(
        worktree,
        agent_running=entry.agent_running,
        agent_pid=entry.agent_pid,
        has_changes=entry.has_changes,
    )


def parse_diff_summary(text: str) -> str:
    """Return the summary line of ``git diff --stat --shortstat`` output."""
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    if not lines:
        return ""
    return lines[-1]


def _field(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def worktree_fingerprint(snapshot: WorktreeSnapshot) -> str:
    """Build a string key from a snapshot so real changes can be detected."""
    parts = [f"header|{snapshot.tool_version}|{snapshot.listing_ok}"]
    for wt in snapshot.worktrees:
        parts.append(
            "|".join(
                [
                    str(wt.path),
                    wt.short_branch,
                    wt.head,
                    _field(wt.agent_running),
                    _field(wt.agent_pid),
                    _field(wt.has_changes),
                    _field(wt.diff_summary),
                ]
            )
        )
    return "\n".join(parts)
