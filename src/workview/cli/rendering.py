"""Render view models as rich trees for human consumption.

Output goes to stderr, like every other human-facing message, so stdout stays
reserved for ``--json`` data.
"""

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from workview.core.view import (
    DaemonNode,
    HeaderNode,
    InstallNode,
    ProcessNode,
    StageNode,
    ViewModel,
    WorktreeNode,
)

_STATUS_STYLES = {
    "running": "green",
    "stopped": "dim",
    "crashed": "red",
    "restarting": "yellow",
}


def _line(label: str, description: str, style: str = "") -> Text:
    text = Text(label, style=style)
    if description:
        text.append("  ")
        text.append(description, style="dim")
    return text


def _header(node: HeaderNode) -> Text:
    return _line(node.title, node.description, style="bold")


def _install(node: InstallNode) -> Text:
    text = Text(node.label, style="bold yellow")
    text.append(f"  run: {node.hint.install_command}", style="dim")
    return text


def _daemon(node: DaemonNode) -> Text:
    style = "green" if node.daemon.running else "dim"
    text = Text("● ", style=style)
    text.append_text(_line("Daemon", node.description))
    return text


def _process(node: ProcessNode) -> Text:
    if node.hidden:
        return _line(node.process.name, node.description, style="dim italic")
    text = Text("● ", style=_STATUS_STYLES[node.process.status])
    text.append_text(_line(node.process.name, node.description))
    return text


def _worktree(node: WorktreeNode) -> Text:
    if node.hidden:
        return _line(node.label, node.description, style="dim italic")
    worktree = node.worktree
    if worktree.agent_running:
        marker = Text("▶ ", style="green")
    elif worktree.is_main:
        marker = Text("⌂ ")
    else:
        marker = Text("⎇ ", style="cyan" if worktree.is_gwt else "")
    marker.append_text(_line(node.label, node.description))
    return marker


def build_tree(title: str, view: ViewModel) -> Tree:
    """Convert a view model into a rich Tree rooted at ``title``."""
    tree = Tree(Text(title, style="bold underline"))
    for node in view.nodes:
        match node:
            case HeaderNode():
                tree.add(_header(node))
            case InstallNode():
                tree.add(_install(node))
            case DaemonNode():
                tree.add(_daemon(node))
            case StageNode():
                branch = tree.add(_line(node.name, node.description, style="bold"))
                for child in node.children:
                    branch.add(_process(child))
            case ProcessNode():
                tree.add(_process(node))
            case WorktreeNode():
                tree.add(_worktree(node))
    return tree


def render_view(title: str, view: ViewModel) -> None:
    console = Console(stderr=True, highlight=False)
    console.print(build_tree(title, view))
