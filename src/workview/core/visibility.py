"""User-controlled hiding of worktrees and processes.

Hidden identities are sticky: they are never pruned when the entity they
name disappears, and stay hidden until explicitly unhidden.
"""

from collections.abc import Callable
from enum import Enum

from workview.core.state_store import StateStore


class Namespace(Enum):
    """Entity classes with independent hidden sets.

    Worktrees are identified by short branch name, processes by name.
    """

    WORKTREES = "worktrees"
    PROCESSES = "processes"


_HIDDEN_KEYS = {
    Namespace.WORKTREES: "workview.hiddenWorktrees",
    Namespace.PROCESSES: "workview.hiddenProcesses",
}

_SHOW_HIDDEN_KEYS = {
    Namespace.WORKTREES: "workview.showHiddenWorktrees",
    Namespace.PROCESSES: "workview.showHiddenProcesses",
}

VisibilityListener = Callable[[Namespace], None]


def hidden_key(namespace: Namespace) -> str:
    return _HIDDEN_KEYS[namespace]


def show_hidden_key(namespace: Namespace) -> str:
    return _SHOW_HIDDEN_KEYS[namespace]


class VisibilityStore:
    """Hidden sets and show-hidden flags over a StateStore.

    Every mutation notifies listeners, even when it changed nothing, so
    views re-render to confirm the current state.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._listeners: list[VisibilityListener] = []

    def on_change(self, listener: VisibilityListener) -> None:
        self._listeners.append(listener)

    def hidden(self, namespace: Namespace) -> frozenset[str]:
        return frozenset(self._store.get_str_list(hidden_key(namespace), []))

    def showing_hidden(self, namespace: Namespace) -> bool:
        return self._store.get_bool(show_hidden_key(namespace), False)

    def is_hidden(self, namespace: Namespace, identity: str) -> bool:
        return identity in self.hidden(namespace)

    def hide(self, namespace: Namespace, identity: str) -> None:
        """Add identity to the hidden set. Hiding twice is a no-op."""
        key = hidden_key(namespace)
        current = self._store.get_str_list(key, [])
        if identity not in current:
            current.append(identity)
            self._store.set_str_list(key, current)
        self._notify(namespace)

    def unhide(self, namespace: Namespace, identity: str) -> None:
        """Remove identity from the hidden set. Unhiding an absent identity is a no-op."""
        key = hidden_key(namespace)
        current = self._store.get_str_list(key, [])
        remaining = [item for item in current if item != identity]
        if remaining != current:
            self._store.set_str_list(key, remaining)
        self._notify(namespace)

    def toggle_show_hidden(self, namespace: Namespace) -> bool:
        """Flip the show-hidden flag.

        Returns:
            The new value of the flag
        """
        new_value = not self.showing_hidden(namespace)
        self._store.set_bool(show_hidden_key(namespace), new_value)
        self._notify(namespace)
        return new_value

    def _notify(self, namespace: Namespace) -> None:
        for listener in list(self._listeners):
            listener(namespace)
