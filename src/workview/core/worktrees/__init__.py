"""Parsing and polling of git worktrees."""
