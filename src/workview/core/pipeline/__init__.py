"""Parsing, reconciliation and polling of the clier pipeline."""
