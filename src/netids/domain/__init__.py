"""Identifier registry domain: bindings, allocation, conflict detection and merging."""
