"""Adapters hosting the registry engine: interchange files, scene files, units of work."""
