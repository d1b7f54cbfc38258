"""CLI command modules for typeshape."""
