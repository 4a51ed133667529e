"""Shared protocol constants between the runtime and UI clients."""
