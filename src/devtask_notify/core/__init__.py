"""Ports and the wired notifier state."""
