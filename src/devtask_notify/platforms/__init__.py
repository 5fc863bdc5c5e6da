"""Concrete notification platform backends."""
