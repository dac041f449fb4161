"""Plane mapping, roots, viewport and Newton iteration."""
