"""Compiled kernels and parallel frame computation."""
