"""Shared data structures and helpers."""
