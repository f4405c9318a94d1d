"""Puzzle lifecycle services."""
