"""Scratch workspaces and remote segment downloads."""
