"""Toolpath configuration and persisted preferences."""
