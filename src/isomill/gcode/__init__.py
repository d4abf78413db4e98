"""G-code rendering and program validation."""
