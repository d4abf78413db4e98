"""isomill: PCB isolation-milling toolpaths from classified rasters."""

__version__ = "0.1.0"
