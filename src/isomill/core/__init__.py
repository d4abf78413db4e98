"""Raster-to-toolpath pipeline stages."""
