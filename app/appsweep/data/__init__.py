"""Bundled data files for appsweep."""
