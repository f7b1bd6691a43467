"""appsweep - find, vet and securely erase application leftovers on macOS."""

__version__ = "0.1.0"
