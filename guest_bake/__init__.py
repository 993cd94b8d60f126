"""Guest Bake - build and publish guest program binaries.

This package discovers guest packages in a Cargo workspace, compiles them
through an external builder and publishes the resulting ELF binaries next to
their image identifiers.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
