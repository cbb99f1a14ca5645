"""Extract JSX fragments into standalone React component modules.

Example:
    >>> from componentize import __version__
    >>> isinstance(__version__, str)
    True
"""

from importlib import metadata

try:
    __version__ = metadata.version("componentize")
except metadata.PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "0.0.0"

__all__ = ["__version__"]
