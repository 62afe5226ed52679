"""repomirror — Mirror git repositories between disconnected networks."""

__version__ = "0.1.0"
