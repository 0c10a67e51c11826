"""ghicli.

A small command-line client for the GitHub issue tracker:
- search a repository's issues by free-text terms
- create an issue by editing a title/body template in your editor
- fetch and modify existing issues
"""

__version__ = "0.1.0"

from ghicli.config import CliSettings

__all__ = ["__version__", "CliSettings"]
