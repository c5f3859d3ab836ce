"""CLI command modules.

Commands:
- logs: Stream the log of a deployment config's deployment
"""

from .logs import logs

__all__ = [
    "logs",
]
