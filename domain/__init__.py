"""Wild Pointer Domain Layer.

This package contains the core business logic organized by bounded contexts:
- exploration: Random destinations, waypoints, road snapping and visit filtering
"""

# Imports alphabetized per project style (isort)
from domain import exploration

__all__ = ["exploration"]
