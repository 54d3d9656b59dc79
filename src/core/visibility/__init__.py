"""
Visibilidade por papel: quem enxerga o quê.
"""

from .roles import Identity, UserRole

__all__ = ["Identity", "UserRole"]
