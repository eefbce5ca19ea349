"""
Starstraw - authentication back-end that feels like a game.

Profiles hold skills; the skills decide what a profile is allowed to do.
"""

__version__ = "0.1.0"
