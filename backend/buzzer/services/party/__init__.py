"""Party domain services: registry, roster, game state machine, scoring, timers.

This package holds the authoritative in-memory game engine. Socket handlers
call into ``PartyService``; nothing here imports Flask request state, keeping
transport concerns separated from core game mechanics.
"""

from .service import PartyService

__all__ = ['PartyService']
