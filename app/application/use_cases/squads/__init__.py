"""Squad use cases."""

from app.application.use_cases.squads.squad_operations import SquadService

__all__ = ["SquadService"]
