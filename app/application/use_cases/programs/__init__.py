"""Program template use cases: programs, modules, weeks, days, cohorts."""

from app.application.use_cases.programs.program_operations import ProgramService

__all__ = ["ProgramService"]
