"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .planning_service import CalendarClientProtocol, MaterializationReport, PlanningService

__all__ = ["CalendarClientProtocol", "MaterializationReport", "PlanningService"]
