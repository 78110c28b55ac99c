"""
===============================================================================
ADMIN / ACTIVITY USE CASES PACKAGE (Public API / Exports)
===============================================================================
"""

from __future__ import annotations

from .admin_dashboard import (
    AdminDashboard,
    AdminDashboardResult,
    GetAdminDashboardUseCase,
    system_health,
)
from .list_activities import ActivityListResult, ListActivitiesUseCase

__all__ = [
    "GetAdminDashboardUseCase",
    "AdminDashboard",
    "AdminDashboardResult",
    "system_health",
    "ListActivitiesUseCase",
    "ActivityListResult",
]
