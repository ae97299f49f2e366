"""Employees module — the Employee record used for ownership and team scoping."""

from leavedesk.employees.models import Employee

__all__ = ["Employee"]
