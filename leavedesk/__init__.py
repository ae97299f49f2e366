"""LeaveDesk — leave management API: permissions, leave lifecycle, notifications."""

__version__ = "1.0.0"
