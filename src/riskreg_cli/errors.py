class RiskRegError(Exception):
    """Base error for the risk register scanner."""


class WorkspaceError(RiskRegError):
    """The workspace root cannot be enumerated."""
