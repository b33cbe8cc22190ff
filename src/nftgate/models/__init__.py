from .decision import Authorized, Decision, Forbidden, ForbiddenCause

__all__ = ["Authorized", "Decision", "Forbidden", "ForbiddenCause"]
