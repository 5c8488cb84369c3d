"""Backend access — request client, session renewal and endpoint wrappers."""

from course_studio.api.backend import Backend
from course_studio.api.client import RequestClient
from course_studio.api.renewal import RenewalCoordinator
from course_studio.api.session import Session, SessionState

__all__ = ["Backend", "RenewalCoordinator", "RequestClient", "Session", "SessionState"]
