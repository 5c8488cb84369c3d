"""Same-origin upload relay for clients that cannot reach storage directly."""

from course_studio.relay.allowlist import DestinationRejected, check_destination
from course_studio.relay.app import create_app

__all__ = ["DestinationRejected", "check_destination", "create_app"]
