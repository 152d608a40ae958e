"""
Jobify - client core for the job-application tracker.

Authenticated transport, typed API client and durable session storage.
"""

__version__ = "1.0.0"

from .api_client import JobifyClient, JobsQuery
from .storage import SessionStorage
from .transport import AuthTransport

__all__ = [
    "AuthTransport",
    "JobifyClient",
    "JobsQuery",
    "SessionStorage",
]
