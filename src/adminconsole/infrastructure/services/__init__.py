from .admin_api_client import AdminApiClient, ResourceEndpoint
from .scheduler import ScheduledTask, Scheduler, ThreadingScheduler

__all__ = [
    "AdminApiClient",
    "ResourceEndpoint",
    "ScheduledTask",
    "Scheduler",
    "ThreadingScheduler",
]
