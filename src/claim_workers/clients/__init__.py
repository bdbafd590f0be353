"""HTTP clients for the remote insurance services and the task queue."""

from .base import ApiClient, RemoteServiceError
from .camunda import CamundaTaskQueue, decode_variable, encode_variable
from .claims import ClaimsApiClient
from .directory import CustomersApiClient, EmployeesApiClient, PoliciesApiClient
from .notification import NotificationClient

__all__ = [
    "ApiClient",
    "RemoteServiceError",
    "CamundaTaskQueue",
    "decode_variable",
    "encode_variable",
    "ClaimsApiClient",
    "EmployeesApiClient",
    "CustomersApiClient",
    "PoliciesApiClient",
    "NotificationClient",
]
