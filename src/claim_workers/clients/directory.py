"""Clients for the read-only directories: employees, customers and policies."""

from urllib.parse import quote

from beartype import beartype

from ..models.party import Customer, Employee, EmploymentType, Policy, SpecializationArea
from .base import ApiClient


class EmployeesApiClient(ApiClient):
    """Employee directory."""

    service_name = "Employees API"

    @beartype
    async def get_available_adjusters(
        self,
        specialization: SpecializationArea,
        employment_type: EmploymentType,
    ) -> list[Employee]:
        """Available adjusters, in the order the directory returns them."""
        data = await self._request(
            "GET",
            "/employees/adjusters/available",
            params={
                "specialization": specialization.value,
                "employmentType": employment_type.value,
            },
        )
        return self._parse_list(Employee, data)


class CustomersApiClient(ApiClient):
    """Customer directory."""

    service_name = "Customers API"

    @beartype
    async def get_customer(self, customer_id: int) -> Customer | None:
        """GET /customers/{id}."""
        data = await self._request("GET", f"/customers/{customer_id}")
        return self._parse(Customer, data)


class PoliciesApiClient(ApiClient):
    """Policy directory."""

    service_name = "Policies API"

    @beartype
    async def get_policy_by_number(self, policy_number: str) -> Policy | None:
        """GET /policies/number/{policyNumber}."""
        data = await self._request(
            "GET", f"/policies/number/{quote(policy_number, safe='')}"
        )
        return self._parse(Policy, data)
