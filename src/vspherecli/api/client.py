"""vSphere Automation API client."""

import asyncio
import re
from typing import Any
from urllib.parse import quote

import httpx

from .auth import AuthHandler
from .codec import spec_info_from_api, spec_item_from_api, spec_to_api
from .exceptions import (
    APIError,
    AuthenticationError,
    NetworkError,
    PermissionError,
    ResourceNotFoundError,
    SpecNotFoundError,
    TaskError,
    TimeoutError,
)
from ..models.config import ProfileConfig
from ..models.customization import (
    CustomizationSpec,
    CustomizationSpecInfo,
    CustomizationSpecItem,
)
from ..models.vm import TaskStatus, VMSummary

_VM_ID = re.compile(r"^vm-\d+$")

TASK_SUCCEEDED = "SUCCEEDED"
TASK_FAILED = "FAILED"


def extract_vapi_message(error: Any) -> str | None:
    """Extract the human readable message from a vAPI error structure.

    Format: {"error_type": "NOT_FOUND", "messages": [{"default_message": "..."}]}
    """
    if not isinstance(error, dict):
        return None
    messages = error.get("messages") or []
    text = "; ".join(m.get("default_message", "") for m in messages if isinstance(m, dict))
    return text or error.get("error_type")


class VSphereClient:
    """Async client for the vSphere Automation API."""

    def __init__(
        self, profile: ProfileConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        """Initialize vSphere client.

        Args:
            profile: Profile configuration
            transport: Optional httpx transport (used by tests)
        """
        self.profile = profile
        self.transport = transport
        self.base_url = f"https://{profile.host}:{profile.port}/api"
        self.auth_handler = AuthHandler(
            host=profile.host,
            port=profile.port,
            user=profile.auth.user,
            verify_ssl=profile.verify_ssl,
            timeout=profile.timeout,
            transport=transport,
        )
        self._headers: dict[str, str] | None = None
        self._client: httpx.AsyncClient | None = None
        self._owns_session = False

    async def __aenter__(self) -> "VSphereClient":
        """Async context manager entry.

        Returns:
            Self
        """
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit.

        Args:
            exc_type: Exception type
            exc_val: Exception value
            exc_tb: Exception traceback
        """
        await self.close()

    async def connect(self) -> None:
        """Establish connection and authenticate."""
        auth = self.profile.auth
        if auth.type == "session":
            if not auth.session_id:
                raise AuthenticationError("Session id required for session auth")
            self._headers = self.auth_handler.get_session_headers(auth.session_id)
        else:
            if not auth.password:
                raise AuthenticationError("Password required for password auth")
            session_id = await self.auth_handler.create_session(auth.password)
            self._headers = self.auth_handler.get_session_headers(session_id)
            self._owns_session = True

        self._client = httpx.AsyncClient(
            verify=self.profile.verify_ssl,
            timeout=self.profile.timeout,
            transport=self.transport,
        )

        await self.auth_handler.verify_authentication(self._headers)

    async def close(self) -> None:
        """Close the client connection, logging out of a session it created."""
        if self._owns_session and self._headers:
            await self.auth_handler.delete_session(self._headers)
            self._owns_session = False
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Ensure client is connected.

        Returns:
            HTTP client

        Raises:
            RuntimeError: If not connected
        """
        if not self._client or not self._headers:
            raise RuntimeError("Client not connected. Use async with or call connect().")
        return self._client

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        retry_count: int = 3,
    ) -> Any:
        """Make an API request with retry logic.

        Args:
            method: HTTP method
            endpoint: API endpoint (without /api prefix)
            params: Query parameters
            json: JSON request body
            retry_count: Number of retries for transient failures

        Returns:
            Decoded JSON response, or None for empty responses

        Raises:
            APIError: On API errors
            NetworkError: On network errors
            TimeoutError: On timeout
        """
        client = self._ensure_connected()
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        for attempt in range(retry_count):
            try:
                response = await client.request(
                    method, url, headers=self._headers, params=params, json=json
                )

                if response.status_code == 401:
                    raise AuthenticationError("Authentication failed or expired")
                elif response.status_code == 403:
                    raise PermissionError("Permission denied for this operation")
                elif response.status_code == 404:
                    raise ResourceNotFoundError("resource", endpoint)
                elif response.status_code >= 400:
                    error_msg = self._extract_error_message(response)
                    raise APIError(error_msg, status_code=response.status_code)

                if not response.content:
                    return None
                return response.json()

            except httpx.TimeoutException:
                if attempt < retry_count - 1:
                    await asyncio.sleep(2**attempt)
                    continue
                raise TimeoutError(f"Request to {endpoint} timed out")

            except httpx.NetworkError as e:
                if attempt < retry_count - 1:
                    await asyncio.sleep(2**attempt)
                    continue
                raise NetworkError(f"Network error: {e}")

            except (AuthenticationError, PermissionError, ResourceNotFoundError, APIError):
                raise

            except Exception as e:
                raise APIError(f"Unexpected error: {e}")

        raise APIError("Max retries exceeded")

    def _extract_error_message(self, response: httpx.Response) -> str:
        """Extract error message from response.

        Args:
            response: HTTP response

        Returns:
            Error message
        """
        try:
            message = extract_vapi_message(response.json())
            return message or response.text
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """Make a GET request.

        Args:
            endpoint: API endpoint
            params: Query parameters

        Returns:
            Response data
        """
        return await self._request("GET", endpoint, params=params)

    async def post(
        self,
        endpoint: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make a POST request.

        Args:
            endpoint: API endpoint
            json: JSON request body
            params: Query parameters

        Returns:
            Response data
        """
        return await self._request("POST", endpoint, params=params, json=json)

    async def put(
        self,
        endpoint: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make a PUT request.

        Args:
            endpoint: API endpoint
            json: JSON request body
            params: Query parameters

        Returns:
            Response data
        """
        return await self._request("PUT", endpoint, params=params, json=json)

    # Server methods

    async def get_version(self) -> dict[str, Any]:
        """Get vCenter appliance version information."""
        return await self.get("/appliance/system/version")

    # VM methods

    async def list_vms(self, names: list[str] | None = None) -> list[VMSummary]:
        """List virtual machines.

        Args:
            names: Only return VMs with these names

        Returns:
            VM summaries
        """
        params = {"names": names} if names else None
        data = await self.get("/vcenter/vm", params=params)
        return [VMSummary.model_validate(vm) for vm in data or []]

    async def get_vm(self, vm_id: str) -> dict[str, Any]:
        """Get virtual machine details.

        Args:
            vm_id: VM identifier (vm-N)

        Returns:
            VM details
        """
        return await self.get(f"/vcenter/vm/{vm_id}")

    async def find_vm(self, identifier: str) -> VMSummary:
        """Resolve a VM by identifier (vm-N) or by name.

        Args:
            identifier: VM identifier or name

        Returns:
            VM summary

        Raises:
            ResourceNotFoundError: If no VM matches
            APIError: If the name matches more than one VM
        """
        if _VM_ID.match(identifier):
            try:
                info = await self.get_vm(identifier)
            except ResourceNotFoundError:
                raise ResourceNotFoundError("VM", identifier)
            return VMSummary(
                vm=identifier,
                name=info.get("name", identifier),
                power_state=info.get("power_state"),
            )

        matches = [vm for vm in await self.list_vms(names=[identifier]) if vm.name == identifier]
        if not matches:
            raise ResourceNotFoundError("VM", identifier)
        if len(matches) > 1:
            ids = ", ".join(vm.vm for vm in matches)
            raise APIError(f"VM name '{identifier}' is ambiguous ({ids}), use the VM id instead")
        return matches[0]

    # Customization spec methods

    async def list_customization_specs(
        self, names: list[str] | None = None
    ) -> list[CustomizationSpecInfo]:
        """List stored customization specs.

        Args:
            names: Only return specs with these names

        Returns:
            Customization spec summaries
        """
        params = {"names": names} if names else None
        data = await self.get("/vcenter/guest/customization-specs", params=params)
        return [spec_info_from_api(item) for item in data or []]

    async def customization_spec_exists(self, name: str) -> bool:
        """Check whether a customization spec with this name is stored.

        Args:
            name: Customization spec name

        Returns:
            True if the spec exists
        """
        specs = await self.list_customization_specs(names=[name])
        return any(spec.name == name for spec in specs)

    async def get_customization_spec(self, name: str) -> CustomizationSpecItem:
        """Get a stored customization spec by name.

        Args:
            name: Customization spec name

        Returns:
            Stored customization spec

        Raises:
            SpecNotFoundError: If the spec does not exist
        """
        try:
            data = await self.get(f"/vcenter/guest/customization-specs/{quote(name, safe='')}")
        except ResourceNotFoundError:
            raise SpecNotFoundError(name)
        return spec_item_from_api(name, data)

    async def customize_vm(self, vm_id: str, spec: CustomizationSpec) -> str | None:
        """Apply a customization spec to a VM.

        Args:
            vm_id: VM identifier
            spec: Customization spec

        Returns:
            Task identifier, or None if the server completed the call synchronously
        """
        return await self.put(
            f"/vcenter/vm/{vm_id}/guest/customization",
            json={"spec": spec_to_api(spec)},
            params={"vmw-task": "true"},
        )

    # Task methods

    async def get_task_status(self, task_id: str) -> TaskStatus:
        """Get status of a task.

        Args:
            task_id: Task identifier

        Returns:
            Task status
        """
        data = await self.get(f"/cis/tasks/{task_id}")
        return TaskStatus(task_id=task_id, **(data or {}))

    async def wait_for_task(
        self, task_id: str, timeout: int = 300, poll_interval: float = 2.0
    ) -> TaskStatus:
        """Wait for a task to complete with Ctrl+C support.

        Args:
            task_id: Task identifier
            timeout: Maximum wait time in seconds
            poll_interval: Polling interval in seconds

        Returns:
            Final task status

        Raises:
            TimeoutError: If task doesn't complete within timeout
            TaskError: If task fails
            asyncio.CancelledError: If interrupted by Ctrl+C
        """
        import signal
        import time

        start_time = time.time()
        task = None
        old_handler = None

        try:
            # Get current task for signal handling
            task = asyncio.current_task()

            # Handle Ctrl+C by cancelling the wait
            def signal_handler(signum: int, frame: Any) -> None:
                if task and not task.done():
                    task.cancel()

            old_handler = signal.signal(signal.SIGINT, signal_handler)

            while True:
                status = await self.get_task_status(task_id)

                if status.status == TASK_SUCCEEDED:
                    return status
                if status.status == TASK_FAILED:
                    message = extract_vapi_message(status.error)
                    raise TaskError(task_id, message or f"Task {task_id} failed")

                if time.time() - start_time > timeout:
                    raise TimeoutError(f"Task {task_id} did not complete within {timeout} seconds")

                await asyncio.sleep(poll_interval)
        finally:
            if old_handler is not None:
                signal.signal(signal.SIGINT, old_handler)

    async def cancel_task(self, task_id: str) -> None:
        """Request cancellation of a running task.

        Args:
            task_id: Task identifier
        """
        try:
            await self.post(f"/cis/tasks/{task_id}", params={"action": "cancel"})
        except APIError:
            # Task might already be finished or not cancelable
            pass
