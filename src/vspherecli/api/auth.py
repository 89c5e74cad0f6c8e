"""Authentication handling for the vSphere Automation API."""

import httpx

from .exceptions import AuthenticationError

SESSION_HEADER = "vmware-api-session-id"


class AuthHandler:
    """Handle session authentication for the vSphere Automation API."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        verify_ssl: bool = True,
        timeout: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize auth handler.

        Args:
            host: vCenter host
            port: vCenter port
            user: Username
            verify_ssl: Whether to verify SSL certificates
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.host = host
        self.port = port
        self.user = user
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.transport = transport
        self.base_url = f"https://{host}:{port}/api"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            verify=self.verify_ssl, timeout=self.timeout, transport=self.transport
        )

    def get_session_headers(self, session_id: str) -> dict[str, str]:
        """Get headers for an existing API session.

        Args:
            session_id: Session identifier

        Returns:
            Headers dict with the session header
        """
        return {SESSION_HEADER: session_id}

    async def create_session(self, password: str) -> str:
        """Create an API session using username and password.

        Args:
            password: User password

        Returns:
            Session identifier

        Raises:
            AuthenticationError: If authentication fails
        """
        async with self._client() as client:
            try:
                response = await client.post(
                    f"{self.base_url}/session", auth=(self.user, password)
                )

                if response.status_code == 401:
                    raise AuthenticationError("Invalid username or password")

                response.raise_for_status()
                session_id = response.json()
                if not isinstance(session_id, str):
                    raise AuthenticationError("Invalid response from server")
                return session_id

            except httpx.HTTPStatusError as e:
                raise AuthenticationError(f"Authentication failed: {e}")
            except httpx.RequestError as e:
                raise AuthenticationError(f"Connection failed: {e}")
            except ValueError:
                raise AuthenticationError("Invalid response from server")

    async def verify_authentication(self, headers: dict[str, str]) -> bool:
        """Verify authentication is valid by requesting the session info.

        Args:
            headers: Authentication headers

        Returns:
            True if authentication is valid

        Raises:
            AuthenticationError: If authentication verification fails
        """
        async with self._client() as client:
            try:
                response = await client.get(f"{self.base_url}/session", headers=headers)

                if response.status_code == 401:
                    raise AuthenticationError("Session invalid or expired")

                response.raise_for_status()
                return True

            except httpx.HTTPStatusError as e:
                raise AuthenticationError(f"Verification failed: {e}")
            except httpx.RequestError as e:
                raise AuthenticationError(f"Connection failed: {e}")

    async def delete_session(self, headers: dict[str, str]) -> None:
        """Terminate an API session.

        Args:
            headers: Authentication headers of the session
        """
        async with self._client() as client:
            try:
                await client.delete(f"{self.base_url}/session", headers=headers)
            except httpx.RequestError:
                # Session expires on the server anyway
                pass
