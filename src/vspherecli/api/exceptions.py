"""Custom exceptions for vspherecli API interactions."""


class VSphereCliError(Exception):
    """Base exception for vspherecli."""

    pass


class ConfigError(VSphereCliError):
    """Configuration related errors."""

    pass


class AuthenticationError(VSphereCliError):
    """Authentication failures."""

    pass


class UsageError(VSphereCliError):
    """Invalid command usage (shown together with the command help)."""

    pass


class ValidationError(VSphereCliError):
    """Option values that cannot be applied to a customization spec."""

    pass


class APIError(VSphereCliError):
    """General API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code if applicable
        """
        super().__init__(message)
        self.status_code = status_code


class ResourceNotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, resource: str, identifier: str) -> None:
        """Initialize resource not found error.

        Args:
            resource: Type of resource (vm, customization spec, etc.)
            identifier: Resource identifier
        """
        super().__init__(f"{resource} '{identifier}' not found", status_code=404)
        self.resource = resource
        self.identifier = identifier


class SpecNotFoundError(ResourceNotFoundError):
    """Named customization specification does not exist."""

    def __init__(self, name: str) -> None:
        """Initialize spec not found error.

        Args:
            name: Customization specification name
        """
        APIError.__init__(self, f"Specification '{name}' does not exist", status_code=404)
        self.resource = "customization spec"
        self.identifier = name


class PermissionError(APIError):
    """Permission denied (403)."""

    def __init__(self, message: str = "Permission denied") -> None:
        """Initialize permission error.

        Args:
            message: Error message
        """
        super().__init__(message, status_code=403)


class TaskError(APIError):
    """A server-side task finished in the FAILED state."""

    def __init__(self, task_id: str, message: str) -> None:
        """Initialize task error.

        Args:
            task_id: Task identifier
            message: Error message reported by the server
        """
        super().__init__(message)
        self.task_id = task_id


class NetworkError(VSphereCliError):
    """Network related errors."""

    pass


class TimeoutError(VSphereCliError):
    """Request timeout errors."""

    pass
