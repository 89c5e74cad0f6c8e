"""Configuration models."""

from pydantic import BaseModel, Field, model_validator


class AuthConfig(BaseModel):
    """Authentication configuration."""

    type: str = Field(..., pattern="^(session|password)$")
    user: str
    password: str | None = None
    session_id: str | None = None

    @model_validator(mode="after")
    def validate_credentials(self) -> "AuthConfig":
        """Validate the credential matching the auth type is present.

        Returns:
            Validated model

        Raises:
            ValueError: If password or session id missing for its auth type
        """
        if self.type == "password" and self.password is None:
            raise ValueError("password required when auth type is 'password'")
        if self.type == "session" and self.session_id is None:
            raise ValueError("session_id required when auth type is 'session'")
        return self


class ProfileConfig(BaseModel):
    """Profile configuration for a vCenter server."""

    host: str
    port: int = 443
    verify_ssl: bool = True
    auth: AuthConfig
    timeout: int = 30
    task_timeout: int = 300
