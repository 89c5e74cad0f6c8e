"""Virtual machine and task models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VMSummary(BaseModel):
    """Virtual machine summary as returned by the VM listing."""

    model_config = ConfigDict(populate_by_name=True)

    vm: str
    name: str
    power_state: str | None = None
    cpu_count: int | None = None
    memory_size_mib: int | None = Field(None, alias="memory_size_MiB")


class TaskStatus(BaseModel):
    """Task status information."""

    task_id: str
    status: str
    description: dict[str, Any] | None = None
    operation: str | None = None
    target: dict[str, Any] | None = None
    start_time: str | None = None
    end_time: str | None = None
    progress: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
