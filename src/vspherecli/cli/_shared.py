"""Shared command helpers."""

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..api.client import VSphereClient
from ..models.vm import TaskStatus
from ..utils import console


async def wait_with_spinner(
    client: VSphereClient,
    task_id: str,
    description: str,
    timeout: int | None = None,
) -> TaskStatus:
    """Wait for a server task to finish behind a Progress spinner.

    Args:
        client: VSphereClient instance.
        task_id: Task identifier returned by the server.
        description: Spinner text (e.g. "Customizing VM web01...").
        timeout: Optional timeout for wait_for_task.

    Returns:
        Final task status.
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description=description, total=None)
        kwargs = {"timeout": timeout} if timeout else {}
        return await client.wait_for_task(task_id, **kwargs)
