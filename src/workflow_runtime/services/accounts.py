"""Connected-account lookup and status syncing for toolkit tools."""

from datetime import datetime, timezone
from typing import Any, Literal, Optional, Protocol

from ..errors import ConnectedAccountNotFoundError, ToolExecutionError
from ..models import ConnectedAccount
from ..utils import get_logger
from .base import ProjectStore

logger = get_logger(__name__)


class ConnectedAccountSource(Protocol):
    """Remote lookup returning a record with ``status`` and ``toolkit.slug``."""

    async def get_connected_account(self, connected_account_id: str) -> Any:
        ...


def remote_status_to_local(status: str) -> Literal["INITIATED", "ACTIVE", "FAILED"]:
    """Map a remote connection status onto the stored status.

    Args:
        status: Remote status

    Returns:
        INITIATED while the connection is being set up, ACTIVE when usable,
        FAILED otherwise
    """
    if status in ("INITIALIZING", "INITIATED"):
        return "INITIATED"
    if status == "ACTIVE":
        return "ACTIVE"
    return "FAILED"


async def resolve_connected_account_id(projects: ProjectStore, project_id: str, toolkit_slug: str) -> str:
    """Get the stored connected account id of a project for a toolkit.

    Args:
        projects: Project store
        project_id: Project id
        toolkit_slug: Toolkit slug

    Returns:
        Connected account id

    Raises:
        ToolExecutionError: If the project does not exist
        ConnectedAccountNotFoundError: If no account is stored for the toolkit
    """
    project = await projects.get_project(project_id)
    if project is None:
        raise ToolExecutionError(f"project {project_id} not found")

    account = project.get_connected_account(toolkit_slug)
    if account is None or not account.id:
        raise ConnectedAccountNotFoundError(project_id, toolkit_slug)
    return account.id


async def sync_connected_account(
    projects: ProjectStore,
    source: ConnectedAccountSource,
    project_id: str,
    toolkit_slug: str,
    connected_account_id: str,
    now: Optional[datetime] = None,
) -> ConnectedAccount:
    """Refresh the stored status of a connected account from Composio.

    An account that is already ACTIVE is returned without a remote call.
    Otherwise the remote status is mapped onto INITIATED, ACTIVE or FAILED,
    stamped with the sync time and written back. Writing the same state
    twice leaves the record unchanged apart from the timestamp.

    Args:
        projects: Project store
        source: Remote account lookup (a ComposioClient)
        project_id: Project id
        toolkit_slug: Toolkit the account belongs to
        connected_account_id: Expected account id
        now: Sync timestamp (defaults to the current UTC time)

    Returns:
        The stored account after syncing

    Raises:
        ToolExecutionError: If the project does not hold this account for the toolkit
    """
    project = await projects.get_project(project_id)
    account = project.get_connected_account(toolkit_slug) if project else None
    if account is None or account.id != connected_account_id:
        raise ToolExecutionError(f"Connected account {connected_account_id} not found in project {project_id}")

    if account.is_active:
        return account

    remote = await source.get_connected_account(connected_account_id)
    synced = account.model_copy(
        update={
            "status": remote_status_to_local(remote.status),
            "last_updated_at": now or datetime.now(timezone.utc),
        }
    )
    logger.info(
        f"Synced {remote.toolkit.slug} account {connected_account_id} for project {project_id}: "
        f"{remote.status} -> {synced.status}"
    )

    await projects.set_connected_account(project_id, remote.toolkit.slug, synced)
    return synced
