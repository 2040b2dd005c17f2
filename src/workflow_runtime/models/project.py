"""Project records consumed by toolkit tools.

Only the slice of project state the runtime reads is modelled: the
connected-account status per Composio toolkit.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import Field

from .message import WireModel

ConnectedAccountStatus = Literal["INITIATED", "ACTIVE", "FAILED"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConnectedAccount(WireModel):
    """Connected account of a project for one toolkit.

    Attributes:
        id: Composio connected account id
        status: Local view of the connection status
        created_at: When the connection was initiated
        last_updated_at: When the status was last synced
    """

    id: str
    status: ConnectedAccountStatus = "INITIATED"
    created_at: datetime = Field(default_factory=_utcnow)
    last_updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == "ACTIVE"


class ProjectConfig(WireModel):
    """Project record.

    Attributes:
        id: Project id
        name: Project name
        composio_connected_accounts: Connected accounts keyed by toolkit slug
    """

    id: str
    name: str = ""
    composio_connected_accounts: dict[str, ConnectedAccount] = Field(default_factory=dict)

    def get_connected_account(self, toolkit_slug: str) -> Optional[ConnectedAccount]:
        """Get the connected account for a toolkit.

        Args:
            toolkit_slug: Toolkit slug

        Returns:
            Connected account or None
        """
        return self.composio_connected_accounts.get(toolkit_slug)
