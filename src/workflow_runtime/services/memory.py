"""In-memory collaborator stores.

Used by the CLI and tests; production deployments plug in database-backed
implementations of the same protocols.
"""

from typing import Iterable, Optional

from ..models import ConnectedAccount, DataSource, DataSourceDoc, ProjectConfig
from ..utils import get_logger

logger = get_logger(__name__)


class InMemoryDataSourceStore:
    """Data sources held in a dictionary keyed by id."""

    def __init__(self, sources: Iterable[DataSource] = ()) -> None:
        self.sources: dict[str, DataSource] = {source.id: source for source in sources}

    def add(self, source: DataSource) -> None:
        self.sources[source.id] = source

    async def find_active_sources(self, project_id: str) -> list[DataSource]:
        return [s for s in self.sources.values() if s.project_id == project_id and s.active]


class InMemoryDocumentStore:
    """Parent documents held in a dictionary keyed by id."""

    def __init__(self, docs: Iterable[DataSourceDoc] = ()) -> None:
        self.docs: dict[str, DataSourceDoc] = {doc.id: doc for doc in docs}

    def add(self, doc: DataSourceDoc) -> None:
        self.docs[doc.id] = doc

    async def find_docs_by_ids(self, ids: list[str]) -> list[DataSourceDoc]:
        return [self.docs[doc_id] for doc_id in ids if doc_id in self.docs]


class InMemoryProjectStore:
    """Project records held in a dictionary keyed by project id.

    ``set_connected_account`` replaces the record for the toolkit, so
    repeated writes of the same account converge to the same state.
    """

    def __init__(self, projects: Iterable[ProjectConfig] = ()) -> None:
        self.projects: dict[str, ProjectConfig] = {project.id: project for project in projects}

    def add(self, project: ProjectConfig) -> None:
        self.projects[project.id] = project

    async def get_project(self, project_id: str) -> Optional[ProjectConfig]:
        project = self.projects.get(project_id)
        # Callers may mutate what they read; hand out a copy
        return project.model_copy(deep=True) if project else None

    async def set_connected_account(self, project_id: str, toolkit_slug: str, account: ConnectedAccount) -> None:
        project = self.projects.setdefault(project_id, ProjectConfig(id=project_id))
        project.composio_connected_accounts[toolkit_slug] = account.model_copy()
        logger.debug(f"Stored {toolkit_slug} account {account.id} ({account.status}) for project {project_id}")

    async def unset_connected_account(self, project_id: str, toolkit_slug: str) -> None:
        project = self.projects.get(project_id)
        if project:
            project.composio_connected_accounts.pop(toolkit_slug, None)
