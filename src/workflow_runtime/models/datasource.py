"""Data source entities used by RAG tools."""

from pydantic import Field

from .message import WireModel


class DataSource(WireModel):
    """A project data source whose documents are embedded for search.

    Attributes:
        id: Data source id
        project_id: Owning project
        name: Display name
        active: Whether the source may be searched
    """

    id: str
    project_id: str
    name: str = ""
    active: bool = True


class DataSourceDoc(WireModel):
    """A parent document of embedded chunks."""

    id: str
    source_id: str = ""
    name: str = ""
    content: str = ""


class EmbeddingRecord(WireModel):
    """A ranked chunk returned by vector search.

    Attributes:
        title: Document title
        name: Document name
        content: Chunk text (or the parent document text in content mode)
        doc_id: Parent document id
        source_id: Data source id
    """

    title: str = ""
    name: str = ""
    content: str = ""
    doc_id: str = Field(..., description="Parent document id")
    source_id: str = Field(..., description="Data source id")
