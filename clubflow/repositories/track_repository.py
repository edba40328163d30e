# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository: Track documents with embedded applicants."""

from clubflow.models.domain import Track
from clubflow.repositories.document_repository import DocumentRepository


class TrackRepository(DocumentRepository[Track]):
    table = "tracks"
    model = Track
    index_columns = {"committee": "committee"}

    def get_by_committee(self, committee: str) -> list[Track]:
        return sorted(self.find_by("committee", committee), key=lambda t: t.created_at)
