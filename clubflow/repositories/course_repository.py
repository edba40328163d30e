# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository: Course documents with embedded tasks and submissions."""

from clubflow.models.domain import Course
from clubflow.repositories.document_repository import DocumentRepository


class CourseRepository(DocumentRepository[Course]):
    table = "courses"
    model = Course
    index_columns = {"committee": "committee"}

    def get_by_committee(self, committee: str) -> list[Course]:
        return sorted(self.find_by("committee", committee), key=lambda c: c.created_at)
