# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository: Member documents (profile, inbox, assigned tasks)."""

from typing import Optional

from clubflow.models.domain import Member
from clubflow.repositories.document_repository import DocumentRepository


class MemberRepository(DocumentRepository[Member]):
    table = "members"
    model = Member
    index_columns = {"email": "email"}

    def get_by_email(self, email: str) -> Optional[Member]:
        matches = self.find_by("email", email)
        return matches[0] if matches else None

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def list_ids(self) -> list[str]:
        return [m.id for m in self.get_all()]
