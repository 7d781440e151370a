"""Port interface for persisted assessment results."""

from typing import Protocol, runtime_checkable

from polyglai.domain.entities.assessment import AssessmentRecord


@runtime_checkable
class AssessmentStore(Protocol):
    """Small document store for per-user best scores.

    One record per (user, language, level, target text).
    """

    async def get_high_score(
        self, user_id: str, language: str, level: str, target_text: str
    ) -> AssessmentRecord | None:
        """Best stored attempt for a target text, if any."""
        ...

    async def save_assessment(self, record: AssessmentRecord) -> bool:
        """Store the record if it is the first for its key or beats the stored score.

        The comparison and write happen as one operation.

        Returns:
            True if the record was written

        Raises:
            AssessmentStoreError: If the write fails
        """
        ...

    async def get_assessed_texts(self, user_id: str, language: str, level: str) -> list[str]:
        """Target texts the user already has a score for."""
        ...

    async def list_high_scores(self, user_id: str, language: str | None = None) -> list[AssessmentRecord]:
        """All stored best attempts, newest first."""
        ...


class AssessmentStoreError(Exception):
    """Raised when the assessment store cannot be read or written."""

    pass
