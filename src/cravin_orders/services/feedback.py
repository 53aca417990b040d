"""Customer feedback service."""

from dataclasses import dataclass
from typing import Protocol

from cravin_orders.domain.errors import InvalidFeedback
from cravin_orders.domain.feedback import Feedback


class FeedbackRepository(Protocol):
    """Persistence interface for feedback."""

    def create_feedback(self, feedback: Feedback) -> None:
        """Store a feedback entry."""


@dataclass
class FeedbackService:
    """Validates and stores star ratings."""

    repository: FeedbackRepository

    def submit(
        self, customer_name: str | None, rating: int, comment: str | None = None
    ) -> Feedback:
        if not 1 <= rating <= 5:
            raise InvalidFeedback("Rating must be between 1 and 5")
        feedback = Feedback(
            customer_name=(customer_name or "").strip() or "Anonymous",
            rating=rating,
            comment=(comment or "").strip(),
        )
        self.repository.create_feedback(feedback)
        return feedback
