"""Supabase repository for customer feedback."""

from dataclasses import dataclass

from supabase import Client

from cravin_orders.domain.feedback import Feedback
from cravin_orders.services.feedback import FeedbackRepository


@dataclass
class SupabaseFeedbackRepository(FeedbackRepository):
    """Supabase-backed feedback repository."""

    client: Client

    def create_feedback(self, feedback: Feedback) -> None:
        """Insert a feedback row."""
        self.client.table("feedback").insert(
            {
                "customer_name": feedback.customer_name,
                "rating": feedback.rating,
                "comment": feedback.comment,
            }
        ).execute()
