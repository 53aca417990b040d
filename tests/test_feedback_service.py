"""Tests for the feedback service."""

import pytest

from cravin_orders.domain.errors import InvalidFeedback
from cravin_orders.services.feedback import FeedbackService
from tests.conftest import InMemoryFeedbackRepository


def test_submit_stores_feedback() -> None:
    repository = InMemoryFeedbackRepository()
    service = FeedbackService(repository)

    feedback = service.submit(" ", 5, "  lovely chai ")

    assert feedback.customer_name == "Anonymous"
    assert feedback.comment == "lovely chai"
    assert repository.entries == [feedback]


@pytest.mark.parametrize("rating", [0, 6])
def test_submit_rejects_out_of_range_rating(rating: int) -> None:
    repository = InMemoryFeedbackRepository()
    with pytest.raises(InvalidFeedback):
        FeedbackService(repository).submit("Asha", rating)
    assert repository.entries == []
