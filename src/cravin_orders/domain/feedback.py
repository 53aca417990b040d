"""Customer feedback model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Feedback:
    """Star rating left after an order."""

    customer_name: str
    rating: int
    comment: str = ""
