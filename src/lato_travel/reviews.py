"""Review aggregation across Google Places and internal reviews.

Internal reviews are tour-specific, so they weigh 1.2x in the combined
rating. All averages are rounded half-up to one decimal place.
"""
from pydantic import BaseModel, ConfigDict, Field

from lato_travel.utils import round_half_up

INTERNAL_REVIEW_WEIGHT = 1.2
STARS = (1, 2, 3, 4, 5)


class ReviewAuthor(BaseModel):
    name: str
    avatar: str | None = None
    location: str | None = None


class Review(BaseModel):
    """A review from either source; ``source`` is "google" or "internal"."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    user: ReviewAuthor
    rating: float = Field(ge=0, le=5)
    date: str | None = None
    comment: str = ""
    helpful: int = 0
    images: list[str] = Field(default_factory=list)
    source: str | None = None
    google_review_url: str | None = Field(default=None, alias="googleReviewUrl")


class AggregatedReviews(BaseModel):
    reviews: list[Review]
    average_rating: float
    total_reviews: int
    rating_distribution: dict[int, int]
    google_review_count: int
    internal_review_count: int


def calculate_weighted_rating(
    google_rating: float,
    google_count: int,
    internal_rating: float,
    internal_count: int,
) -> float:
    """Weighted average of the two sources; 0 when there are no reviews."""
    if google_count + internal_count == 0:
        return 0.0
    weighted_google = google_rating * google_count
    weighted_internal = internal_rating * internal_count * INTERNAL_REVIEW_WEIGHT
    total_weight = google_count + internal_count * INTERNAL_REVIEW_WEIGHT
    return round_half_up((weighted_google + weighted_internal) / total_weight)


def merge_reviews(
    google_reviews: list[Review], internal_reviews: list[Review] | None = None
) -> list[Review]:
    """Tag sources and combine, highest rating first (stable for ties)."""
    tagged_google = [r.model_copy(update={"source": r.source or "google"}) for r in google_reviews]
    tagged_internal = [
        r.model_copy(update={"source": r.source or "internal"}) for r in internal_reviews or []
    ]
    return sorted([*tagged_google, *tagged_internal], key=lambda r: r.rating, reverse=True)


def calculate_rating_distribution(reviews: list[Review]) -> dict[int, int]:
    """Count reviews per star, rounding each rating to the nearest star."""
    distribution = {star: 0 for star in STARS}
    for review in reviews:
        star = int(round_half_up(review.rating, 0))
        if star in distribution:
            distribution[star] += 1
    return distribution


def calculate_average_rating(reviews: list[Review]) -> float:
    if not reviews:
        return 0.0
    return round_half_up(sum(r.rating for r in reviews) / len(reviews))


def rating_distribution_percentages(
    distribution: dict[int, int], total: int
) -> dict[int, int]:
    if total == 0:
        return {star: 0 for star in STARS}
    return {
        star: int(round_half_up(distribution.get(star, 0) / total * 100, 0)) for star in STARS
    }


def aggregate_reviews(
    google_reviews: list[Review],
    google_rating: float,
    google_total_count: int,
    internal_reviews: list[Review] | None = None,
) -> AggregatedReviews:
    """Merge both sources and compute the combined statistics.

    ``google_total_count`` is Google's overall count, which is usually larger
    than the handful of Google reviews actually returned.
    """
    internal = internal_reviews or []
    merged = merge_reviews(google_reviews, internal)
    internal_rating = sum(r.rating for r in internal) / len(internal) if internal else 0.0
    return AggregatedReviews(
        reviews=merged,
        average_rating=calculate_weighted_rating(
            google_rating, google_total_count, internal_rating, len(internal)
        ),
        total_reviews=google_total_count + len(internal),
        rating_distribution=calculate_rating_distribution(merged),
        google_review_count=google_total_count,
        internal_review_count=len(internal),
    )


def format_rating(rating: float) -> str:
    return f"{rating:.1f}"


def rating_label(rating: float) -> str:
    if rating >= 4.5:
        return "Excellent"
    if rating >= 4.0:
        return "Very Good"
    if rating >= 3.5:
        return "Good"
    if rating >= 3.0:
        return "Average"
    if rating >= 2.0:
        return "Below Average"
    return "Poor"
