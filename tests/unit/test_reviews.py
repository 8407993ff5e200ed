# ABOUTME: Unit tests for ReviewRepository and review field validation.
# ABOUTME: Covers rating bounds, read-date defaults, ordering, sparse updates, and deletion.

from datetime import date, datetime

import pytest

from libro.db.connection import Library
from libro.db.errors import RecordNotFoundError, ValidationError
from libro.db.mapping import Review
from libro.db.reviews import normalize_date, validate_rating


@pytest.fixture()
def book_id(library: Library) -> int:
    return library.books.add_book("Dune")


class TestValidateRating:
    """Tests for the 1-5 rating rule."""

    @pytest.mark.parametrize("rating", [1, 2, 3, 4, 5])
    def test_accepts_one_to_five(self, rating: int) -> None:
        assert validate_rating(rating) == rating

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rejects_out_of_range(self, rating: int) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_rating(rating)
        assert exc_info.value.field == "rating"

    @pytest.mark.parametrize("rating", ["5", 4.5, None, True])
    def test_rejects_non_integers(self, rating: object) -> None:
        with pytest.raises(ValidationError):
            validate_rating(rating)


class TestNormalizeDate:
    """Tests for read-date normalization."""

    def test_none_means_today(self) -> None:
        assert normalize_date(None) == date.today().isoformat()

    def test_date_object(self) -> None:
        assert normalize_date(date(2023, 4, 15)) == "2023-04-15"

    def test_datetime_truncated_to_date(self) -> None:
        assert normalize_date(datetime(2024, 3, 1, 10, 30)) == "2024-03-01"

    def test_surrounding_whitespace_ignored(self) -> None:
        assert normalize_date(" 2023-04-15 ") == "2023-04-15"

    @pytest.mark.parametrize("value", ["15/04/2023", "2023-13-01", "yesterday", ""])
    def test_malformed_rejected(self, value: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize_date(value)
        assert exc_info.value.field == "date_read"


class TestAddReview:
    """Tests for ReviewRepository.add_review."""

    def test_round_trip(self, library: Library, book_id: int) -> None:
        review_id = library.reviews.add_review(book_id, 4, "Sand everywhere.", "2024-02-10")
        assert library.reviews.get_review(review_id) == Review(
            id=review_id,
            book_id=book_id,
            date_read="2024-02-10",
            rating=4,
            review="Sand everywhere.",
        )

    def test_datetime_stored_without_time(self, library: Library, book_id: int) -> None:
        read_at = datetime(2024, 3, 1, 10, 30)
        review_id = library.reviews.add_review(book_id, 4, "Late night.", read_at)
        review = library.reviews.get_review(review_id)
        assert review is not None
        assert review.date_read == "2024-03-01"

    def test_default_date_is_today(self, library: Library, book_id: int) -> None:
        review_id = library.reviews.add_review(book_id, 3, "Fine.")
        review = library.reviews.get_review(review_id)
        assert review is not None
        assert review.date_read == date.today().isoformat()

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_bad_rating_writes_nothing(
        self, library: Library, book_id: int, rating: int
    ) -> None:
        with pytest.raises(ValidationError):
            library.reviews.add_review(book_id, rating, "Nope.")
        assert library.reviews.get_reviews(book_id) == []

    def test_missing_book_raises(self, library: Library) -> None:
        with pytest.raises(RecordNotFoundError):
            library.reviews.add_review(999, 3, "Orphan.")

    def test_many_reviews_per_book(self, library: Library, book_id: int) -> None:
        library.reviews.add_review(book_id, 5, "Reread.", "2022-01-01")
        library.reviews.add_review(book_id, 3, "First read.", "2010-01-01")
        library.reviews.add_review(book_id, 4, "Same day.", "2022-01-01")

        reviews = library.reviews.get_reviews(book_id)
        assert [r.review for r in reviews] == ["First read.", "Reread.", "Same day."]

    def test_get_missing_review(self, library: Library) -> None:
        assert library.reviews.get_review(42) is None


class TestUpdateReview:
    """Tests for ReviewRepository.update_review."""

    def test_only_given_fields_change(self, library: Library, book_id: int) -> None:
        review_id = library.reviews.add_review(book_id, 3, "Slow start.", "2024-01-01")
        library.reviews.update_review(review_id, rating=4)

        review = library.reviews.get_review(review_id)
        assert review is not None
        assert (review.rating, review.review, review.date_read) == (4, "Slow start.", "2024-01-01")

    def test_no_fields_is_noop(self, library: Library, book_id: int) -> None:
        review_id = library.reviews.add_review(book_id, 3, "Slow start.", "2024-01-01")
        changes_before = library.connection.total_changes

        library.reviews.update_review(review_id)

        assert library.connection.total_changes == changes_before

    def test_bad_rating_rejected(self, library: Library, book_id: int) -> None:
        review_id = library.reviews.add_review(book_id, 3, "Slow start.")
        with pytest.raises(ValidationError):
            library.reviews.update_review(review_id, rating=6)

    def test_date_normalized(self, library: Library, book_id: int) -> None:
        review_id = library.reviews.add_review(book_id, 3, "Slow start.", "2024-01-01")
        library.reviews.update_review(review_id, date_read=date(2024, 5, 6))

        review = library.reviews.get_review(review_id)
        assert review is not None
        assert review.date_read == "2024-05-06"

    def test_unknown_field_rejected(self, library: Library, book_id: int) -> None:
        review_id = library.reviews.add_review(book_id, 3, "Slow start.")
        with pytest.raises(ValidationError):
            library.reviews.update_review(review_id, stars=5)

    def test_missing_review_raises(self, library: Library) -> None:
        with pytest.raises(RecordNotFoundError) as exc_info:
            library.reviews.update_review(999, rating=2)
        assert exc_info.value.table == "reviews"


class TestDeleteReview:
    """Tests for ReviewRepository.delete_review."""

    def test_deletes_only_that_review(self, library: Library, book_id: int) -> None:
        keep = library.reviews.add_review(book_id, 4, "Keep.", "2020-01-01")
        drop = library.reviews.add_review(book_id, 2, "Drop.", "2021-01-01")

        library.reviews.delete_review(drop)

        assert [r.id for r in library.reviews.get_reviews(book_id)] == [keep]

    def test_missing_review_raises(self, library: Library) -> None:
        with pytest.raises(RecordNotFoundError):
            library.reviews.delete_review(999)
