"""
Reviews — product ratings and comments.

The server embeds a product's reviews in the product payload; posting a
review is followed by a product re-fetch so the caller sees the list the
server now holds.
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from storefront._errors import RequestError, ValidationError
from storefront.api import Product, Review, ReviewDraft, ShopApi
from storefront.lift import request
from storefront.validation import RATING_MAX, validate_rating

logger = logging.getLogger(__name__)

type ReviewsError = RequestError | ValidationError


def sorted_reviews(product: Product, *, descending: bool = True) -> list[Review]:
    """Reviews by rating, best first unless `descending` is False. Ties keep server order."""
    return sorted(product.reviews, key=lambda r: r.rating, reverse=descending)


class ReviewBoard:
    """
    Example:
        board = ReviewBoard(api)
        match await board.submit(3, rating=4, comment="Solid"):
            case Ok(product):
                for review in sorted_reviews(product):
                    ...
    """

    def __init__(self, api: ShopApi) -> None:
        self._api = api

    async def submit(
        self, product_id: int, rating: float = RATING_MAX, comment: str = ""
    ) -> Result[Product, ReviewsError]:
        """Post a review, then return the product with its refreshed reviews."""
        match validate_rating(rating):
            case Error(e):
                return Error(e)
            case Ok(value):
                pass

        draft = ReviewDraft(rating=value, comment=comment.strip(), product_id=product_id)
        match await request(lambda: self._api.create_review(draft)):
            case Error(e):
                logger.warning("Review of product %s failed: %s", product_id, e)
                return Error(e)
            case Ok(_):
                logger.info("Review posted for product %s", product_id)

        return await request(lambda: self._api.get_product(product_id))


__all__ = ("ReviewBoard", "ReviewsError", "sorted_reviews")
