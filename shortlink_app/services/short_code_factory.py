"""
Factory for picking the short code strategy of a create request.
The random strategy is stateless, so one instance is reused.
"""

from typing import Optional
from shortlink_app.services.short_code_strategies import (
    ShortCodeStrategy,
    RandomShortCodeStrategy,
    CustomShortCodeStrategy
)
from shortlink_app.config import settings


class ShortCodeFactory:
    """Factory for short code strategies with a cached random instance"""

    _random_instance: Optional[RandomShortCodeStrategy] = None

    @classmethod
    def create_strategy(cls, custom_code: Optional[str] = None) -> ShortCodeStrategy:
        """
        Return the strategy for a create request.

        Args:
            custom_code: Code requested by the user, if any.

        Returns:
            CustomShortCodeStrategy for a requested code, otherwise the
            shared RandomShortCodeStrategy
        """
        if custom_code is not None:
            return CustomShortCodeStrategy(
                candidate=custom_code,
                min_length=settings.custom_code_min_length,
                max_length=settings.custom_code_max_length,
                reserved=settings.reserved_codes
            )

        if cls._random_instance is None:
            cls._random_instance = RandomShortCodeStrategy(length=settings.short_code_length)
        return cls._random_instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._random_instance = None
