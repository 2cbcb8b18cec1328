"""Loyalty program rules: tier discounts, point redemption and accrual"""

from typing import Optional
from pos_gateway.domain.models import CustomerSnapshot, LoyaltySettings, LoyaltyTier
from pos_gateway.domain.exceptions import InsufficientLoyaltyPointsError


def tier_discount_bp(customer: Optional[CustomerSnapshot], settings: LoyaltySettings) -> int:
    """
    Discount rate granted by the customer's tier.

    No customer or a disabled program means no discount. Unknown tiers
    are treated as bronze.
    """
    if customer is None or not settings.enabled:
        return 0

    if customer.loyalty_tier == LoyaltyTier.GOLD.value:
        return settings.gold_discount_bp
    elif customer.loyalty_tier == LoyaltyTier.SILVER.value:
        return settings.silver_discount_bp
    else:
        return settings.bronze_discount_bp


def tier_for_points(points: int, settings: LoyaltySettings) -> LoyaltyTier:
    """Map a point balance to its tier using the configured thresholds"""
    if points >= settings.gold_threshold:
        return LoyaltyTier.GOLD
    elif points >= settings.silver_threshold:
        return LoyaltyTier.SILVER
    return LoyaltyTier.BRONZE


def validate_points_redemption(points: int, available: int) -> None:
    """
    Check a redemption against the customer's balance.

    Called on every quote to give immediate feedback and again when the
    sale is submitted, where the error is authoritative.

    Raises:
        InsufficientLoyaltyPointsError: negative or above balance
    """
    if points < 0:
        raise InsufficientLoyaltyPointsError("Points to redeem cannot be negative")
    if points > available:
        raise InsufficientLoyaltyPointsError(
            f"Insufficient points: requested {points}, available {available}"
        )


def points_earned(total_cents: int, settings: LoyaltySettings) -> int:
    """
    Points accrued for a sale: points_per_currency per whole currency unit.

    Example:
        $108.90 at 1 point per unit → 108 points
    """
    if not settings.enabled or total_cents <= 0:
        return 0
    return (total_cents // 100) * settings.points_per_currency
