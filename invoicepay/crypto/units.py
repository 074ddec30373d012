"""
Fixed-point conversion between token smallest units and human units.
"""

from decimal import Decimal

from .errors import ProviderDataError, UnsupportedTokenError
from .interfaces import TokenType

USDC_DECIMALS = 6  # Not 18 like most ERC-20 tokens
BSV_DECIMALS = 8  # 1 BSV = 100,000,000 satoshis

TOKEN_DECIMALS = {
    TokenType.USDC: USDC_DECIMALS,
    TokenType.BSV: BSV_DECIMALS,
}


def decimals_for(token: TokenType) -> int:
    try:
        return TOKEN_DECIMALS[token]
    except KeyError:
        raise UnsupportedTokenError("units", token) from None


def to_decimal_units(raw: str | int, decimals: int) -> Decimal:
    """
    Converts a provider-native integer amount to human units.

    The integer is parsed exactly and shifted by `decimals` places, so
    no floating-point rounding is ever involved.

    Args:
        raw: Integer amount in smallest units (e.g. "1500000" for 1.5 USDC)
        decimals: Number of decimal places for the token

    Returns:
        Exact Decimal amount

    Raises:
        ProviderDataError: If raw is not a non-negative integer
    """
    if isinstance(raw, bool):
        raise ProviderDataError(f"invalid token amount: {raw!r}")
    if isinstance(raw, str):
        text = raw.strip()
        if not (text.isascii() and text.isdigit()):
            raise ProviderDataError(f"invalid token amount: {raw!r}")
        value = int(text)
    elif isinstance(raw, int):
        value = raw
    else:
        raise ProviderDataError(f"invalid token amount: {raw!r}")

    if value < 0:
        raise ProviderDataError(f"negative token amount: {raw!r}")

    return Decimal(f"{value}E-{decimals}")


def to_smallest_units(amount: Decimal, decimals: int) -> int:
    """Inverse of to_decimal_units; rejects amounts finer than one smallest unit."""
    scaled = Decimal(amount).scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{amount} is not representable with {decimals} decimals")
    return int(scaled)
