"""Unit conversion for the six fixed pairs the assistant understands.

Temperatures are printed with one decimal, everything else with two. The
USD to INR rate comes from an injected ``RateProvider``; the default provider
returns a fixed approximate rate that will drift out of date.
"""

from __future__ import annotations

from typing import Callable, Optional, Pattern, Protocol, Tuple

from core.expression_evaluator import format_number
from core.parsers.types import ClassifiedResponse, ParseContext, reply
from core.patterns import (
    CELSIUS_TO_FAHRENHEIT,
    FAHRENHEIT_TO_CELSIUS,
    KG_TO_LBS,
    KM_TO_MILES,
    MILES_TO_KM,
    USD_TO_INR,
)

DEFAULT_USD_INR_RATE = 83.0
KM_PER_MILE = 1.60934
MILES_PER_KM = 0.621371
LBS_PER_KG = 2.20462


class RateProvider(Protocol):
    def usd_to_inr(self) -> float:
        ...


class FixedRateProvider:
    """Serve a constant USD -> INR rate."""

    def __init__(self, rate: float = DEFAULT_USD_INR_RATE) -> None:
        self._rate = float(rate)

    def usd_to_inr(self) -> float:
        return self._rate


def _celsius(value: float, _: RateProvider) -> str:
    fahrenheit = value * 9 / 5 + 32
    return f"🌡️ {format_number(value)}°C = **{fahrenheit:.1f}°F**"


def _fahrenheit(value: float, _: RateProvider) -> str:
    celsius = (value - 32) * 5 / 9
    return f"🌡️ {format_number(value)}°F = **{celsius:.1f}°C**"


def _km(value: float, _: RateProvider) -> str:
    return f"📏 {format_number(value)} km = **{value * MILES_PER_KM:.2f} miles**"


def _miles(value: float, _: RateProvider) -> str:
    return f"📏 {format_number(value)} miles = **{value * KM_PER_MILE:.2f} km**"


def _kg(value: float, _: RateProvider) -> str:
    return f"⚖️ {format_number(value)} kg = **{value * LBS_PER_KG:.2f} lbs**"


def _usd(value: float, rates: RateProvider) -> str:
    inr = value * rates.usd_to_inr()
    return f"💵 ${format_number(value)} ≈ **₹{inr:.2f}** (approx)"


CONVERSIONS: Tuple[Tuple[str, Pattern[str], Callable[[float, RateProvider], str]], ...] = (
    ("celsius_to_fahrenheit", CELSIUS_TO_FAHRENHEIT, _celsius),
    ("fahrenheit_to_celsius", FAHRENHEIT_TO_CELSIUS, _fahrenheit),
    ("km_to_miles", KM_TO_MILES, _km),
    ("miles_to_km", MILES_TO_KM, _miles),
    ("kg_to_lbs", KG_TO_LBS, _kg),
    ("usd_to_inr", USD_TO_INR, _usd),
)


def convert(lowered: str, rates: Optional[RateProvider] = None) -> Optional[str]:
    """Return the formatted conversion for the first matching pair, if any."""

    rates = rates or FixedRateProvider()
    for _, pattern, formatter in CONVERSIONS:
        match = pattern.search(lowered)
        if match:
            return formatter(float(match.group(1)), rates)
    return None


def parse(ctx: ParseContext) -> Optional[ClassifiedResponse]:
    text = convert(ctx.lowered, ctx.rates)
    if text is None:
        return None
    return reply(text, "conversion")


__all__ = ["RateProvider", "FixedRateProvider", "DEFAULT_USD_INR_RATE", "CONVERSIONS", "convert", "parse"]
