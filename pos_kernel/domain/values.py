"""
Values -- Immutable, self-validating money arithmetic.

Responsibility:
    Provides the value types and helpers every invoice computation sits on:
    Currency, Money, and the fixed-precision Decimal utilities
    (``round_money``, ``round_to_whole``, ``safe_divide``, ``percent_of``,
    ``clamp_percent``, ``to_decimal``).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except pos_kernel.domain.currency.

Invariants enforced:
    - All monetary amounts are Decimal, never float. Floats arriving from
      JSON are converted through ``str`` so 0.1 stays 0.1.
    - Rounding is ROUND_HALF_UP and only happens when a caller asks for it.
      Sums accumulate at full precision.
    - Division by zero yields zero, never an exception or NaN.

Failure modes:
    - ValueError on construction with unparseable amounts.
    - InvalidCurrencyError for unknown currency codes.
    - CurrencyMismatchError when arithmetic mixes currencies.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pos_kernel.domain.currency import CurrencyRegistry
from pos_kernel.exceptions import CurrencyMismatchError, InvalidCurrencyError

MONEY_DECIMAL_PLACES = 2
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any, default: Decimal | None = None) -> Decimal:
    """
    Convert a raw number (str, int, float, Decimal) to Decimal.

    Floats go through ``str`` so binary noise is not carried into money.
    Empty strings and None return ``default`` when one is given.

    Raises:
        ValueError: If the value cannot be parsed and no default is given.
    """
    if isinstance(value, Decimal):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is not None:
            return default
        raise ValueError(f"Cannot convert {value!r} to Decimal")
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert boolean {value!r} to Decimal")
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        if default is not None:
            return default
        raise ValueError(f"Cannot convert {value!r} to Decimal") from e
    if not result.is_finite():
        if default is not None:
            return default
        raise ValueError(f"Non-finite amount: {value!r}")
    return result


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = ROUND_HALF_UP,
) -> Decimal:
    """
    Round a monetary value to the given decimal places (half-up by default).

    This is the one rounding function for money in the codebase; Money.round
    delegates here.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def round_to_whole(value: Decimal) -> Decimal:
    """Round to the nearest whole currency unit, half-up."""
    return round_money(value, 0)


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, returning zero when the denominator is zero."""
    if denominator == ZERO:
        return ZERO
    return numerator / denominator


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """``amount * percent / 100`` at full precision."""
    return amount * percent / HUNDRED


def clamp_percent(
    percent: Decimal,
    low: Decimal = ZERO,
    high: Decimal = HUNDRED,
) -> Decimal:
    """Clamp a percentage into ``[low, high]``."""
    if percent < low:
        return low
    if percent > high:
        return high
    return percent


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Normalized (uppercased, stripped) on construction; unknown codes are
    rejected immediately.
    """

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if self.code else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise InvalidCurrencyError(self.code)
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        """ISO 4217 decimal places for this currency."""
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def symbol(self) -> str:
        """Display symbol, falling back to the code."""
        info = CurrencyRegistry.get_info(self.code)
        return info.symbol if info and info.symbol else self.code

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency. Arithmetic enforces a single
        currency; there is no conversion.

    Non-goals:
        - Does NOT auto-round -- callers must explicitly call .round()
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount: {self.amount}") from e

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        """
        Factory method for creating Money.

        Raises:
            ValueError: If amount cannot be converted.
            InvalidCurrencyError: If the currency code is unknown.
        """
        if isinstance(amount, (str, int)):
            amount = Decimal(str(amount))
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        """Create a zero amount in the given currency."""
        if isinstance(currency, str):
            currency = Currency(currency)
        return cls(amount=ZERO, currency=currency)

    @classmethod
    def sum(cls, values: Iterable[Money], currency: str | Currency) -> Money:
        """Full-precision sum of Money values; zero for an empty sequence."""
        total = cls.zero(currency)
        for value in values:
            total = total + value
        return total

    @property
    def is_zero(self) -> bool:
        return self.amount == ZERO

    @property
    def is_positive(self) -> bool:
        return self.amount > ZERO

    @property
    def is_negative(self) -> bool:
        return self.amount < ZERO

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to the currency's decimal places. Returns a new Money."""
        rounded = round_money(self.amount, self.currency.decimal_places, rounding)
        return Money(amount=rounded, currency=self.currency)

    def round_to_whole(self) -> Money:
        """Round to the nearest whole currency unit, half-up."""
        return Money(amount=round_to_whole(self.amount), currency=self.currency)

    def percent(self, percent: Decimal) -> Money:
        """This amount times ``percent / 100``, unrounded."""
        return Money(amount=percent_of(self.amount, percent), currency=self.currency)

    def _check_currency(self, other: Money, operation: str) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                self.currency.code, other.currency.code, operation
            )

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __abs__(self) -> Money:
        return Money(amount=abs(self.amount), currency=self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        """Multiply by a scalar."""
        if isinstance(factor, (int, str)):
            factor = Decimal(str(factor))
        if not isinstance(factor, Decimal):
            return NotImplemented
        return Money(amount=self.amount * factor, currency=self.currency)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __truediv__(self, divisor: Decimal | int | str) -> Money:
        """Divide by a scalar; dividing by zero yields zero."""
        if isinstance(divisor, (int, str)):
            divisor = Decimal(str(divisor))
        if not isinstance(divisor, Decimal):
            return NotImplemented
        return Money(amount=safe_divide(self.amount, divisor), currency=self.currency)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def display(self) -> str:
        """Rounded, symbol-prefixed form for receipts, e.g. ``₹212.40``."""
        return CurrencyRegistry.get_info(self.currency.code).format(self.amount)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"
