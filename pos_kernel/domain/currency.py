"""Currency -- the ISO 4217 codes a vendor can bill in, with their precision."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Precision and display data for one ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str
    symbol: str = ""

    @property
    def quantum(self) -> Decimal:
        """Smallest displayable unit, e.g. ``Decimal("0.01")``."""
        return Decimal(1).scaleb(-self.decimal_places)

    def format(self, amount: Decimal) -> str:
        """Half-up rounded amount with thousands separators and symbol, e.g. ``₹1,212.40``."""
        rounded = amount.quantize(self.quantum, rounding=ROUND_HALF_UP)
        sign = "-" if rounded < 0 else ""
        prefix = self.symbol or f"{self.code} "
        return f"{sign}{prefix}{abs(rounded):,}"


class CurrencyRegistry:
    """Lookup of supported currencies; the default billing currency is INR."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        info.code: info
        for info in (
            CurrencyInfo("INR", 2, "Indian Rupee", "₹"),
            CurrencyInfo("USD", 2, "US Dollar", "$"),
            CurrencyInfo("EUR", 2, "Euro", "€"),
            CurrencyInfo("GBP", 2, "Pound Sterling", "£"),
            CurrencyInfo("AED", 2, "UAE Dirham"),
            CurrencyInfo("SAR", 2, "Saudi Riyal"),
            CurrencyInfo("SGD", 2, "Singapore Dollar"),
            CurrencyInfo("AUD", 2, "Australian Dollar"),
            CurrencyInfo("CAD", 2, "Canadian Dollar"),
            CurrencyInfo("NPR", 2, "Nepalese Rupee"),
            CurrencyInfo("BDT", 2, "Bangladeshi Taka"),
            CurrencyInfo("LKR", 2, "Sri Lankan Rupee"),
            CurrencyInfo("JPY", 0, "Japanese Yen", "¥"),
            CurrencyInfo("KRW", 0, "South Korean Won"),
            CurrencyInfo("VND", 0, "Vietnamese Dong"),
            CurrencyInfo("BHD", 3, "Bahraini Dinar"),
            CurrencyInfo("KWD", 3, "Kuwaiti Dinar"),
            CurrencyInfo("OMR", 3, "Omani Rial"),
        )
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return code in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        return cls._CURRENCIES.get(code)

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Decimal places for ``code``; 2 when the code is not registered."""
        info = cls._CURRENCIES.get(code)
        return info.decimal_places if info else 2

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
