"""Holdings and portfolio snapshots consumed by every analytics component.

A ``Holding`` is one tagged record for all instruments: ``asset_type`` is the
discriminant and ``details`` carries the optional type-specific payload
(stock beta and sector, bond maturity and rating, gold purity).  The risk,
performance, rebalancing and income math only ever needs the generic fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Mapping, Union


class AssetType(str, Enum):
    STOCK = "STOCK"
    BOND = "BOND"
    GOLD = "GOLD"
    CASH = "CASH"

    @classmethod
    def parse(cls, value: Any) -> AssetType:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Unknown asset type {value!r}; expected one of {[t.value for t in cls]}"
            ) from None


def safe_div(numerator: float, denominator: float) -> float:
    """Ratio that yields 0 instead of NaN/inf for a zero denominator."""
    if not denominator:
        return 0.0
    return numerator / denominator


def _to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


# ---------------------------------------------------------------------------
# Type-specific payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StockDetails:
    sector: str = ""
    market_cap: str = ""          # LARGE / MID / SMALL
    beta: float = 1.0
    dividend_yield: float = 0.0   # percent
    pe_ratio: float | None = None

    def dividend_income(self, market_value: float) -> float:
        """Annual dividend on a position worth *market_value*."""
        return self.dividend_yield / 100 * market_value


_CREDIT_RISK_LABELS = {
    "AAA": "LOW", "AA": "LOW",
    "A": "MEDIUM", "BBB": "MEDIUM",
    "BB": "HIGH", "B": "HIGH",
    "CCC": "VERY_HIGH", "CC": "VERY_HIGH", "C": "VERY_HIGH",
    "D": "DEFAULT",
}


@dataclass(frozen=True)
class BondDetails:
    maturity_date: date | None = None
    coupon_rate: float = 0.0      # percent of face value
    face_value: float = 0.0
    credit_rating: str = ""
    bond_type: str = ""           # GOVERNMENT / CORPORATE / MUNICIPAL / ZERO_COUPON

    def coupon_payment(self) -> float:
        """Annual coupon paid per bond."""
        return self.coupon_rate / 100 * self.face_value

    def credit_risk_label(self) -> str:
        return _CREDIT_RISK_LABELS.get(self.credit_rating.upper(), "UNKNOWN")

    def years_to_maturity(self, as_of: date) -> float:
        if self.maturity_date is None:
            return 0.0
        return (self.maturity_date - as_of).days / 365

    def yield_to_maturity(self, purchase_price: float, as_of: date) -> float:
        """Simple annualised pull to par, in percent (0 once matured).

        Coupons are ignored: ((face - price) / price) / years * 100.
        """
        years = self.years_to_maturity(as_of)
        if years <= 0 or purchase_price <= 0:
            return 0.0
        return (self.face_value - purchase_price) / purchase_price / years * 100


GOLD_STORAGE_RATE = 0.005
GOLD_PURITY_FACTORS = {"24K": 1.0, "22K": 0.916, "18K": 0.75, "14K": 0.585}


@dataclass(frozen=True)
class GoldDetails:
    purity: str = ""              # 24K / 22K / 18K / 14K
    weight: float = 0.0           # grams
    gold_type: str = ""           # PHYSICAL / ETF / SOVEREIGN
    storage_location: str = ""

    def storage_cost(self, market_value: float) -> float:
        """Annual storage cost, 0.5% of value."""
        return market_value * GOLD_STORAGE_RATE

    def purity_value(self, market_value: float) -> float:
        return market_value * GOLD_PURITY_FACTORS.get(self.purity.upper(), 1.0)


Details = Union[StockDetails, BondDetails, GoldDetails]


def _details_from_dict(asset_type: AssetType, data: Mapping | None) -> Details | None:
    if not data:
        return None
    if asset_type is AssetType.STOCK:
        return StockDetails(
            sector=data.get("sector", ""),
            market_cap=str(_pick(data, "market_cap", "marketCap", default="")).upper(),
            beta=float(data.get("beta", 1.0)),
            dividend_yield=float(_pick(data, "dividend_yield", "dividendYield", default=0.0)),
            pe_ratio=_pick(data, "pe_ratio", "peRatio", default=None),
        )
    if asset_type is AssetType.BOND:
        return BondDetails(
            maturity_date=_to_date(_pick(data, "maturity_date", "maturityDate", default=None)),
            coupon_rate=float(_pick(data, "coupon_rate", "couponRate", default=0.0)),
            face_value=float(_pick(data, "face_value", "faceValue", default=0.0)),
            credit_rating=str(_pick(data, "credit_rating", "creditRating", default="")),
            bond_type=str(_pick(data, "bond_type", "bondType", default="")),
        )
    if asset_type is AssetType.GOLD:
        return GoldDetails(
            purity=str(data.get("purity", "")),
            weight=float(data.get("weight", 0.0)),
            gold_type=str(_pick(data, "gold_type", "goldType", default="")),
            storage_location=str(_pick(data, "storage_location", "storageLocation", default="")),
        )
    return None


def _pick(data: Mapping, *keys: str, default: Any = None) -> Any:
    """First present key among snake_case / camelCase aliases."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


# ---------------------------------------------------------------------------
# Holding
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Holding:
    """An investment position.

    ``quantity`` and ``purchase_price`` are fixed at creation; a price refresh
    produces a new holding through :meth:`with_price`.
    """

    symbol: str
    asset_type: AssetType
    quantity: float
    purchase_price: float
    current_price: float | None = None
    details: Details | None = None

    def __post_init__(self):
        object.__setattr__(self, "symbol", str(self.symbol).strip().upper())
        object.__setattr__(self, "asset_type", AssetType.parse(self.asset_type))
        if self.quantity < 0:
            raise ValueError(f"{self.symbol}: quantity must be >= 0, got {self.quantity}")
        if self.purchase_price <= 0:
            raise ValueError(f"{self.symbol}: purchase_price must be > 0, got {self.purchase_price}")
        if self.current_price is None:
            object.__setattr__(self, "current_price", self.purchase_price)
        elif self.current_price < 0:
            raise ValueError(f"{self.symbol}: current_price must be >= 0, got {self.current_price}")

    @property
    def cost_basis(self) -> float:
        return self.purchase_price * self.quantity

    @property
    def market_value(self) -> float:
        return self.current_price * self.quantity

    @property
    def gain(self) -> float:
        return self.market_value - self.cost_basis

    @property
    def gain_pct(self) -> float:
        return safe_div(self.gain, self.cost_basis) * 100

    def with_price(self, price: float) -> Holding:
        return replace(self, current_price=float(price))

    @classmethod
    def from_dict(cls, data: Mapping) -> Holding:
        asset_type = AssetType.parse(_pick(data, "asset_type", "assetType", "type"))
        current = _pick(data, "current_price", "currentPrice", default=None)
        return cls(
            symbol=str(data["symbol"]),
            asset_type=asset_type,
            quantity=float(data["quantity"]),
            purchase_price=float(_pick(data, "purchase_price", "purchasePrice")),
            current_price=float(current) if current is not None else None,
            details=_details_from_dict(asset_type, data.get("details")),
        )

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "asset_type": self.asset_type.value,
            "quantity": self.quantity,
            "purchase_price": self.purchase_price,
            "current_price": self.current_price,
            "cost_basis": self.cost_basis,
            "market_value": self.market_value,
            "gain": self.gain,
            "gain_pct": self.gain_pct,
        }


# ---------------------------------------------------------------------------
# Portfolio snapshot
# ---------------------------------------------------------------------------

@dataclass
class PortfolioSnapshot:
    """Holdings with current prices, as presented to one analytics call."""

    holdings: list[Holding] = field(default_factory=list)
    target_allocation: dict[str, float] = field(default_factory=dict)
    name: str = ""

    @property
    def total_value(self) -> float:
        return sum(h.market_value for h in self.holdings)

    @property
    def total_cost(self) -> float:
        return sum(h.cost_basis for h in self.holdings)

    def value_by_type(self) -> dict[str, float]:
        """Market value per asset type, in first-seen order."""
        values: dict[str, float] = {}
        for h in self.holdings:
            key = h.asset_type.value
            values[key] = values.get(key, 0.0) + h.market_value
        return values

    def allocation_by_type(self) -> dict[str, float]:
        """Percent of total value per asset type (0 when the portfolio is empty)."""
        total = self.total_value
        return {k: safe_div(v, total) * 100 for k, v in self.value_by_type().items()}

    def holdings_for(self, key: str) -> list[Holding]:
        """Holdings matching an asset type name, or else a symbol."""
        key = str(key).upper()
        if key in AssetType.__members__:
            return [h for h in self.holdings if h.asset_type.value == key]
        return [h for h in self.holdings if h.symbol == key]

    def with_prices(self, prices: Mapping[str, float]) -> PortfolioSnapshot:
        holdings = [
            h.with_price(prices[h.symbol]) if prices.get(h.symbol) is not None else h
            for h in self.holdings
        ]
        return PortfolioSnapshot(holdings, dict(self.target_allocation), self.name)

    @classmethod
    def from_holdings(cls, holdings: Iterable[Holding], **kwargs) -> PortfolioSnapshot:
        return cls(holdings=list(holdings), **kwargs)

    @classmethod
    def from_dict(cls, data: Mapping) -> PortfolioSnapshot:
        records = _pick(data, "holdings", "investments", default=[]) or []
        target = _pick(data, "target_allocation", "targetAllocation", default={}) or {}
        return cls(
            holdings=[Holding.from_dict(r) for r in records],
            target_allocation={str(k).upper(): float(v) for k, v in target.items()},
            name=str(data.get("name", "")),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "holdings": [h.to_dict() for h in self.holdings],
            "target_allocation": dict(self.target_allocation),
            "total_value": self.total_value,
        }
