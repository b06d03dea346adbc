"""
Data contracts for fifo-core: Fill, Position, MatchResult.

fifo-core consumes Fill and produces Position / open exposure.
No I/O; these are plain dataclasses.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum


class Side(str, Enum):
    """Fill direction. Compared against Fill.direction, which stays a plain string."""

    BUY = "buy"
    SELL = "sell"


class InvalidFillError(ValueError):
    """Raised when a fill violates a precondition (e.g. negative volume)."""


@dataclass(frozen=True)
class Fill:
    """
    One executed buy or sell. Immutable; matching reports partially consumed
    fills as copies carrying the as-consumed (or residual) volume.
    """

    order_id: str
    instrument: str
    direction: str  # "buy" | "sell"; anything else is ignored by the matcher
    volume: Decimal
    price: Decimal
    settled_at: int | float  # epoch seconds

    def __post_init__(self) -> None:
        # Accept int/str for convenience; store Decimal so zero checks are exact
        for name in ("volume", "price"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                try:
                    value = Decimal(str(value))
                except InvalidOperation as exc:
                    raise InvalidFillError(f"Fill {self.order_id!r}: {name} is not a number: {value!r}") from exc
                object.__setattr__(self, name, value)
        if not (self.volume.is_finite() and self.price.is_finite()):
            raise InvalidFillError(
                f"Fill {self.order_id!r} ({self.instrument}) has non-finite volume or price: {self.volume}, {self.price}"
            )
        if self.volume < 0:
            raise InvalidFillError(
                f"Fill {self.order_id!r} ({self.instrument}) has negative volume {self.volume}"
            )

    def is_buy(self) -> bool:
        return self.direction == Side.BUY

    def is_sell(self) -> bool:
        return self.direction == Side.SELL

    @property
    def notional(self) -> Decimal:
        return self.volume * self.price


@dataclass(frozen=True)
class Position:
    """A closed round trip: consumed buys (FIFO order) then the sells that offset them."""

    instrument: str
    fills: tuple[Fill, ...]
    profit: Decimal
    closed_at: int | float

    @property
    def buys(self) -> tuple[Fill, ...]:
        return tuple(f for f in self.fills if f.is_buy())

    @property
    def sells(self) -> tuple[Fill, ...]:
        return tuple(f for f in self.fills if f.is_sell())

    @property
    def volume(self) -> Decimal:
        return sum((f.volume for f in self.buys), Decimal("0"))


@dataclass(frozen=True)
class MatchResult:
    """
    Output of one matching run.

    closed_positions and open_exposure are the primary outputs. unmatched_sells
    carries sell volume that found no open buy; ignored_fills holds fills with an
    unrecognized direction or zero volume. pending holds buy volume consumed by
    sells (and those sells) that no closing sell has yet offset, e.g. a buy only
    partly sold by the end of the window.
    """

    closed_positions: tuple[Position, ...] = ()
    open_exposure: tuple[Fill, ...] = ()
    unmatched_sells: tuple[Fill, ...] = ()
    ignored_fills: tuple[Fill, ...] = ()
    pending: tuple[Fill, ...] = ()

    @property
    def realized_profit(self) -> Decimal:
        return sum((p.profit for p in self.closed_positions), Decimal("0"))
