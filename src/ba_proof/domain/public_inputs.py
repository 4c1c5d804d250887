"""Public-input vector exchanged with the proof verifier.

Layout (positions are wire format, shared with the circuit and the settler):
  [0] batchId       [3] sellVolume    [6] allowListRoot
  [1] clearingPrice [4] orderCount    [7] feeRate
  [2] buyVolume     [5] ordersRoot    [8] protocolFee
  [9 .. 9+CAPACITY-1] per-order fills, in reveal order

Every slot is a wide scalar on the wire but carries a narrower semantic
bound; decode rejects anything above it. Validation order is fixed so the
first reported error is deterministic:
  length -> bounds -> batchId -> orderCount -> ordersRoot -> allowListRoot
  -> feeRate -> zero-price/zero-volume -> protocolFee
"""

from dataclasses import dataclass, field

from config.settings import settings
from src.ba_common.errors import (
    AllowListRootMismatchError,
    BatchIdMismatchError,
    FeeRateMismatchError,
    OrderCountMismatchError,
    OrdersRootMismatchError,
    PhantomMatchError,
    ProtocolFeeMismatchError,
    PublicInputLengthError,
    PublicInputOverflowError,
)

IDX_BATCH_ID = 0
IDX_CLEARING_PRICE = 1
IDX_BUY_VOLUME = 2
IDX_SELL_VOLUME = 3
IDX_ORDER_COUNT = 4
IDX_ORDERS_ROOT = 5
IDX_ALLOW_LIST_ROOT = 6
IDX_FEE_RATE = 7
IDX_PROTOCOL_FEE = 8
BASE_LENGTH = 9

_BASE_BOUNDS: tuple[int, ...] = (
    (1 << 64) - 1,   # batchId
    (1 << 128) - 1,  # clearingPrice
    (1 << 128) - 1,  # buyVolume
    (1 << 128) - 1,  # sellVolume
    (1 << 32) - 1,   # orderCount
    (1 << 256) - 1,  # ordersRoot
    (1 << 256) - 1,  # allowListRoot
    (1 << 16) - 1,   # feeRate
    (1 << 128) - 1,  # protocolFee
)
FILL_BOUND = (1 << 128) - 1


def expected_length(capacity: int | None = None) -> int:
    return BASE_LENGTH + (settings.BATCH_CAPACITY if capacity is None else capacity)


def expected_protocol_fee(buy_volume: int, sell_volume: int, fee_rate: int) -> int:
    """floor(min(buy, sell) * feeRate / DENOMINATOR) — exact, no tolerance."""
    return min(buy_volume, sell_volume) * fee_rate // settings.FEE_DENOMINATOR


@dataclass(frozen=True)
class PublicInputs:
    batch_id: int
    clearing_price: int
    buy_volume: int
    sell_volume: int
    order_count: int
    orders_root: int
    allow_list_root: int
    fee_rate: int
    protocol_fee: int
    fills: tuple[int, ...] = field(default_factory=tuple)

    @property
    def matched_volume(self) -> int:
        return min(self.buy_volume, self.sell_volume)


@dataclass(frozen=True)
class ExpectedInputs:
    """Ledger-side values the decoded vector must agree with."""

    batch_id: int
    order_count: int
    orders_root: int
    allow_list_root: int
    fee_rate: int


def _bound_for(index: int) -> int:
    return _BASE_BOUNDS[index] if index < BASE_LENGTH else FILL_BOUND


def decode(values: list[int]) -> PublicInputs:
    """Bounds-check every slot and split base fields from fills."""
    if len(values) < BASE_LENGTH:
        raise PublicInputLengthError(BASE_LENGTH, len(values))
    for index, value in enumerate(values):
        bound = _bound_for(index)
        if isinstance(value, bool) or not isinstance(value, int) or not (0 <= value <= bound):
            raise PublicInputOverflowError(index, value, bound)
    return PublicInputs(
        batch_id=values[IDX_BATCH_ID],
        clearing_price=values[IDX_CLEARING_PRICE],
        buy_volume=values[IDX_BUY_VOLUME],
        sell_volume=values[IDX_SELL_VOLUME],
        order_count=values[IDX_ORDER_COUNT],
        orders_root=values[IDX_ORDERS_ROOT],
        allow_list_root=values[IDX_ALLOW_LIST_ROOT],
        fee_rate=values[IDX_FEE_RATE],
        protocol_fee=values[IDX_PROTOCOL_FEE],
        fills=tuple(values[BASE_LENGTH:]),
    )


def encode(inputs: PublicInputs, capacity: int | None = None) -> list[int]:
    """Flatten to wire order, zero-padding fills to `capacity`."""
    capacity = settings.BATCH_CAPACITY if capacity is None else capacity
    if len(inputs.fills) > capacity:
        raise ValueError(f"{len(inputs.fills)} fills exceed capacity {capacity}")
    fills = list(inputs.fills) + [0] * (capacity - len(inputs.fills))
    return [
        inputs.batch_id,
        inputs.clearing_price,
        inputs.buy_volume,
        inputs.sell_volume,
        inputs.order_count,
        inputs.orders_root,
        inputs.allow_list_root,
        inputs.fee_rate,
        inputs.protocol_fee,
        *fills,
    ]


def _check_length(values: list[int], length: int) -> None:
    if len(values) != length:
        raise PublicInputLengthError(length, len(values))


def _check_economics(inputs: PublicInputs) -> None:
    if inputs.clearing_price == 0 and (inputs.buy_volume != 0 or inputs.sell_volume != 0):
        raise PhantomMatchError(inputs.buy_volume, inputs.sell_volume)
    fee = expected_protocol_fee(inputs.buy_volume, inputs.sell_volume, inputs.fee_rate)
    if inputs.protocol_fee != fee:
        raise ProtocolFeeMismatchError(expected=fee, actual=inputs.protocol_fee)


def validate(values: list[int], length: int | None = None) -> PublicInputs:
    """Shape, bounds and internal-consistency checks."""
    _check_length(values, expected_length() if length is None else length)
    inputs = decode(values)
    _check_economics(inputs)
    return inputs


def validate_against_expected(
    values: list[int],
    expected: ExpectedInputs,
    length: int | None = None,
) -> PublicInputs:
    """validate() plus cross-checks against ledger state, first mismatch wins."""
    _check_length(values, expected_length() if length is None else length)
    inputs = decode(values)
    if inputs.batch_id != expected.batch_id:
        raise BatchIdMismatchError(expected.batch_id, inputs.batch_id)
    if inputs.order_count != expected.order_count:
        raise OrderCountMismatchError(expected.order_count, inputs.order_count)
    if inputs.orders_root != expected.orders_root:
        raise OrdersRootMismatchError(expected.orders_root, inputs.orders_root)
    if inputs.allow_list_root != expected.allow_list_root:
        raise AllowListRootMismatchError(expected.allow_list_root, inputs.allow_list_root)
    if inputs.fee_rate != expected.fee_rate:
        raise FeeRateMismatchError(expected.fee_rate, inputs.fee_rate)
    _check_economics(inputs)
    return inputs
