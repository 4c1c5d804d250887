"""Settlement planning — turns proof-attested fills into claimables.

Pure function of the decoded public inputs and the batch's commitments; the
engine applies the plan. Bonds are posted in token1 at commit, before the
side is known. At reveal a buyer deposits token1 and a seller deposits
token0, so each fill is checked against a deposit in the same token.

  buyer  (fill f): amount0 = f,              amount1 = bond + deposit - f
  seller (fill f): amount0 = deposit - f,    amount1 = bond + f * clearingPrice
  pending non-revealer:                      amount1 = bond

Sellers' token0 covers the buyers' fills; the settler supplies only the gap
max(0, buyFills - sellFills). On token1 the settler covers any shortfall
between claimables and escrow and gets any surplus back. Per token:
  sum(payouts) == escrow held + settler supply - settler surplus
"""

from dataclasses import dataclass

from src.ba_batch.domain.models import Claimable, Commitment, RevealedSlot
from src.ba_common.enums import CommitmentStatus
from src.ba_common.errors import FillExceedsDepositError, FillVolumeMismatchError
from src.ba_proof.domain.public_inputs import PublicInputs


@dataclass(frozen=True)
class SettlementPlan:
    claimables: dict[str, Claimable]
    supply0: int        # token0 gap pulled from the settler
    supply1: int        # token1 shortfall pulled from the settler
    surplus0: int       # token0 returned to the settler
    surplus1: int       # token1 returned to the settler
    escrow_held0: int   # token0 held for this batch before settlement
    escrow_held1: int   # token1 held for this batch before settlement
    buy_fills: int
    sell_fills: int


def plan_settlement(
    inputs: PublicInputs,
    slots: list[RevealedSlot],
    commitments: dict[str, Commitment],
) -> SettlementPlan:
    fills = list(inputs.fills)
    for index in range(len(slots), len(fills)):
        if fills[index] != 0:
            raise FillVolumeMismatchError(f"fill [{index}]={fills[index]} for an empty slot")

    claimables: dict[str, Claimable] = {}
    buy_fills = 0
    sell_fills = 0
    for index, slot in enumerate(slots):
        fill = fills[index] if index < len(fills) else 0
        commitment = commitments[slot.trader]
        if fill > commitment.deposit:
            raise FillExceedsDepositError(index, fill, commitment.deposit)
        remainder = commitment.deposit - fill
        if slot.is_buy:
            buy_fills += fill
            claimables[slot.trader] = Claimable(
                amount0=fill, amount1=commitment.bond + remainder
            )
        else:
            sell_fills += fill
            claimables[slot.trader] = Claimable(
                amount0=remainder, amount1=commitment.bond + fill * inputs.clearing_price
            )

    matched = inputs.matched_volume
    if buy_fills > matched or sell_fills > matched:
        raise FillVolumeMismatchError(
            f"buy fills {buy_fills} / sell fills {sell_fills} exceed matched volume {matched}"
        )

    for trader, commitment in commitments.items():
        if commitment.status == CommitmentStatus.PENDING and commitment.bond > 0:
            claimables[trader] = Claimable(amount0=0, amount1=commitment.bond)

    live = [
        c
        for c in commitments.values()
        if c.status in (CommitmentStatus.PENDING, CommitmentStatus.REVEALED)
    ]
    held0 = sum(c.escrowed0 for c in live)
    held1 = sum(c.escrowed1 for c in live)
    total0 = sum(c.amount0 for c in claimables.values())
    total1 = sum(c.amount1 for c in claimables.values())
    return SettlementPlan(
        claimables=claimables,
        supply0=max(0, total0 - held0),
        supply1=max(0, total1 - held1),
        surplus0=max(0, held0 - total0),
        surplus1=max(0, held1 - total1),
        escrow_held0=held0,
        escrow_held1=held1,
        buy_fills=buy_fills,
        sell_fills=sell_fills,
    )
