"""Process-wide BatchEngine wiring.

The HTTP app is read-only: it exposes no route that commits, reveals or
settles. The engine built here starts with no configured markets, in-memory
custody, a ledger clock at height 0 and a verifier that rejects every proof,
so a bare `uvicorn src.main:app` serves an empty engine. A host process that
drives the lifecycle imports `engine` (or swaps its own in through
`app.dependency_overrides[get_engine]`, as the tests do) and advances `clock`
as its ledger grows.
"""

from config.settings import settings
from src.ba_batch.engine.engine import BatchEngine
from src.ba_common.clock import ManualLedgerClock
from src.ba_custody.infrastructure.in_memory import InMemoryCustody
from src.ba_proof.domain.gate import ProofGate
from src.ba_proof.infrastructure.verifiers import RejectingVerifier

custody = InMemoryCustody()
clock = ManualLedgerClock()

engine = BatchEngine(
    custody=custody,
    gate=ProofGate(RejectingVerifier()),
    clock=clock,
    capacity=settings.BATCH_CAPACITY,
)


def get_engine() -> BatchEngine:
    """FastAPI dependency: the shared engine."""
    return engine
