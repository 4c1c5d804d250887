"""ProofGate — owner-toggled switch in front of the external verifier.

The gate never interprets proof validity; it rejects disabled/malformed calls
before the verifier is reached and otherwise returns its boolean verbatim.
Swapping the verifier (test double vs. production) never touches settlement.
"""

import logging
from typing import Protocol

from config.settings import settings
from src.ba_common.addresses import normalize_address
from src.ba_common.errors import NotOwnerError, ProofGateDisabledError, PublicInputLengthError
from src.ba_proof.domain.public_inputs import expected_length

logger = logging.getLogger(__name__)


class VerifierProtocol(Protocol):
    def verify(self, proof: bytes, public_inputs: list[int]) -> bool: ...


class ProofGate:
    def __init__(
        self,
        verifier: VerifierProtocol,
        owner: str | None = None,
        enabled: bool | None = None,
    ) -> None:
        self._verifier = verifier
        self._owner = normalize_address(owner or settings.ENGINE_OWNER)
        self._enabled = settings.PROOF_VERIFICATION_ENABLED if enabled is None else enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def owner(self) -> str:
        return self._owner

    def set_enabled(self, caller: str, enabled: bool) -> None:
        if normalize_address(caller) != self._owner:
            raise NotOwnerError(caller)
        self._enabled = enabled
        logger.info("Proof gate %s by %s", "enabled" if enabled else "disabled", caller)

    def verify(
        self, proof: bytes, public_inputs: list[int], length: int | None = None
    ) -> bool:
        if not self._enabled:
            raise ProofGateDisabledError()
        want = expected_length() if length is None else length
        if len(public_inputs) != want:
            raise PublicInputLengthError(want, len(public_inputs))
        return bool(self._verifier.verify(proof, list(public_inputs)))
