"""Verifier doubles used in place of the on-ledger proof verifier."""


class PermissiveVerifier:
    """Accepts every proof. Records what it was asked to verify."""

    def __init__(self) -> None:
        self.calls: list[tuple[bytes, list[int]]] = []

    def verify(self, proof: bytes, public_inputs: list[int]) -> bool:
        self.calls.append((proof, list(public_inputs)))
        return True


class RejectingVerifier(PermissiveVerifier):
    def verify(self, proof: bytes, public_inputs: list[int]) -> bool:
        super().verify(proof, public_inputs)
        return False
