from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Must match the proving circuit's compiled order capacity
    BATCH_CAPACITY: int = 16

    # Phase durations are ledger heights, not seconds
    MIN_PHASE_DURATION: int = 1
    MAX_PHASE_DURATION: int = 100_800

    # Fees (basis points)
    MAX_FEE_RATE: int = 1_000
    FEE_DENOMINATOR: int = 10_000

    # Proof gate; the owner may toggle verification at runtime
    PROOF_VERIFICATION_ENABLED: bool = True
    ENGINE_OWNER: str = "0x0000000000000000000000000000000000000001"

    # App
    APP_NAME: str = "Batch Auction Settlement"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    @field_validator("BATCH_CAPACITY")
    @classmethod
    def _capacity_is_power_of_two(cls, v: int) -> int:
        if v < 2 or v & (v - 1) != 0:
            raise ValueError(f"BATCH_CAPACITY must be a power of two >= 2, got {v}")
        return v


settings = Settings()
