"""Runtime configuration for the routing mesh.

Every field can be overridden with a ``PAYMESH_``-prefixed environment
variable or a ``.env`` file in the working directory.
"""

from pathlib import Path
from typing import ClassVar, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .registry import DEFAULT_REGISTRY_PATH


class MeshConfig(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="PAYMESH_",
        env_file=".env",
        extra="ignore",
    )

    registry_path: Path = Field(
        default=DEFAULT_REGISTRY_PATH,
        description="JSON catalog of merchants and processors loaded at startup",
    )
    allow_degraded_fallback: bool = Field(
        default=True,
        description="Try degraded processors after every online one has declined",
    )
    settlement_delay_seconds: int = Field(default=300, ge=0)
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for the attempt simulator; unset means nondeterministic draws",
    )
    seed_demo_data: bool = Field(default=True, description="Route the demo intents on startup")
    transactions_default_limit: int = Field(default=25, ge=1)
    transactions_max_limit: int = Field(default=100, ge=1)
    log_level: str = "INFO"
