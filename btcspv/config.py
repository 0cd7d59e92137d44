"""
btcspv Configuration
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, asdict
from typing import List, Optional

from btcspv.constants import (
    NETWORK_POW_LIMIT_BITS,
    DEFAULT_NETWORK,
    DEFAULT_BRIDGE_ADDRESS,
    DEFAULT_MIN_CHAIN_LENGTH,
    DEFAULT_FIXTURES_DIR,
    OUTPUT_POLICY_FIRST,
    OUTPUT_POLICY_UNIQUE,
    DEFAULT_PROVER_URL,
    DEFAULT_POLL_INTERVAL_SEC,
    DEFAULT_PROVING_TIMEOUT_SEC,
    DEFAULT_MAX_RETRIES,
    DEFAULT_BACKOFF_BASE_SEC,
)
from btcspv.errors import ConfigError

logger = logging.getLogger(__name__)

BACKEND_MOCK = "mock"
BACKEND_NETWORK = "network"


@dataclass
class RemoteConfig:
    """Remote proving network configuration."""
    url: str = DEFAULT_PROVER_URL
    api_key: Optional[str] = None
    poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC
    timeout_sec: float = DEFAULT_PROVING_TIMEOUT_SEC
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base_sec: float = DEFAULT_BACKOFF_BASE_SEC


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 100
    backup_count: int = 5


@dataclass
class ProverConfig:
    """
    Complete prover configuration.

    Passed explicitly to every component that needs it.
    """
    network: str = DEFAULT_NETWORK
    bridge_address: str = DEFAULT_BRIDGE_ADDRESS
    min_chain_length: int = DEFAULT_MIN_CHAIN_LENGTH
    output_match_policy: str = OUTPUT_POLICY_FIRST
    fixtures_dir: str = DEFAULT_FIXTURES_DIR
    backend: str = BACKEND_MOCK

    # Sub-configurations
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @property
    def pow_limit(self) -> int:
        """Compact proof-of-work limit of the configured network."""
        return NETWORK_POW_LIMIT_BITS[self.network]

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.network not in NETWORK_POW_LIMIT_BITS:
            errors.append(f"Unknown network: {self.network}")

        if not self.bridge_address:
            errors.append("bridge_address cannot be empty")

        if self.min_chain_length < 1:
            errors.append("min_chain_length must be at least 1")

        if self.output_match_policy not in (OUTPUT_POLICY_FIRST, OUTPUT_POLICY_UNIQUE):
            errors.append(f"Invalid output_match_policy: {self.output_match_policy}")

        if self.backend not in (BACKEND_MOCK, BACKEND_NETWORK):
            errors.append(f"Invalid backend: {self.backend}")

        if self.backend == BACKEND_NETWORK:
            if not self.remote.url.startswith(("http://", "https://")):
                errors.append(f"Invalid remote url: {self.remote.url}")
            if self.remote.poll_interval_sec <= 0:
                errors.append("poll_interval_sec must be positive")
            if self.remote.timeout_sec <= 0:
                errors.append("timeout_sec must be positive")
            if self.remote.max_retries < 0:
                errors.append("max_retries cannot be negative")
            if self.remote.backoff_base_sec < 0:
                errors.append("backoff_base_sec cannot be negative")

        return errors

    def ensure_valid(self) -> None:
        """Raise ConfigError if validate() reports problems."""
        errors = self.validate()
        if errors:
            raise ConfigError(errors)

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> "ProverConfig":
        """Load configuration from file."""
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError([f"{path}: {e}"]) from e
        if not isinstance(data, dict):
            raise ConfigError([f"{path}: expected a JSON object"])

        config = cls(
            network=data.get("network", DEFAULT_NETWORK),
            bridge_address=data.get("bridge_address", DEFAULT_BRIDGE_ADDRESS),
            min_chain_length=data.get("min_chain_length", DEFAULT_MIN_CHAIN_LENGTH),
            output_match_policy=data.get("output_match_policy", OUTPUT_POLICY_FIRST),
            fixtures_dir=data.get("fixtures_dir", DEFAULT_FIXTURES_DIR),
            backend=data.get("backend", BACKEND_MOCK),
        )

        try:
            if "remote" in data:
                config.remote = RemoteConfig(**data["remote"])
            if "log" in data:
                config.log = LogConfig(**data["log"])
        except TypeError as e:
            raise ConfigError([f"{path}: {e}"]) from e

        logger.info(f"Configuration loaded from {path}")
        return config

    @classmethod
    def default_regtest(cls) -> "ProverConfig":
        """Local regtest configuration (short chains, trivial work)."""
        from btcspv.core.script import address_to_script, script_to_address

        bridge_script = address_to_script(DEFAULT_BRIDGE_ADDRESS, DEFAULT_NETWORK)
        return cls(
            network="bitcoin/regtest",
            bridge_address=script_to_address(bridge_script, "bitcoin/regtest"),
            min_chain_length=1,
        )

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "network": self.network,
            "bridge_address": self.bridge_address,
            "min_chain_length": self.min_chain_length,
            "output_match_policy": self.output_match_policy,
            "fixtures_dir": self.fixtures_dir,
            "backend": self.backend,
            "remote": asdict(self.remote),
            "log": asdict(self.log),
        }


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )
