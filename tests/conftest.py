"""Pytest fixtures for token_forge tests.

Common fixtures: a fresh Chain per test, labelled accounts, and one deployed
instance of each contract.
"""

from __future__ import annotations

# Load environment variables from .env before any tests run
from dotenv import load_dotenv

load_dotenv()

from pathlib import Path

import pytest

from src.chain import Address, Chain, EventLogger, account
from src.chain.contracts import DeploymentFactory, FungibleLedger, NonFungibleRegistry
from src.config import load_config
from src.config_schema import FactoryConfig, FungibleLedgerConfig, RegistryConfig


REPO_CONFIG = Path(__file__).parent.parent / "config" / "config.yaml"

ONE_TOKEN = 10**18


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "scenario: end-to-end flows across several contracts",
    )


@pytest.fixture(autouse=True)
def _repo_config() -> None:
    """Every test starts from the repository config."""
    load_config(str(REPO_CONFIG))


@pytest.fixture
def chain() -> Chain:
    """A fresh host with no contracts."""
    return Chain()


@pytest.fixture
def logged_chain(tmp_path: Path) -> Chain:
    """A fresh host writing committed events to a temp JSONL file."""
    return Chain(event_logger=EventLogger(output_file=str(tmp_path / "events.jsonl")))


@pytest.fixture
def owner() -> Address:
    return account("owner")


@pytest.fixture
def alice() -> Address:
    return account("alice")


@pytest.fixture
def bob() -> Address:
    return account("bob")


@pytest.fixture
def carol() -> Address:
    return account("carol")


@pytest.fixture
def ledger_config() -> FungibleLedgerConfig:
    return FungibleLedgerConfig()


@pytest.fixture
def ledger(chain: Chain, owner: Address, ledger_config: FungibleLedgerConfig) -> FungibleLedger:
    """Uncapped ledger; owner deployed it and holds 1000 whole tokens."""
    return chain.deploy(owner, FungibleLedger, "Forge", "FRG", 18, 1000, owner, config=ledger_config)


@pytest.fixture
def registry(chain: Chain, owner: Address) -> NonFungibleRegistry:
    """Collection capped at 10 IDs, royalties to owner at 2.5%."""
    return chain.deploy(
        owner,
        NonFungibleRegistry,
        "Relics",
        "RLC",
        "ipfs://relics/",
        10,
        owner,
        config=RegistryConfig(),
    )


@pytest.fixture
def factory_config() -> FactoryConfig:
    return FactoryConfig(ledger=FungibleLedgerConfig(max_supply=10**9 * ONE_TOKEN, batch_ceiling=200))


@pytest.fixture
def factory(chain: Chain, owner: Address, factory_config: FactoryConfig) -> DeploymentFactory:
    return chain.deploy(owner, DeploymentFactory, owner, config=factory_config)
