"""End-to-end flows across the ledger, registry and factory.

Each class pins down one property that must hold for any sequence of calls,
exercised over a deterministic pseudo-random or enumerated input set.
"""

from __future__ import annotations

import random

import pytest

from src.chain import Address, Chain, account
from src.chain.contracts import DeploymentFactory, FungibleLedger, NonFungibleRegistry
from src.chain.errors import (
    ContractError,
    ExceedsMaxSupply,
    FeeTooHigh,
    InsufficientBalance,
    InvalidRecipient,
    OperationPaused,
    Unauthorized,
)
from src.chain.identity import NULL_ADDRESS
from src.config_schema import FactoryConfig, FungibleLedgerConfig, RegistryConfig

HOLDERS = [account(f"holder-{i}") for i in range(5)]


@pytest.mark.scenario
class TestSupplyInvariant:
    """sum(balances) == total_supply <= max_supply after any sequence."""

    def test_random_sequence(self, chain: Chain, owner: Address) -> None:
        token = chain.deploy(
            owner, FungibleLedger, "Capped", "CAP", 0, 0, owner,
            config=FungibleLedgerConfig(max_supply=10_000),
        )
        rng = random.Random(1234)
        participants = [owner, *HOLDERS]

        for _ in range(300):
            action = rng.choice(["mint", "burn", "transfer", "batch"])
            sender = rng.choice(participants)
            amount = rng.randint(0, 3000)
            try:
                if action == "mint":
                    chain.call(owner, token.address, "mint", rng.choice(participants), amount)
                elif action == "burn":
                    chain.call(sender, token.address, "burn", amount)
                elif action == "transfer":
                    chain.call(sender, token.address, "transfer", rng.choice(participants), amount)
                else:
                    recipients = rng.sample(participants, 2)
                    chain.call(sender, token.address, "batch_transfer", recipients, [amount, amount // 2])
            except ContractError:
                pass

            balances = sum(token.balance_of(p) for p in participants)
            assert balances == token.total_supply()
            assert token.total_supply() <= token.max_supply()


@pytest.mark.scenario
class TestAddressRoundTrip:
    """compute_address equals the address deploy_token actually uses."""

    @pytest.mark.parametrize("salt, name, symbol, decimals, supply", [
        (0, "Alpha", "ALP", 18, 1000),
        (1, "Alpha", "ALP", 18, 1000),
        ("0xcafebabe", "Beta", "BET", 6, 0),
        (2**256 - 1, "Gamma", "GAM", 0, 123456),
        (b"\x42" * 32, "Delta", "DEL", 8, 1),
    ])
    def test_round_trip(
        self,
        chain: Chain,
        factory: DeploymentFactory,
        owner: Address,
        salt: object,
        name: str,
        symbol: str,
        decimals: int,
        supply: int,
    ) -> None:
        predicted = factory.compute_address(salt, name, symbol, decimals, supply)  # type: ignore[arg-type]
        assert not chain.has_code(predicted)
        deployed = chain.call(owner, factory.address, "deploy_token", salt, name, symbol, decimals, supply)
        assert deployed == predicted
        token = chain.get_contract(deployed)
        assert isinstance(token, FungibleLedger)
        assert token.name() == name
        assert token.balance_of(owner) == supply * 10**decimals


@pytest.mark.scenario
class TestBatchAtomicity:
    """A bad recipient anywhere in a batch leaves every balance unchanged."""

    @pytest.mark.parametrize("position", [0, 1, 2, 3])
    def test_failing_recipient_at_any_position(self, chain: Chain, ledger: FungibleLedger, owner: Address, position: int) -> None:
        recipients: list[str] = list(HOLDERS[:4])
        recipients[position] = NULL_ADDRESS
        before = {p: ledger.balance_of(p) for p in [owner, *HOLDERS]}
        event_count = len(chain.events())

        with pytest.raises(InvalidRecipient):
            chain.call(owner, ledger.address, "batch_transfer", recipients, [5, 6, 7, 8])

        assert {p: ledger.balance_of(p) for p in before} == before
        assert len(chain.events()) == event_count

    def test_exact_balance_batch_under_each_policy(self, chain: Chain, owner: Address) -> None:
        """balance 100 and a [40, 60] batch: strict rejects, relaxed accepts."""
        a, b = HOLDERS[0], HOLDERS[1]
        strict = chain.deploy(owner, FungibleLedger, "S", "S", 0, 100, owner, config=FungibleLedgerConfig())
        with pytest.raises(InsufficientBalance):
            chain.call(owner, strict.address, "batch_transfer", [a, b], [40, 60])
        assert strict.balance_of(owner) == 100

        relaxed = chain.deploy(
            owner, FungibleLedger, "R", "R", 0, 100, owner,
            config=FungibleLedgerConfig(allow_full_balance_batch=True),
        )
        chain.call(owner, relaxed.address, "batch_transfer", [a, b], [40, 60])
        assert (relaxed.balance_of(a), relaxed.balance_of(b), relaxed.balance_of(owner)) == (40, 60, 0)


@pytest.mark.scenario
class TestRegistryIssuance:
    """Batch minting hands out consecutive, never-reused IDs."""

    def test_capped_batches(self, chain: Chain, owner: Address, alice: Address) -> None:
        registry = chain.deploy(owner, NonFungibleRegistry, "Five", "FIV", "", 5, owner, config=RegistryConfig())
        assert chain.call(owner, registry.address, "batch_mint", alice, 3) == [0, 1, 2]
        with pytest.raises(ExceedsMaxSupply):
            chain.call(owner, registry.address, "batch_mint", alice, 3)
        assert registry.total_minted() == 3
        assert registry.next_id() == 3

    def test_ids_are_consecutive_across_mints_and_burns(self, chain: Chain, owner: Address, alice: Address) -> None:
        registry = chain.deploy(owner, NonFungibleRegistry, "Open", "OPN", "", 0, owner, config=RegistryConfig())
        rng = random.Random(99)
        issued: list[int] = []
        for _ in range(20):
            before = registry.next_id()
            count = rng.randint(1, 10)
            ids = chain.call(owner, registry.address, "batch_mint", alice, count)
            assert ids == list(range(before, before + count))
            assert registry.next_id() == before + count
            issued.extend(ids)
            chain.call(alice, registry.address, "burn", rng.choice(ids))
        assert len(set(issued)) == len(issued)


@pytest.mark.scenario
class TestRenounceIsTerminal:
    """No caller can use an owner-only operation after renouncing."""

    CALLERS = [account("owner"), account("alice"), NULL_ADDRESS, *HOLDERS]

    def test_ledger(self, chain: Chain, ledger: FungibleLedger, owner: Address) -> None:
        chain.call(owner, ledger.address, "renounce_ownership")
        for caller in self.CALLERS:
            for method, args in [
                ("mint", (HOLDERS[0], 1)),
                ("pause", ()),
                ("unpause", ()),
                ("transfer_ownership", (HOLDERS[0],)),
                ("renounce_ownership", ()),
            ]:
                with pytest.raises(Unauthorized):
                    chain.call(caller, ledger.address, method, *args)

    def test_registry(self, chain: Chain, registry: NonFungibleRegistry, owner: Address) -> None:
        chain.call(owner, registry.address, "renounce_ownership")
        for caller in self.CALLERS:
            for method, args in [
                ("mint", (HOLDERS[0],)),
                ("batch_mint", (HOLDERS[0], 1)),
                ("set_base_uri", ("x",)),
                ("set_max_supply", (0,)),
                ("set_royalty_info", (HOLDERS[0], 1)),
            ]:
                with pytest.raises(Unauthorized):
                    chain.call(caller, registry.address, method, *args)


@pytest.mark.scenario
class TestRoyaltyFormula:
    """amount == sale_price * fee // 10000 for every fee <= 10000."""

    @pytest.mark.parametrize("fee", [0, 1, 250, 999, 5000, 10000])
    def test_formula(self, chain: Chain, registry: NonFungibleRegistry, owner: Address, alice: Address, fee: int) -> None:
        chain.call(owner, registry.address, "set_royalty_info", alice, fee)
        for price in [0, 1, 9999, 10**18, 2**200]:
            assert registry.royalty_info(0, price) == (alice, price * fee // 10000)

    def test_over_denominator_rejected(self, chain: Chain, registry: NonFungibleRegistry, owner: Address, alice: Address) -> None:
        with pytest.raises(FeeTooHigh):
            chain.call(owner, registry.address, "set_royalty_info", alice, 10001)


@pytest.mark.scenario
class TestPauseFlow:
    """Pausing blocks minting until the owner unpauses."""

    def test_pause_mint_unpause(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address) -> None:
        chain.call(owner, ledger.address, "pause")
        with pytest.raises(OperationPaused):
            chain.call(owner, ledger.address, "mint", alice, 1)
        chain.call(owner, ledger.address, "unpause")
        chain.call(owner, ledger.address, "mint", alice, 1)
        assert ledger.balance_of(alice) == 1


@pytest.mark.scenario
class TestFactoryLifecycle:
    """Deploy through an open factory, hand over, operate the new ledger."""

    def test_full_flow(self, chain: Chain, owner: Address, alice: Address, bob: Address) -> None:
        factory = chain.deploy(
            owner, DeploymentFactory, owner,
            config=FactoryConfig(restricted=False, ledger=FungibleLedgerConfig(max_supply=2_000, batch_ceiling=200)),
        )
        address = chain.call(alice, factory.address, "deploy_token", "0x01", "Alice Coin", "ALC", 0, 1_000)
        chain.call(alice, address, "accept_ownership")

        chain.call(alice, address, "mint", bob, 1_000)
        with pytest.raises(ContractError):
            chain.call(alice, address, "mint", bob, 1)
        chain.call(bob, address, "batch_transfer", [alice] * 199, [1] * 199)
        assert chain.call(bob, address, "balance_of", bob) == 801
        assert chain.call(bob, address, "total_supply") == 2_000
