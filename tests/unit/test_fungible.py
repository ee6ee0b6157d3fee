"""Tests for FungibleLedger."""

from __future__ import annotations

import pytest

from src.chain import Address, Chain, account
from src.chain.arithmetic import UINT256_MAX
from src.chain.contracts import FungibleLedger
from src.chain.errors import (
    ArithmeticOverflow,
    ArrayLengthMismatch,
    EmptyArrays,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidDecimals,
    InvalidRecipient,
    InvalidSpender,
    MaxSupplyExceeded,
    MintToZeroAddress,
    NameEmpty,
    SymbolEmpty,
    TooManyRecipients,
    Unauthorized,
    ZeroInitialOwner,
)
from src.chain.identity import NULL_ADDRESS
from src.config_schema import FungibleLedgerConfig

ONE_TOKEN = 10**18


def _deploy(chain: Chain, owner: Address, supply: int = 0, decimals: int = 0, **config: object) -> FungibleLedger:
    return chain.deploy(
        owner,
        FungibleLedger,
        "Forge",
        "FRG",
        decimals,
        supply,
        owner,
        config=FungibleLedgerConfig(**config),  # type: ignore[arg-type]
    )


class TestConstruction:
    """Constructor validation and initial mint."""

    def test_metadata(self, ledger: FungibleLedger) -> None:
        assert ledger.name() == "Forge"
        assert ledger.symbol() == "FRG"
        assert ledger.decimals() == 18

    def test_initial_supply_scaled_and_credited_to_deployer(self, ledger: FungibleLedger, owner: Address) -> None:
        assert ledger.total_supply() == 1000 * ONE_TOKEN
        assert ledger.balance_of(owner) == 1000 * ONE_TOKEN

    def test_initial_mint_event(self, chain: Chain, ledger: FungibleLedger, owner: Address) -> None:
        mint = chain.events("Transfer", emitter=ledger.address)[0]
        assert mint["from"] == NULL_ADDRESS
        assert mint["to"] == owner
        assert mint["value"] == 1000 * ONE_TOKEN

    def test_zero_supply_emits_no_transfer(self, chain: Chain, owner: Address) -> None:
        token = _deploy(chain, owner)
        assert token.total_supply() == 0
        assert chain.events("Transfer", emitter=token.address) == []

    @pytest.mark.parametrize("name, symbol, error", [
        ("", "FRG", NameEmpty),
        ("Forge", "", SymbolEmpty),
    ])
    def test_empty_metadata_rejected(self, chain: Chain, owner: Address, name: str, symbol: str, error: type) -> None:
        with pytest.raises(error):
            chain.deploy(owner, FungibleLedger, name, symbol, 18, 0, owner, config=FungibleLedgerConfig())

    def test_null_initial_owner_rejected(self, chain: Chain, owner: Address) -> None:
        with pytest.raises(ZeroInitialOwner):
            chain.deploy(owner, FungibleLedger, "Forge", "FRG", 18, 0, NULL_ADDRESS, config=FungibleLedgerConfig())

    def test_bad_decimals_rejected(self, chain: Chain, owner: Address) -> None:
        with pytest.raises(InvalidDecimals):
            FungibleLedger(chain, account("somewhere"), owner, "Forge", "FRG", 256, 0, owner)

    def test_initial_supply_over_cap_rejected(self, chain: Chain, owner: Address) -> None:
        with pytest.raises(MaxSupplyExceeded):
            _deploy(chain, owner, supply=11, max_supply=10)

    def test_failed_construction_leaves_nothing(self, chain: Chain, owner: Address) -> None:
        with pytest.raises(MaxSupplyExceeded):
            _deploy(chain, owner, supply=11, max_supply=10)
        assert chain.events() == []
        assert chain.nonce(owner) == 0


class TestMint:
    """Owner-only minting under the cap."""

    def test_mint(self, chain: Chain, owner: Address, alice: Address) -> None:
        token = _deploy(chain, owner, max_supply=100)
        chain.call(owner, token.address, "mint", alice, 40)
        assert token.balance_of(alice) == 40
        assert token.total_supply() == 40
        minted = chain.events("TokensMinted")[-1]
        assert minted["to"] == alice
        assert minted["amount"] == 40

    def test_mint_up_to_cap_exactly(self, chain: Chain, owner: Address, alice: Address) -> None:
        token = _deploy(chain, owner, max_supply=100)
        chain.call(owner, token.address, "mint", alice, 100)
        assert token.total_supply() == token.max_supply() == 100

    def test_mint_over_cap(self, chain: Chain, owner: Address, alice: Address) -> None:
        token = _deploy(chain, owner, max_supply=100)
        chain.call(owner, token.address, "mint", alice, 60)
        with pytest.raises(MaxSupplyExceeded):
            chain.call(owner, token.address, "mint", alice, 41)
        assert token.total_supply() == 60

    def test_mint_to_null(self, chain: Chain, ledger: FungibleLedger, owner: Address) -> None:
        with pytest.raises(MintToZeroAddress):
            chain.call(owner, ledger.address, "mint", NULL_ADDRESS, 1)

    def test_non_owner(self, chain: Chain, ledger: FungibleLedger, alice: Address) -> None:
        with pytest.raises(Unauthorized):
            chain.call(alice, ledger.address, "mint", alice, 1)

    def test_uncapped_ledger_reports_uint256_max(self, ledger: FungibleLedger) -> None:
        assert ledger.max_supply() == UINT256_MAX

    def test_overflow_is_an_error(self, chain: Chain, owner: Address, alice: Address) -> None:
        token = _deploy(chain, owner)
        chain.call(owner, token.address, "mint", alice, UINT256_MAX)
        with pytest.raises((MaxSupplyExceeded, ArithmeticOverflow)):
            chain.call(owner, token.address, "mint", alice, 1)


class TestTransfer:
    """Direct transfers."""

    def test_transfer(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address) -> None:
        assert chain.call(owner, ledger.address, "transfer", alice, 5) is True
        assert ledger.balance_of(alice) == 5
        assert ledger.balance_of(owner) == 1000 * ONE_TOKEN - 5
        event = chain.events("Transfer")[-1]
        assert (event["from"], event["to"], event["value"]) == (owner, alice, 5)

    def test_insufficient_balance(self, chain: Chain, ledger: FungibleLedger, alice: Address, bob: Address) -> None:
        with pytest.raises(InsufficientBalance):
            chain.call(alice, ledger.address, "transfer", bob, 1)

    def test_to_null(self, chain: Chain, ledger: FungibleLedger, owner: Address) -> None:
        with pytest.raises(InvalidRecipient):
            chain.call(owner, ledger.address, "transfer", NULL_ADDRESS, 1)

    def test_negative_amount(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address) -> None:
        with pytest.raises(ArithmeticOverflow):
            chain.call(owner, ledger.address, "transfer", alice, -1)

    def test_self_transfer_keeps_balance(self, chain: Chain, ledger: FungibleLedger, owner: Address) -> None:
        chain.call(owner, ledger.address, "transfer", owner, 10)
        assert ledger.balance_of(owner) == 1000 * ONE_TOKEN


class TestAllowances:
    """approve / transfer_from / burn_from."""

    def test_approve(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address) -> None:
        chain.call(owner, ledger.address, "approve", alice, 30)
        assert chain.call(alice, ledger.address, "allowance", owner, alice) == 30
        event = chain.events("Approval")[-1]
        assert (event["owner"], event["spender"], event["value"]) == (owner, alice, 30)

    def test_approve_null_spender(self, chain: Chain, ledger: FungibleLedger, owner: Address) -> None:
        with pytest.raises(InvalidSpender):
            chain.call(owner, ledger.address, "approve", NULL_ADDRESS, 1)

    def test_transfer_from_spends_allowance(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address, bob: Address) -> None:
        chain.call(owner, ledger.address, "approve", alice, 30)
        chain.call(alice, ledger.address, "transfer_from", owner, bob, 20)
        assert ledger.balance_of(bob) == 20
        assert ledger.allowance(owner, alice) == 10

    def test_transfer_from_over_allowance(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address, bob: Address) -> None:
        chain.call(owner, ledger.address, "approve", alice, 30)
        with pytest.raises(InsufficientAllowance):
            chain.call(alice, ledger.address, "transfer_from", owner, bob, 31)
        assert ledger.allowance(owner, alice) == 30

    def test_infinite_allowance_is_not_spent(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address, bob: Address) -> None:
        chain.call(owner, ledger.address, "approve", alice, UINT256_MAX)
        chain.call(alice, ledger.address, "transfer_from", owner, bob, 20)
        assert ledger.allowance(owner, alice) == UINT256_MAX

    def test_burn_from(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address) -> None:
        chain.call(owner, ledger.address, "approve", alice, 30)
        chain.call(alice, ledger.address, "burn_from", owner, 30)
        assert ledger.total_supply() == 1000 * ONE_TOKEN - 30
        assert ledger.allowance(owner, alice) == 0
        burned = chain.events("TokensBurned")[-1]
        assert burned["from"] == owner
        assert burned["amount"] == 30


class TestBurn:
    """Holder burns."""

    def test_burn(self, chain: Chain, ledger: FungibleLedger, owner: Address) -> None:
        chain.call(owner, ledger.address, "burn", ONE_TOKEN)
        assert ledger.total_supply() == 999 * ONE_TOKEN
        event = chain.events("Transfer")[-1]
        assert event["to"] == NULL_ADDRESS

    def test_burn_more_than_balance(self, chain: Chain, ledger: FungibleLedger, alice: Address) -> None:
        with pytest.raises(InsufficientBalance):
            chain.call(alice, ledger.address, "burn", 1)

    def test_burn_frees_cap_room(self, chain: Chain, owner: Address) -> None:
        token = _deploy(chain, owner, supply=10, max_supply=10)
        chain.call(owner, token.address, "burn", 4)
        chain.call(owner, token.address, "mint", owner, 4)
        assert token.total_supply() == 10


class TestBatchTransfer:
    """All-or-nothing batch transfers."""

    def test_batch(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address, bob: Address) -> None:
        chain.call(owner, ledger.address, "batch_transfer", [alice, bob], [10, 20])
        assert ledger.balance_of(alice) == 10
        assert ledger.balance_of(bob) == 20
        batch = chain.events("BatchTransfer")[-1]
        assert batch["sender"] == owner
        assert batch["totalAmount"] == 30
        assert batch["recipientCount"] == 2

    def test_one_transfer_event_per_pair(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address, bob: Address) -> None:
        before = len(chain.events("Transfer"))
        chain.call(owner, ledger.address, "batch_transfer", [alice, bob, alice], [1, 2, 3])
        assert len(chain.events("Transfer")) == before + 3
        assert ledger.balance_of(alice) == 4

    def test_length_mismatch(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address) -> None:
        with pytest.raises(ArrayLengthMismatch):
            chain.call(owner, ledger.address, "batch_transfer", [alice], [1, 2])

    def test_empty(self, chain: Chain, ledger: FungibleLedger, owner: Address) -> None:
        with pytest.raises(EmptyArrays):
            chain.call(owner, ledger.address, "batch_transfer", [], [])

    def test_ceiling_is_exclusive(self, chain: Chain, owner: Address, alice: Address) -> None:
        token = _deploy(chain, owner, supply=1000, batch_ceiling=3)
        chain.call(owner, token.address, "batch_transfer", [alice] * 2, [1, 1])
        with pytest.raises(TooManyRecipients):
            chain.call(owner, token.address, "batch_transfer", [alice] * 3, [1, 1, 1])

    def test_strict_balance_rule(self, chain: Chain, owner: Address, alice: Address, bob: Address) -> None:
        """Spending the exact balance in a batch is rejected by default."""
        token = _deploy(chain, owner, supply=100)
        with pytest.raises(InsufficientBalance):
            chain.call(owner, token.address, "batch_transfer", [alice, bob], [40, 60])
        assert token.balance_of(owner) == 100

    def test_full_balance_allowed_when_configured(self, chain: Chain, owner: Address, alice: Address, bob: Address) -> None:
        token = _deploy(chain, owner, supply=100, allow_full_balance_batch=True)
        chain.call(owner, token.address, "batch_transfer", [alice, bob], [40, 60])
        assert token.balance_of(owner) == 0

    def test_null_recipient_rolls_back_everything(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address) -> None:
        events_before = len(chain.events())
        with pytest.raises(InvalidRecipient) as exc_info:
            chain.call(owner, ledger.address, "batch_transfer", [alice, NULL_ADDRESS], [1, 1])
        assert exc_info.value.details["index"] == 1
        assert ledger.balance_of(alice) == 0
        assert len(chain.events()) == events_before

    def test_sum_overflow(self, chain: Chain, ledger: FungibleLedger, owner: Address, alice: Address) -> None:
        with pytest.raises(ArithmeticOverflow):
            chain.call(owner, ledger.address, "batch_transfer", [alice, alice], [UINT256_MAX, 1])
