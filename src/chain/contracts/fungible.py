"""Fungible Ledger - capped token balances with atomic batch transfers

Balances are uint256 amounts keyed by identity. Invariants:
- sum(balances) == total_supply <= max_supply
- no balance is ever negative

Every balance change (mint, burn, transfer, batch transfer) flows through
``_update``, which is also where the pause switch is enforced.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...config import get_validated_config
from ...config_schema import FungibleLedgerConfig
from ..access import ownership_policy
from ..arithmetic import (
    UINT8_MAX,
    UINT256_MAX,
    checked_add,
    checked_mul,
    checked_sub,
    checked_sum,
    require_uint,
)
from ..errors import (
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
    ZeroAddress,
    ZeroInitialOwner,
)
from ..identity import NULL_ADDRESS, Address, to_address
from .base import GovernedContract

if TYPE_CHECKING:
    from ..environment import Chain


def validate_decimals(decimals: int) -> int:
    """Decimals are a uint8."""
    if not isinstance(decimals, int) or isinstance(decimals, bool) or not 0 <= decimals <= UINT8_MAX:
        raise InvalidDecimals(f"Decimals must be in [0, {UINT8_MAX}], got {decimals!r}")
    return decimals


class FungibleLedger(GovernedContract):
    """
    Fungible token with a per-instance supply cap and batch ceiling.

    Constructor arguments (ABI order): name, symbol, decimals,
    initial_supply (whole tokens), initial_owner. The whole initial supply,
    scaled by 10**decimals, is credited to the deploying identity.
    """

    CONSTRUCTOR_TYPES = ("string", "string", "uint8", "uint256", "address")

    config: FungibleLedgerConfig
    _name: str
    _symbol: str
    _decimals: int
    _balances: dict[Address, int]
    _allowances: dict[tuple[Address, Address], int]
    _total_supply: int

    @classmethod
    def default_config(cls) -> FungibleLedgerConfig:
        return get_validated_config().fungible

    def __init__(
        self,
        chain: "Chain",
        address: str,
        deployer: str,
        name: str,
        symbol: str,
        decimals: int,
        initial_supply: int,
        initial_owner: str,
        config: FungibleLedgerConfig | None = None,
    ) -> None:
        if not name:
            raise NameEmpty("Token name cannot be empty")
        if not symbol:
            raise SymbolEmpty("Token symbol cannot be empty")
        if to_address(initial_owner) == NULL_ADDRESS:
            raise ZeroInitialOwner("Initial owner cannot be the null identity")
        validate_decimals(decimals)
        require_uint(initial_supply, "initial_supply")
        minted = checked_mul(initial_supply, 10**decimals)

        self.config = config or self.default_config()
        if minted > self.config.effective_max_supply:
            raise MaxSupplyExceeded(
                f"Initial supply {minted} exceeds max supply {self.config.effective_max_supply}",
                requested=minted,
                max_supply=self.config.effective_max_supply,
            )

        super().__init__(
            chain,
            address,
            deployer,
            initial_owner,
            policy=ownership_policy(self.config.ownership_policy),
        )
        self._name = name
        self._symbol = symbol
        self._decimals = decimals
        self._balances = {}
        self._allowances = {}
        self._total_supply = 0

        self.register_methods([
            "name", "symbol", "decimals", "total_supply", "max_supply",
            "balance_of", "allowance",
        ], mutates=False)
        self.register_methods([
            "mint", "burn", "burn_from", "transfer", "approve",
            "transfer_from", "batch_transfer",
        ])

        if minted:
            self._update(NULL_ADDRESS, self.deployer, minted)

    # ===== VIEWS =====

    def name(self) -> str:
        """Token name."""
        return self._name

    def symbol(self) -> str:
        """Token symbol."""
        return self._symbol

    def decimals(self) -> int:
        """Number of decimals in one whole token."""
        return self._decimals

    def total_supply(self) -> int:
        """Sum of all balances, in base units."""
        return self._total_supply

    def max_supply(self) -> int:
        """Hard ceiling on total supply, in base units."""
        return self.config.effective_max_supply

    def balance_of(self, account: str) -> int:
        """Balance of an identity, in base units."""
        return self._balances.get(to_address(account), 0)

    def allowance(self, holder: str, spender: str) -> int:
        """Amount spender may still move out of holder's balance."""
        return self._allowances.get((to_address(holder), to_address(spender)), 0)

    # ===== OWNER OPERATIONS =====

    def mint(self, caller: str, to: str, amount: int) -> None:
        """Create amount new base units for to (owner only)."""
        self.access.only_owner(caller)
        require_uint(amount, "amount")
        recipient = to_address(to)
        if recipient == NULL_ADDRESS:
            raise MintToZeroAddress("Cannot mint to the null identity")
        cap = self.config.effective_max_supply
        if self._total_supply + amount > cap:
            raise MaxSupplyExceeded(
                f"Minting {amount} would exceed max supply {cap}",
                total_supply=self._total_supply,
                amount=amount,
                max_supply=cap,
            )
        self._update(NULL_ADDRESS, recipient, amount)
        self.emit("TokensMinted", to=recipient, amount=amount)

    # ===== HOLDER OPERATIONS =====

    def transfer(self, caller: str, to: str, amount: int) -> bool:
        """Move amount from the caller to to."""
        self._transfer(to_address(caller), to_address(to), require_uint(amount, "amount"))
        return True

    def approve(self, caller: str, spender: str, amount: int) -> bool:
        """Let spender move up to amount of the caller's balance."""
        holder = to_address(caller)
        target = to_address(spender)
        if holder == NULL_ADDRESS:
            raise ZeroAddress("Approver cannot be the null identity")
        if target == NULL_ADDRESS:
            raise InvalidSpender("Spender cannot be the null identity")
        self._allowances[(holder, target)] = require_uint(amount, "amount")
        self.emit("Approval", owner=holder, spender=target, value=amount)
        return True

    def transfer_from(self, caller: str, holder: str, to: str, amount: int) -> bool:
        """Move amount from holder to to, spending the caller's allowance."""
        require_uint(amount, "amount")
        source = to_address(holder)
        spender = to_address(caller)
        remaining = self._check_allowance(source, spender, amount)
        self._transfer(source, to_address(to), amount)
        self._store_allowance(source, spender, remaining)
        return True

    def burn(self, caller: str, amount: int) -> None:
        """Destroy amount of the caller's balance."""
        holder = to_address(caller)
        require_uint(amount, "amount")
        if holder == NULL_ADDRESS:
            raise ZeroAddress("Cannot burn from the null identity")
        self._update(holder, NULL_ADDRESS, amount)
        self.emit("TokensBurned", **{"from": holder, "amount": amount})

    def burn_from(self, caller: str, holder: str, amount: int) -> None:
        """Destroy amount of holder's balance, spending the caller's allowance."""
        require_uint(amount, "amount")
        source = to_address(holder)
        spender = to_address(caller)
        if source == NULL_ADDRESS:
            raise ZeroAddress("Cannot burn from the null identity")
        remaining = self._check_allowance(source, spender, amount)
        self._update(source, NULL_ADDRESS, amount)
        self._store_allowance(source, spender, remaining)
        self.emit("TokensBurned", **{"from": source, "amount": amount})

    def batch_transfer(self, caller: str, recipients: list[str], amounts: list[int]) -> bool:
        """Send amounts[i] to recipients[i] from the caller, all or nothing.

        The caller's balance must be strictly greater than the batch total
        unless allow_full_balance_batch is configured.
        """
        sender = to_address(caller)
        if len(recipients) != len(amounts):
            raise ArrayLengthMismatch(
                f"{len(recipients)} recipients but {len(amounts)} amounts",
                recipients=len(recipients),
                amounts=len(amounts),
            )
        if not recipients:
            raise EmptyArrays("batch_transfer needs at least one recipient")
        ceiling = self.config.batch_ceiling
        if len(recipients) >= ceiling:
            raise TooManyRecipients(
                f"{len(recipients)} recipients; batches must stay below {ceiling}",
                count=len(recipients),
                ceiling=ceiling,
            )

        for amount in amounts:
            require_uint(amount, "amount")
        total = checked_sum(list(amounts))

        balance = self.balance_of(sender)
        if self.config.allow_full_balance_batch:
            sufficient = balance >= total
        else:
            sufficient = balance > total
        if not sufficient:
            raise InsufficientBalance(
                f"Balance {balance} does not cover batch total {total}",
                balance=balance,
                required=total,
            )

        targets = [to_address(r) for r in recipients]
        for index, target in enumerate(targets):
            if target == NULL_ADDRESS:
                raise InvalidRecipient(
                    f"Recipient at index {index} is the null identity",
                    index=index,
                )

        for target, amount in zip(targets, amounts):
            self._update(sender, target, amount)

        self.emit(
            "BatchTransfer",
            sender=sender,
            totalAmount=total,
            recipientCount=len(targets),
        )
        return True

    # ===== INTERNALS =====

    def _transfer(self, sender: Address, recipient: Address, amount: int) -> None:
        if sender == NULL_ADDRESS:
            raise ZeroAddress("Sender cannot be the null identity")
        if recipient == NULL_ADDRESS:
            raise InvalidRecipient("Recipient cannot be the null identity")
        self._update(sender, recipient, amount)

    def _check_allowance(self, holder: Address, spender: Address, amount: int) -> int:
        """Return the allowance left after spending amount."""
        current = self._allowances.get((holder, spender), 0)
        if current == UINT256_MAX:
            return current
        if current < amount:
            raise InsufficientAllowance(
                f"Allowance {current} is less than {amount}",
                allowance=current,
                required=amount,
            )
        return current - amount

    def _store_allowance(self, holder: Address, spender: Address, value: int) -> None:
        if value == 0:
            self._allowances.pop((holder, spender), None)
        else:
            self._allowances[(holder, spender)] = value

    def _update(self, sender: Address, recipient: Address, amount: int) -> None:
        """Single chokepoint for every balance change.

        NULL sender mints, NULL recipient burns. Checks pause and balance
        before touching any state.
        """
        self.pause_switch.require_active()

        if sender == NULL_ADDRESS:
            self._total_supply = checked_add(self._total_supply, amount)
        else:
            balance = self._balances.get(sender, 0)
            if balance < amount:
                raise InsufficientBalance(
                    f"Balance {balance} is less than {amount}",
                    account=sender,
                    balance=balance,
                    required=amount,
                )
            self._set_balance(sender, balance - amount)

        if recipient == NULL_ADDRESS:
            self._total_supply = checked_sub(self._total_supply, amount)
        else:
            self._set_balance(recipient, checked_add(self._balances.get(recipient, 0), amount))

        self.emit("Transfer", **{"from": sender, "to": recipient, "value": amount})

    def _set_balance(self, account: Address, value: int) -> None:
        if value == 0:
            self._balances.pop(account, None)
        else:
            self._balances[account] = value
