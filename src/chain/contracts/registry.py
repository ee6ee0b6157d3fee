"""Non-Fungible Registry - sequentially numbered unique assets

IDs are issued from ``next_id``, which starts at 0 and only ever grows: a
burned ID is never reissued. A non-zero ``max_supply`` caps ``next_id``.
A single global royalty policy (receiver, fee in basis points) applies to
every token.

Every ownership change (mint, transfer, burn) flows through ``_update``,
which is where the pause switch is enforced.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...config import get_validated_config
from ...config_schema import RegistryConfig
from ..access import ownership_policy
from ..arithmetic import UINT256_MAX, checked_mul, require_uint
from ..errors import (
    ExceedsMaxSupply,
    FeeTooHigh,
    IncorrectOwner,
    InsufficientApproval,
    InvalidCount,
    InvalidMaxSupply,
    InvalidOperator,
    InvalidReceiver,
    InvalidRecipient,
    MaxSupplyReached,
    MintToZeroAddress,
    NameEmpty,
    NonexistentToken,
    SymbolEmpty,
    ZeroInitialOwner,
)
from ..identity import NULL_ADDRESS, Address, to_address
from .base import GovernedContract

if TYPE_CHECKING:
    from ..environment import Chain

FEE_DENOMINATOR: int = 10000


class NonFungibleRegistry(GovernedContract):
    """
    Sequential-ID collection with a supply cap and royalty computation.

    Constructor arguments (ABI order): name, symbol, base_uri, max_supply
    (0 = unlimited), initial_owner. Royalties go to the deploying identity
    at the configured default fee until changed.
    """

    CONSTRUCTOR_TYPES = ("string", "string", "string", "uint256", "address")

    config: RegistryConfig
    _name: str
    _symbol: str
    _base_uri: str
    _max_supply: int
    _next_id: int
    _burned: int
    _owners: dict[int, Address]
    _balances: dict[Address, int]
    _token_uris: dict[int, str]
    _token_approvals: dict[int, Address]
    _operator_approvals: set[tuple[Address, Address]]
    _royalty_receiver: Address
    _royalty_fee: int

    @classmethod
    def default_config(cls) -> RegistryConfig:
        return get_validated_config().registry

    def __init__(
        self,
        chain: "Chain",
        address: str,
        deployer: str,
        name: str,
        symbol: str,
        base_uri: str,
        max_supply: int,
        initial_owner: str,
        config: RegistryConfig | None = None,
    ) -> None:
        if not name:
            raise NameEmpty("Collection name cannot be empty")
        if not symbol:
            raise SymbolEmpty("Collection symbol cannot be empty")
        if to_address(initial_owner) == NULL_ADDRESS:
            raise ZeroInitialOwner("Initial owner cannot be the null identity")
        require_uint(max_supply, "max_supply")

        self.config = config or self.default_config()
        super().__init__(
            chain,
            address,
            deployer,
            initial_owner,
            policy=ownership_policy(self.config.ownership_policy),
        )
        self._name = name
        self._symbol = symbol
        self._base_uri = base_uri
        self._max_supply = max_supply
        self._next_id = 0
        self._burned = 0
        self._owners = {}
        self._balances = {}
        self._token_uris = {}
        self._token_approvals = {}
        self._operator_approvals = set()
        self._royalty_receiver = self.deployer
        self._royalty_fee = self.config.royalty_fee_bps

        self.register_methods([
            "name", "symbol", "base_uri", "max_supply", "next_id",
            "total_minted", "total_supply", "owner_of", "balance_of",
            "token_uri", "get_approved", "is_approved_for_all",
            "royalty_info",
        ], mutates=False)
        self.register_methods([
            "mint", "mint_with_uri", "batch_mint", "batch_mint_with_uris",
            "set_base_uri", "set_token_uri", "set_max_supply",
            "set_royalty_info", "approve", "set_approval_for_all",
            "transfer_from", "burn",
        ])

    # ===== VIEWS =====

    def name(self) -> str:
        """Collection name."""
        return self._name

    def symbol(self) -> str:
        """Collection symbol."""
        return self._symbol

    def base_uri(self) -> str:
        """Prefix for token metadata pointers."""
        return self._base_uri

    def max_supply(self) -> int:
        """Cap on issued IDs (0 = unlimited)."""
        return self._max_supply

    def next_id(self) -> int:
        """ID the next mint will receive."""
        return self._next_id

    def total_minted(self) -> int:
        """Number of IDs ever issued, burned ones included."""
        return self._next_id

    def total_supply(self) -> int:
        """Number of tokens currently in existence."""
        return self._next_id - self._burned

    def owner_of(self, token_id: int) -> Address:
        """Current holder of token_id."""
        holder = self._owners.get(token_id)
        if holder is None:
            raise NonexistentToken(f"Token {token_id} does not exist", token_id=token_id)
        return holder

    def balance_of(self, account: str) -> int:
        """Number of tokens held by an identity."""
        return self._balances.get(to_address(account), 0)

    def token_uri(self, token_id: int) -> str:
        """Metadata pointer for token_id.

        A per-token pointer is appended to the base URI when both are set;
        without a per-token pointer the base URI is followed by the ID.
        """
        self.owner_of(token_id)
        specific = self._token_uris.get(token_id, "")
        if not self._base_uri:
            return specific
        if specific:
            return self._base_uri + specific
        return f"{self._base_uri}{token_id}"

    def get_approved(self, token_id: int) -> Address:
        """Identity approved to move token_id (null if none)."""
        self.owner_of(token_id)
        return self._token_approvals.get(token_id, NULL_ADDRESS)

    def is_approved_for_all(self, holder: str, operator: str) -> bool:
        """Whether operator may move every token of holder."""
        return (to_address(holder), to_address(operator)) in self._operator_approvals

    def royalty_info(self, token_id: int, sale_price: int) -> tuple[Address, int]:
        """Royalty owed on a sale: (receiver, sale_price * fee / 10000).

        token_id is accepted for interface compatibility; one policy covers
        the whole collection.
        """
        require_uint(sale_price, "sale_price")
        amount = checked_mul(sale_price, self._royalty_fee) // FEE_DENOMINATOR
        return self._royalty_receiver, amount

    # ===== MINTING =====

    def mint(self, caller: str, to: str) -> int:
        """Issue the next ID to to (owner only)."""
        self.access.only_owner(caller)
        recipient = self._mint_recipient(to)
        if self._max_supply > 0 and self._next_id >= self._max_supply:
            raise MaxSupplyReached(
                f"All {self._max_supply} tokens have been issued",
                max_supply=self._max_supply,
            )
        token_id = self._next_id
        self._update(recipient, token_id, None)
        self._next_id += 1
        return token_id

    def mint_with_uri(self, caller: str, to: str, uri: str) -> int:
        """Issue the next ID to to and set its metadata pointer."""
        token_id = self.mint(caller, to)
        self._set_token_uri(token_id, uri)
        return token_id

    def batch_mint(self, caller: str, to: str, count: int) -> list[int]:
        """Issue count consecutive IDs to to (owner only)."""
        self.access.only_owner(caller)
        return self._batch_mint(to, count)

    def batch_mint_with_uris(self, caller: str, to: str, uris: list[str]) -> list[int]:
        """Issue one ID per entry of uris, each with its metadata pointer."""
        self.access.only_owner(caller)
        token_ids = self._batch_mint(to, len(uris))
        for token_id, uri in zip(token_ids, uris):
            self._set_token_uri(token_id, uri)
        return token_ids

    # ===== OWNER SETTINGS =====

    def set_base_uri(self, caller: str, new_base_uri: str) -> None:
        """Replace the metadata prefix."""
        self.access.only_owner(caller)
        self._base_uri = new_base_uri
        self.emit("BaseURIUpdated", newBaseURI=new_base_uri)

    def set_token_uri(self, caller: str, token_id: int, uri: str) -> None:
        """Overwrite the metadata pointer of an existing token."""
        self.access.only_owner(caller)
        self.owner_of(token_id)
        self._set_token_uri(token_id, uri)

    def set_max_supply(self, caller: str, new_max_supply: int) -> None:
        """Change the cap; it may never drop below the IDs already issued."""
        self.access.only_owner(caller)
        require_uint(new_max_supply, "new_max_supply")
        if new_max_supply != 0 and new_max_supply < self._next_id:
            raise InvalidMaxSupply(
                f"Max supply {new_max_supply} is below the {self._next_id} already issued",
                requested=new_max_supply,
                issued=self._next_id,
            )
        self._max_supply = new_max_supply
        self.emit("MaxSupplyUpdated", newMaxSupply=new_max_supply)

    def set_royalty_info(self, caller: str, receiver: str, fee_numerator: int) -> None:
        """Set the collection-wide royalty receiver and fee (basis points)."""
        self.access.only_owner(caller)
        target = to_address(receiver)
        if target == NULL_ADDRESS:
            raise InvalidReceiver("Royalty receiver cannot be the null identity")
        require_uint(fee_numerator, "fee_numerator")
        if fee_numerator > FEE_DENOMINATOR:
            raise FeeTooHigh(
                f"Fee {fee_numerator} exceeds {FEE_DENOMINATOR} basis points",
                fee_numerator=fee_numerator,
            )
        self._royalty_receiver = target
        self._royalty_fee = fee_numerator
        self.emit("RoyaltyInfoUpdated", receiver=target, feeNumerator=fee_numerator)

    # ===== HOLDER OPERATIONS =====

    def approve(self, caller: str, approved: str, token_id: int) -> None:
        """Let approved move token_id (holder or operator only)."""
        auth = to_address(caller)
        holder = self.owner_of(token_id)
        if auth != holder and not self.is_approved_for_all(holder, auth):
            raise InsufficientApproval(
                f"{auth} may not approve token {token_id}",
                caller=auth,
                token_id=token_id,
            )
        target = to_address(approved)
        self._token_approvals[token_id] = target
        self.emit("Approval", owner=holder, approved=target, tokenId=token_id)

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> None:
        """Grant or revoke operator rights over all of the caller's tokens."""
        holder = to_address(caller)
        target = to_address(operator)
        if target == NULL_ADDRESS:
            raise InvalidOperator("Operator cannot be the null identity")
        if approved:
            self._operator_approvals.add((holder, target))
        else:
            self._operator_approvals.discard((holder, target))
        self.emit("ApprovalForAll", owner=holder, operator=target, approved=bool(approved))

    def transfer_from(self, caller: str, holder: str, to: str, token_id: int) -> None:
        """Move token_id from holder to to."""
        recipient = to_address(to)
        if recipient == NULL_ADDRESS:
            raise InvalidRecipient("Recipient cannot be the null identity")
        source = to_address(holder)
        current = self.owner_of(token_id)
        if current != source:
            raise IncorrectOwner(
                f"Token {token_id} is held by {current}, not {source}",
                token_id=token_id,
                owner=current,
            )
        self._update(recipient, token_id, to_address(caller))

    def burn(self, caller: str, token_id: int) -> None:
        """Destroy token_id. Its ID is never reissued."""
        self._update(NULL_ADDRESS, token_id, to_address(caller))
        self._token_uris.pop(token_id, None)
        self._burned += 1

    # ===== INTERNALS =====

    def _mint_recipient(self, to: str) -> Address:
        recipient = to_address(to)
        if recipient == NULL_ADDRESS:
            raise MintToZeroAddress("Cannot mint to the null identity")
        return recipient

    def _batch_mint(self, to: str, count: int) -> list[int]:
        limit = self.config.batch_mint_limit
        if not isinstance(count, int) or isinstance(count, bool) or count <= 0 or count > limit:
            raise InvalidCount(f"Count must be between 1 and {limit}, got {count!r}", count=count)
        recipient = self._mint_recipient(to)
        start = self._next_id
        if self._max_supply > 0 and start + count > self._max_supply:
            raise ExceedsMaxSupply(
                f"Minting {count} from ID {start} exceeds max supply {self._max_supply}",
                start_id=start,
                count=count,
                max_supply=self._max_supply,
            )
        token_ids = list(range(start, start + count))
        for token_id in token_ids:
            self._update(recipient, token_id, None)
        self._next_id = start + count
        self.emit("BatchMinted", to=recipient, startId=start, count=count)
        return token_ids

    def _set_token_uri(self, token_id: int, uri: str) -> None:
        self._token_uris[token_id] = uri
        self.emit("MetadataUpdate", tokenId=token_id)

    def _is_authorized(self, holder: Address, spender: Address, token_id: int) -> bool:
        return (
            spender == holder
            or (holder, spender) in self._operator_approvals
            or self._token_approvals.get(token_id) == spender
        )

    def _update(self, to: Address, token_id: int, auth: Address | None) -> Address:
        """Single chokepoint for every ownership change.

        NULL ``to`` burns. ``auth`` is the identity that must be allowed to
        move the token; None skips the check (minting). Returns the previous
        holder.
        """
        self.pause_switch.require_active()
        require_uint(token_id, "token_id", UINT256_MAX)

        previous = self._owners.get(token_id, NULL_ADDRESS)
        if auth is not None:
            if previous == NULL_ADDRESS:
                raise NonexistentToken(f"Token {token_id} does not exist", token_id=token_id)
            if not self._is_authorized(previous, auth, token_id):
                raise InsufficientApproval(
                    f"{auth} may not move token {token_id}",
                    caller=auth,
                    token_id=token_id,
                )

        if previous != NULL_ADDRESS:
            self._token_approvals.pop(token_id, None)
            remaining = self._balances[previous] - 1
            if remaining:
                self._balances[previous] = remaining
            else:
                del self._balances[previous]

        if to != NULL_ADDRESS:
            self._balances[to] = self._balances.get(to, 0) + 1
            self._owners[token_id] = to
        else:
            del self._owners[token_id]

        self.emit("Transfer", **{"from": previous, "to": to, "tokenId": token_id})
        return previous
