"""Named failure conditions for contract calls.

Every failure a contract can raise is a distinct ``ContractError`` subclass so
callers can branch on the cause. Each class carries a machine-readable
``ErrorCode`` and an ``ErrorCategory``; ``error_response()`` converts any of
them into the dict shape returned by ``Chain.invoke``.

Usage:
    from src.chain.errors import InsufficientBalance, error_response

    try:
        chain.call(alice, token, "batch_transfer", recipients, amounts)
    except InsufficientBalance as exc:
        print(exc.details["balance"])

    # Dict protocol:
    chain.invoke(alice, token, "mint", [bob, 10])
    # -> {"success": False, "error": "...", "code": "unauthorized", ...}
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categories for error classification.

    - AUTHORIZATION: caller lacks the required role
    - VALIDATION: caller provided bad input
    - CAPACITY: a supply or batch ceiling would be crossed
    - BALANCE: not enough balance, allowance or approval
    - OPERATIONAL: the component is gated (paused)
    - DEPLOYMENT: contract creation failed
    - ARITHMETIC: checked arithmetic failed
    """

    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    CAPACITY = "capacity"
    BALANCE = "balance"
    OPERATIONAL = "operational"
    DEPLOYMENT = "deployment"
    ARITHMETIC = "arithmetic"


class ErrorCode(str, Enum):
    """Specific error codes for programmatic handling."""

    # Authorization
    UNAUTHORIZED = "unauthorized"

    # Validation
    ZERO_ADDRESS = "zero_address"
    MINT_TO_ZERO_ADDRESS = "mint_to_zero_address"
    INVALID_RECIPIENT = "invalid_recipient"
    INVALID_RECEIVER = "invalid_receiver"
    INVALID_SPENDER = "invalid_spender"
    INVALID_OPERATOR = "invalid_operator"
    INVALID_ADDRESS = "invalid_address"
    INVALID_SALT = "invalid_salt"
    INVALID_DECIMALS = "invalid_decimals"
    ARRAY_LENGTH_MISMATCH = "array_length_mismatch"
    EMPTY_ARRAYS = "empty_arrays"
    INVALID_COUNT = "invalid_count"
    NAME_EMPTY = "name_empty"
    SYMBOL_EMPTY = "symbol_empty"
    ZERO_INITIAL_OWNER = "zero_initial_owner"
    FEE_TOO_HIGH = "fee_too_high"
    METHOD_NOT_FOUND = "method_not_found"

    # Capacity
    MAX_SUPPLY_REACHED = "max_supply_reached"
    EXCEEDS_MAX_SUPPLY = "exceeds_max_supply"
    MAX_SUPPLY_EXCEEDED = "max_supply_exceeded"
    TOO_MANY_RECIPIENTS = "too_many_recipients"
    INVALID_MAX_SUPPLY = "invalid_max_supply"

    # Balance
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INSUFFICIENT_ALLOWANCE = "insufficient_allowance"
    INSUFFICIENT_APPROVAL = "insufficient_approval"
    INCORRECT_OWNER = "incorrect_owner"
    NONEXISTENT_TOKEN = "nonexistent_token"

    # Operational
    OPERATION_PAUSED = "operation_paused"
    ALREADY_PAUSED = "already_paused"
    ALREADY_ACTIVE = "already_active"

    # Deployment
    DEPLOYMENT_FAILED = "deployment_failed"

    # Arithmetic
    ARITHMETIC_OVERFLOW = "arithmetic_overflow"


@dataclass
class ErrorResponse:
    """Standardized error response.

    All error responses include:
    - success: Always False
    - error: Human-readable message
    - code: Machine-readable error code
    - category: Error category (validation, capacity, etc.)
    - retriable: Whether resubmitting the same call could succeed
    - details: Optional additional context
    """

    success: bool = False
    error: str = ""
    code: str = ""
    category: str = ""
    retriable: bool = False
    details: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        result: dict[str, object] = {
            "success": self.success,
            "error": self.error,
            "code": self.code,
            "category": self.category,
            "retriable": self.retriable,
        }
        if self.details:
            result["details"] = self.details
        return result


class ContractError(Exception):
    """Base class for every named contract failure."""

    code: ErrorCode = ErrorCode.UNAUTHORIZED
    category: ErrorCategory = ErrorCategory.VALIDATION
    # Paused calls may succeed once the owner unpauses
    retriable: bool = False

    def __init__(self, message: str | None = None, **details: Any) -> None:
        self.details = details
        super().__init__(message or self.__class__.__name__)

    @property
    def message(self) -> str:
        return str(self)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.message,
            code=self.code.value,
            category=self.category.value,
            retriable=self.retriable,
            details=dict(self.details) if self.details else None,
        )


def error_response(exc: ContractError) -> dict[str, object]:
    """Serialize a contract error into the standard response dict."""
    return exc.to_response().to_dict()


# =============================================================================
# AUTHORIZATION
# =============================================================================


class Unauthorized(ContractError):
    code = ErrorCode.UNAUTHORIZED
    category = ErrorCategory.AUTHORIZATION


# =============================================================================
# VALIDATION
# =============================================================================


class ZeroAddress(ContractError):
    code = ErrorCode.ZERO_ADDRESS


class MintToZeroAddress(ContractError):
    code = ErrorCode.MINT_TO_ZERO_ADDRESS


class InvalidRecipient(ContractError):
    code = ErrorCode.INVALID_RECIPIENT


class InvalidReceiver(ContractError):
    code = ErrorCode.INVALID_RECEIVER


class InvalidSpender(ContractError):
    code = ErrorCode.INVALID_SPENDER


class InvalidOperator(ContractError):
    code = ErrorCode.INVALID_OPERATOR


class InvalidAddress(ContractError):
    code = ErrorCode.INVALID_ADDRESS


class InvalidSalt(ContractError):
    code = ErrorCode.INVALID_SALT


class InvalidDecimals(ContractError):
    code = ErrorCode.INVALID_DECIMALS


class ArrayLengthMismatch(ContractError):
    code = ErrorCode.ARRAY_LENGTH_MISMATCH


class EmptyArrays(ContractError):
    code = ErrorCode.EMPTY_ARRAYS


class InvalidCount(ContractError):
    code = ErrorCode.INVALID_COUNT


class NameEmpty(ContractError):
    code = ErrorCode.NAME_EMPTY


class SymbolEmpty(ContractError):
    code = ErrorCode.SYMBOL_EMPTY


class ZeroInitialOwner(ContractError):
    code = ErrorCode.ZERO_INITIAL_OWNER


class FeeTooHigh(ContractError):
    code = ErrorCode.FEE_TOO_HIGH


class MethodNotFound(ContractError):
    code = ErrorCode.METHOD_NOT_FOUND


# =============================================================================
# CAPACITY
# =============================================================================


class MaxSupplyReached(ContractError):
    code = ErrorCode.MAX_SUPPLY_REACHED
    category = ErrorCategory.CAPACITY


class ExceedsMaxSupply(ContractError):
    code = ErrorCode.EXCEEDS_MAX_SUPPLY
    category = ErrorCategory.CAPACITY


class MaxSupplyExceeded(ContractError):
    code = ErrorCode.MAX_SUPPLY_EXCEEDED
    category = ErrorCategory.CAPACITY


class TooManyRecipients(ContractError):
    code = ErrorCode.TOO_MANY_RECIPIENTS
    category = ErrorCategory.CAPACITY


class InvalidMaxSupply(ContractError):
    code = ErrorCode.INVALID_MAX_SUPPLY
    category = ErrorCategory.CAPACITY


# =============================================================================
# BALANCE
# =============================================================================


class InsufficientBalance(ContractError):
    code = ErrorCode.INSUFFICIENT_BALANCE
    category = ErrorCategory.BALANCE


class InsufficientAllowance(ContractError):
    code = ErrorCode.INSUFFICIENT_ALLOWANCE
    category = ErrorCategory.BALANCE


class InsufficientApproval(ContractError):
    code = ErrorCode.INSUFFICIENT_APPROVAL
    category = ErrorCategory.BALANCE


class IncorrectOwner(ContractError):
    code = ErrorCode.INCORRECT_OWNER
    category = ErrorCategory.BALANCE


class NonexistentToken(ContractError):
    code = ErrorCode.NONEXISTENT_TOKEN
    category = ErrorCategory.BALANCE


# =============================================================================
# OPERATIONAL
# =============================================================================


class OperationPaused(ContractError):
    code = ErrorCode.OPERATION_PAUSED
    category = ErrorCategory.OPERATIONAL
    retriable = True


class AlreadyPaused(ContractError):
    code = ErrorCode.ALREADY_PAUSED
    category = ErrorCategory.OPERATIONAL


class AlreadyActive(ContractError):
    code = ErrorCode.ALREADY_ACTIVE
    category = ErrorCategory.OPERATIONAL


# =============================================================================
# DEPLOYMENT / ARITHMETIC
# =============================================================================


class DeploymentFailed(ContractError):
    code = ErrorCode.DEPLOYMENT_FAILED
    category = ErrorCategory.DEPLOYMENT


class ArithmeticOverflow(ContractError):
    code = ErrorCode.ARITHMETIC_OVERFLOW
    category = ErrorCategory.ARITHMETIC
