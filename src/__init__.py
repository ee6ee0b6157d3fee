"""Token Forge source package.

This package contains:
- config: Configuration loading and management
- chain: In-memory contract host, access control, pause switch and
  CREATE2 address derivation
- chain.contracts: Fungible ledger, non-fungible registry and deployment
  factory
"""

from __future__ import annotations

__all__: list[str] = []
