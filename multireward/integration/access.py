"""
Access-control gates for administrative calls.

Two postures are supported:
- `OwnerGate`: a single owner identity; the caller must equal it.
- `BlsAdminGate`: callers present a BLS12-381 signature over the canonical
  admin request. Each admin key uses strictly sequential nonces, so a captured
  signature cannot be replayed. The nonce check, the signature check and the
  nonce update happen under one lock; `release()` hands a consumed nonce back
  when the gated operation is rolled back.

The signed message is::

    sha256(domain_sep("reward_admin:<chain_id>") || canonical_json({"nonce", "request"}))
"""

from __future__ import annotations

import hashlib
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping

from ..state.canonical import canonical_json_bytes, domain_sep_bytes, hex_to_bytes_fixed

logger = logging.getLogger(__name__)

_PUBKEY_BYTES = 48
_SIGNATURE_BYTES = 96


class OwnerGate:
    def __init__(self, owner: str) -> None:
        if not isinstance(owner, str) or not owner:
            raise ValueError("owner must be a non-empty str")
        self.owner = owner

    def is_authorized(self, caller: Any, request: Mapping[str, Any]) -> bool:
        return caller == self.owner


@dataclass(frozen=True)
class SignedAdminCaller:
    """Admin identity for `BlsAdminGate`: pubkey, signature and request nonce."""

    pubkey: str
    signature: str
    nonce: int


def admin_signing_payload(request: Mapping[str, Any], *, nonce: int, chain_id: str) -> bytes:
    if not isinstance(nonce, int) or isinstance(nonce, bool) or nonce <= 0:
        raise ValueError("nonce must be a positive int")
    body = canonical_json_bytes({"nonce": nonce, "request": dict(request)})
    return domain_sep_bytes(f"reward_admin:{chain_id}", version=1) + body


def sign_admin_request(secret_key: int, request: Mapping[str, Any], *, nonce: int, chain_id: str) -> SignedAdminCaller:
    """Produce a `SignedAdminCaller` for ``request`` (tooling and tests)."""
    from py_ecc.bls import G2Basic

    msg_hash = hashlib.sha256(admin_signing_payload(request, nonce=nonce, chain_id=chain_id)).digest()
    pubkey = G2Basic.SkToPk(secret_key)
    signature = G2Basic.Sign(secret_key, msg_hash)
    return SignedAdminCaller(pubkey="0x" + bytes(pubkey).hex(), signature="0x" + bytes(signature).hex(), nonce=nonce)


class BlsAdminGate:
    def __init__(self, admin_pubkeys: Iterable[str], *, chain_id: str) -> None:
        if not isinstance(chain_id, str) or not chain_id:
            raise ValueError("chain_id must be a non-empty str")
        self._chain_id = chain_id
        self._admins = {
            hex_to_bytes_fixed(pk, nbytes=_PUBKEY_BYTES, name="admin_pubkey") for pk in admin_pubkeys
        }
        if not self._admins:
            raise ValueError("at least one admin pubkey is required")
        self._last_nonce: Dict[bytes, int] = {}
        self._lock = threading.Lock()

    def last_nonce(self, pubkey: str) -> int:
        with self._lock:
            return self._last_nonce.get(hex_to_bytes_fixed(pubkey, nbytes=_PUBKEY_BYTES, name="pubkey"), 0)

    def is_authorized(self, caller: Any, request: Mapping[str, Any]) -> bool:
        if not isinstance(caller, SignedAdminCaller):
            return False
        try:
            pk = hex_to_bytes_fixed(caller.pubkey, nbytes=_PUBKEY_BYTES, name="pubkey")
            sig = hex_to_bytes_fixed(caller.signature, nbytes=_SIGNATURE_BYTES, name="signature")
        except (TypeError, ValueError) as exc:
            logger.warning("Malformed admin credentials", extra={"event": "rewards.admin_rejected", "reason": str(exc)})
            return False
        if pk not in self._admins:
            return False

        with self._lock:
            expected_nonce = self._last_nonce.get(pk, 0) + 1
            if caller.nonce != expected_nonce:
                logger.warning(
                    "Admin nonce mismatch",
                    extra={"event": "rewards.admin_rejected", "expected": expected_nonce, "got": caller.nonce},
                )
                return False

            from py_ecc.bls import G2Basic

            payload = admin_signing_payload(request, nonce=caller.nonce, chain_id=self._chain_id)
            msg_hash = hashlib.sha256(payload).digest()
            try:
                ok = bool(G2Basic.Verify(pk, msg_hash, sig))
            except Exception as exc:
                logger.warning(
                    "Admin signature verification error",
                    extra={"event": "rewards.admin_rejected", "reason": str(exc)},
                )
                return False
            if ok:
                self._last_nonce[pk] = caller.nonce
            return ok

    def release(self, caller: Any) -> None:
        """Give back the nonce ``caller`` consumed, if it is still the latest one.

        Called when the operation ``caller`` was authorized for is rolled back,
        so the same signed request can be re-issued.
        """
        if not isinstance(caller, SignedAdminCaller):
            return
        pk = hex_to_bytes_fixed(caller.pubkey, nbytes=_PUBKEY_BYTES, name="pubkey")
        with self._lock:
            if self._last_nonce.get(pk) != caller.nonce:
                return
            if caller.nonce > 1:
                self._last_nonce[pk] = caller.nonce - 1
            else:
                del self._last_nonce[pk]
