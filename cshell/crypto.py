"""Authenticated tunnel encryption with counter nonces and replay protection."""

from __future__ import annotations

import logging

from nacl import bindings
from nacl.exceptions import CryptoError as _NaclCryptoError

_log = logging.getLogger(__name__)

KEY_BYTES = 32
NONCE_BYTES = 24
MAC_BYTES = 16
COUNTER_BYTES = 8

_U64_MASK = (1 << 64) - 1
_U16_MASK = (1 << 16) - 1

_LOCAL_LABEL = "local secret key"
_REMOTE_LABEL = "remote public key"


class CryptoError(Exception):
    """Base class for tunnel encryption failures."""


class AuthenticationError(CryptoError):
    """A packet failed authentication."""


class ReplayError(CryptoError):
    """A packet carried a nonce that was not newer than the last one accepted."""


def _nonce(counter: int) -> bytes:
    return counter.to_bytes(COUNTER_BYTES, "little").ljust(NONCE_BYTES, b"\0")


def _check_key(key: bytes, what: str) -> bytes:
    key = bytes(key)
    if len(key) != KEY_BYTES:
        raise ValueError(f"{what} must be {KEY_BYTES} bytes, got {len(key)}")
    return key


class TunnelCrypto:
    """Encrypts and decrypts tunnel frames with a precomputed shared key.

    A packet is the authenticator and ciphertext followed by the 8-byte
    little-endian transmit counter that forms the start of the nonce.
    """

    def __init__(self) -> None:
        self._shared_key = bytes(KEY_BYTES)
        self.nonce_rx = 0
        self.nonce_tx = 0
        self.fail_auth_count = 0
        self.fail_nonce_count = 0

    def refresh(self, secret_key: bytes, remote_key: bytes) -> None:
        """Precompute the shared key from the local secret and the remote public key."""
        local = _check_key(secret_key, _LOCAL_LABEL)
        remote = _check_key(remote_key, _REMOTE_LABEL)
        self._shared_key = bindings.crypto_box_beforenm(remote, local)

    def encrypt(self, message: bytes) -> bytes:
        """Encrypt a message under the next transmit nonce."""
        self.nonce_tx = (self.nonce_tx + 1) & _U64_MASK
        _log.debug("nonce tx: %d", self.nonce_tx)
        nonce = _nonce(self.nonce_tx)
        try:
            boxed = bindings.crypto_secretbox(bytes(message), nonce, self._shared_key)
        except (_NaclCryptoError, ValueError) as exc:
            raise CryptoError(str(exc)) from exc
        return boxed + nonce[:COUNTER_BYTES]

    def decrypt(self, packet: bytes) -> bytes:
        """Authenticate and decrypt a packet, rejecting stale nonces."""
        packet = bytes(packet)
        if len(packet) < MAC_BYTES + COUNTER_BYTES:
            raise CryptoError(f"packet of {len(packet)} bytes is too short")
        counter_bytes = packet[-COUNTER_BYTES:]
        ciphertext = packet[:-COUNTER_BYTES]
        nonce = counter_bytes.ljust(NONCE_BYTES, b"\0")
        try:
            message = bindings.crypto_secretbox_open(ciphertext, nonce, self._shared_key)
        except (_NaclCryptoError, ValueError) as exc:
            self.fail_auth_count = (self.fail_auth_count + 1) & _U16_MASK
            raise AuthenticationError("decryption failed") from exc

        counter = int.from_bytes(counter_bytes, "little")
        if counter <= self.nonce_rx:
            self.fail_nonce_count = (self.fail_nonce_count + 1) & _U16_MASK
            raise ReplayError(f"nonce {counter} not newer than {self.nonce_rx}")

        self.nonce_rx = counter
        return message


def generate_keypair() -> tuple[bytes, bytes]:
    """Return a new (public key, secret key) pair."""
    try:
        public, private = bindings.crypto_box_keypair()
    except _NaclCryptoError as exc:
        raise CryptoError("crypto box keypair failed") from exc
    return public, private