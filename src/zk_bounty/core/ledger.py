"""
Ledger wire format: signature-hash preimages, outputs and standard scripts.

The escrow never sees a whole transaction. It sees the BIP143-style
preimage that the transaction's signature hash is computed over:

    nVersion        4   LE
    hashPrevouts   32
    hashSequence   32
    outpoint       36   txid ‖ vout (LE)
    scriptCode      varint length ‖ script
    amount          8   LE, value of the output being spent
    nSequence       4   LE
    hashOutputs    32   hash256 of all serialized outputs
    nLockTime       4   LE
    sighashType     4   LE

Serialized output:

    value (8 LE) ‖ varint(len(script)) ‖ script

Scripts built here:

    P2PKH        OP_DUP OP_HASH160 <20-byte pkh> OP_EQUALVERIFY OP_CHECKSIG
    data         OP_FALSE OP_RETURN <push data>

``PreimageBuilder`` assembles a preimage from outputs and lock fields; the
seller and buyer helpers use it to produce the exact bytes they sign or
submit, and tests use it to produce well-formed spend attempts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from zk_bounty.crypto.hashes import hash256

SEQUENCE_FINAL = 0xFFFFFFFF
LOCKTIME_THRESHOLD = 500_000_000
SIGHASH_ALL_FORKID = 0x41

OP_FALSE = 0x00
OP_PUSHDATA1 = 0x4C
OP_PUSHDATA2 = 0x4D
OP_PUSHDATA4 = 0x4E
OP_RETURN = 0x6A
OP_DUP = 0x76
OP_EQUALVERIFY = 0x88
OP_HASH160 = 0xA9
OP_CHECKSIG = 0xAC

_FIXED_HEAD = 4 + 32 + 32 + 36
_FIXED_TAIL = 8 + 4 + 32 + 4 + 4


class PreimageError(ValueError):
    """Raised when a preimage cannot be parsed."""
    pass


# ==============================================================================
# Encoding helpers
# ==============================================================================


def varint(n: int) -> bytes:
    """Bitcoin CompactSize encoding."""
    if n < 0:
        raise ValueError("varint must be non-negative")
    if n < 0xFD:
        return bytes([n])
    if n <= 0xFFFF:
        return b"\xfd" + n.to_bytes(2, "little")
    if n <= 0xFFFFFFFF:
        return b"\xfe" + n.to_bytes(4, "little")
    return b"\xff" + n.to_bytes(8, "little")


def read_varint(data: bytes, pos: int) -> tuple[int, int]:
    """Decode a CompactSize at ``pos``; returns (value, new_pos)."""
    if pos >= len(data):
        raise PreimageError("truncated varint")
    first = data[pos]
    if first < 0xFD:
        return first, pos + 1
    width = {0xFD: 2, 0xFE: 4, 0xFF: 8}[first]
    end = pos + 1 + width
    if end > len(data):
        raise PreimageError("truncated varint")
    return int.from_bytes(data[pos + 1:end], "little"), end


def push_data(data: bytes) -> bytes:
    """Minimal script push for ``data``."""
    n = len(data)
    if n < OP_PUSHDATA1:
        return bytes([n]) + data
    if n <= 0xFF:
        return bytes([OP_PUSHDATA1, n]) + data
    if n <= 0xFFFF:
        return bytes([OP_PUSHDATA2]) + n.to_bytes(2, "little") + data
    return bytes([OP_PUSHDATA4]) + n.to_bytes(4, "little") + data


def build_p2pkh_script(pkh: bytes) -> bytes:
    if len(pkh) != 20:
        raise ValueError(f"pubkey hash must be 20 bytes, got {len(pkh)}")
    return bytes([OP_DUP, OP_HASH160, 20]) + pkh + bytes([OP_EQUALVERIFY, OP_CHECKSIG])


def build_data_script(data: bytes) -> bytes:
    """Provably unspendable script carrying ``data``."""
    return bytes([OP_FALSE, OP_RETURN]) + push_data(data)


def parse_data_script(script: bytes) -> bytes | None:
    """
    Extract the payload of an ``OP_FALSE OP_RETURN <push>`` script.

    Returns:
        The pushed bytes, or None if ``script`` is not a single-push data script.
    """
    if len(script) < 3 or script[0] != OP_FALSE or script[1] != OP_RETURN:
        return None
    op = script[2]
    pos = 3
    if op < OP_PUSHDATA1:
        n = op
    elif op == OP_PUSHDATA1:
        if len(script) < 4:
            return None
        n, pos = script[3], 4
    elif op == OP_PUSHDATA2:
        n, pos = int.from_bytes(script[3:5], "little"), 5
    elif op == OP_PUSHDATA4:
        n, pos = int.from_bytes(script[3:7], "little"), 7
    else:
        return None
    if pos + n != len(script):
        return None
    return script[pos:]


def build_output(script: bytes, amount: int) -> bytes:
    if amount < 0 or amount >> 64:
        raise ValueError(f"amount out of range: {amount}")
    return amount.to_bytes(8, "little") + varint(len(script)) + script


# ==============================================================================
# Preimage
# ==============================================================================


@dataclass(frozen=True)
class Preimage:
    version: int
    hash_prevouts: bytes
    hash_sequence: bytes
    outpoint: bytes
    script_code: bytes
    amount: int
    sequence: int
    hash_outputs: bytes
    lock_time: int
    sighash_type: int

    @classmethod
    def parse(cls, raw: bytes) -> Preimage:
        """
        Parse a serialized preimage.

        Raises:
            PreimageError: if the bytes are truncated, carry trailing data,
                or the sighash type lacks the fork-id flag.
        """
        if len(raw) < _FIXED_HEAD + 1 + _FIXED_TAIL:
            raise PreimageError(f"preimage too short: {len(raw)} bytes")
        version = int.from_bytes(raw[0:4], "little")
        hash_prevouts = raw[4:36]
        hash_sequence = raw[36:68]
        outpoint = raw[68:104]
        pos = _FIXED_HEAD
        script_len, pos = read_varint(raw, pos)
        if len(raw) != pos + script_len + _FIXED_TAIL:
            raise PreimageError(
                f"preimage length {len(raw)} inconsistent with scriptCode length {script_len}"
            )
        script_code = raw[pos:pos + script_len]
        pos += script_len
        amount = int.from_bytes(raw[pos:pos + 8], "little")
        sequence = int.from_bytes(raw[pos + 8:pos + 12], "little")
        hash_outputs = raw[pos + 12:pos + 44]
        lock_time = int.from_bytes(raw[pos + 44:pos + 48], "little")
        sighash_type = int.from_bytes(raw[pos + 48:pos + 52], "little")
        if not sighash_type & 0x40:
            raise PreimageError(f"sighash type 0x{sighash_type:x} lacks FORKID flag")
        return cls(
            version=version,
            hash_prevouts=hash_prevouts,
            hash_sequence=hash_sequence,
            outpoint=outpoint,
            script_code=script_code,
            amount=amount,
            sequence=sequence,
            hash_outputs=hash_outputs,
            lock_time=lock_time,
            sighash_type=sighash_type,
        )

    def serialize(self) -> bytes:
        return b"".join([
            self.version.to_bytes(4, "little"),
            self.hash_prevouts,
            self.hash_sequence,
            self.outpoint,
            varint(len(self.script_code)),
            self.script_code,
            self.amount.to_bytes(8, "little"),
            self.sequence.to_bytes(4, "little"),
            self.hash_outputs,
            self.lock_time.to_bytes(4, "little"),
            self.sighash_type.to_bytes(4, "little"),
        ])


def check_preimage(raw: bytes) -> bool:
    try:
        Preimage.parse(raw)
    except PreimageError:
        return False
    return True


def sequence(raw: bytes) -> int:
    return Preimage.parse(raw).sequence


def lock_time(raw: bytes) -> int:
    return Preimage.parse(raw).lock_time


def outputs_digest(raw: bytes) -> bytes:
    return Preimage.parse(raw).hash_outputs


# ==============================================================================
# Ledger capability
# ==============================================================================


class Ledger(Protocol):
    """Transaction primitives the escrow consumes."""

    def check_preimage(self, raw: bytes) -> bool: ...

    def sequence(self, raw: bytes) -> int: ...

    def lock_time(self, raw: bytes) -> int: ...

    def outputs_digest(self, raw: bytes) -> bytes: ...

    def build_p2pkh_script(self, pkh: bytes) -> bytes: ...

    def build_output(self, script: bytes, amount: int) -> bytes: ...

    def build_data_script(self, data: bytes) -> bytes: ...


class BitcoinLedger:
    """Ledger backed by the BIP143/FORKID wire format above."""

    def check_preimage(self, raw: bytes) -> bool:
        return check_preimage(raw)

    def sequence(self, raw: bytes) -> int:
        return sequence(raw)

    def lock_time(self, raw: bytes) -> int:
        return lock_time(raw)

    def outputs_digest(self, raw: bytes) -> bytes:
        return outputs_digest(raw)

    def build_p2pkh_script(self, pkh: bytes) -> bytes:
        return build_p2pkh_script(pkh)

    def build_output(self, script: bytes, amount: int) -> bytes:
        return build_output(script, amount)

    def build_data_script(self, data: bytes) -> bytes:
        return build_data_script(data)


# ==============================================================================
# PreimageBuilder
# ==============================================================================


class PreimageBuilder:
    """
    Fluent builder for the preimage of a transaction spending one escrow output.

    Usage:
        raw = (
            PreimageBuilder(outpoint=txid + vout, script_code=locking_script, amount=10_000)
            .add_output(build_p2pkh_script(pkh), 10_000)
            .add_output(build_data_script(payload), 0)
            .with_lock_time(700_000)
            .with_sequence(0xFFFFFFFE)
            .build()
        )
    """

    def __init__(
        self,
        outpoint: bytes = b"\x00" * 36,
        script_code: bytes = b"",
        amount: int = 0,
        version: int = 2,
    ) -> None:
        if len(outpoint) != 36:
            raise ValueError(f"outpoint must be 36 bytes, got {len(outpoint)}")
        self._outpoint = outpoint
        self._script_code = script_code
        self._amount = amount
        self._version = version
        self._outputs: list[bytes] = []
        self._sequence = SEQUENCE_FINAL
        self._lock_time = 0
        self._sighash_type = SIGHASH_ALL_FORKID

    def add_output(self, script: bytes, amount: int) -> PreimageBuilder:
        self._outputs.append(build_output(script, amount))
        return self

    def add_raw_outputs(self, outputs: Sequence[bytes]) -> PreimageBuilder:
        self._outputs.extend(outputs)
        return self

    def with_sequence(self, value: int) -> PreimageBuilder:
        self._sequence = value
        return self

    def with_lock_time(self, value: int) -> PreimageBuilder:
        self._lock_time = value
        return self

    def with_sighash_type(self, value: int) -> PreimageBuilder:
        self._sighash_type = value
        return self

    def build(self) -> bytes:
        preimage = Preimage(
            version=self._version,
            hash_prevouts=hash256(self._outpoint),
            hash_sequence=hash256(self._sequence.to_bytes(4, "little")),
            outpoint=self._outpoint,
            script_code=self._script_code,
            amount=self._amount,
            sequence=self._sequence,
            hash_outputs=hash256(b"".join(self._outputs)),
            lock_time=self._lock_time,
            sighash_type=self._sighash_type,
        )
        return preimage.serialize()
