"""
BLS12-381 group arithmetic via ``py_ecc``.

Every group operation (addition, scalar multiplication, hash-to-curve,
Miller loop, final exponentiation) is delegated to
``py_ecc.optimized_bls12_381``; this module only wraps the projective
tuples in small value types with a fixed wire encoding.

Encoding
--------
Points use the EIP-2537 layout: every 48-byte base-field element is
left-padded with 16 zero bytes to a 64-byte word.

    G1:  x ‖ y                        (128 bytes)
    G2:  x.c0 ‖ x.c1 ‖ y.c0 ‖ y.c1    (256 bytes)

The all-zero encoding is the point at infinity.

Install
-------
    pip install py_ecc>=7.0.0

References
----------
- EIP-2537   Precompile for BLS12-381 curve operations
- RFC 9380   Hashing to Elliptic Curves
"""

from __future__ import annotations

import hashlib
from typing import Iterable, List, Sequence, Tuple, Union

from py_ecc.bls.hash_to_curve import hash_to_G1, hash_to_G2
from py_ecc.optimized_bls12_381 import (
    FQ,
    FQ2,
    FQ12,
    G1,
    G2,
    Z1,
    Z2,
    add,
    b,
    b2,
    curve_order,
    eq,
    field_modulus,
    final_exponentiate,
    is_inf,
    is_on_curve,
    multiply,
    neg,
    normalize,
    pairing,
)

# ── BLS12-381 constants ─────────────────────────────────────────────────
ORDER = curve_order
FIELD_PRIME = field_modulus
SCALAR_BYTES = 32
FIELD_ELEMENT_BYTES = 64          # 48-byte element, 16 bytes of zero padding
_FIELD_PADDING = FIELD_ELEMENT_BYTES - 48
G1_POINT_BYTES = 2 * FIELD_ELEMENT_BYTES
G2_POINT_BYTES = 4 * FIELD_ELEMENT_BYTES


class PointDecodingError(ValueError):
    """Raised when bytes do not encode a valid subgroup point."""


def _encode_field(v: int) -> bytes:
    return v.to_bytes(FIELD_ELEMENT_BYTES, "big")


def _decode_field(data: bytes) -> int:
    if any(data[:_FIELD_PADDING]):
        raise PointDecodingError("non-zero padding in field element")
    v = int.from_bytes(data, "big")
    if v >= FIELD_PRIME:
        raise PointDecodingError("field element out of range")
    return v


# ── group element base ──────────────────────────────────────────────────
class _GroupPoint:
    """
    Common behaviour for G1 and G2 elements.

    Subclasses bind the group generator, identity, curve coefficient and
    the coordinate (de)serialisation; arithmetic is identical.
    """

    __slots__ = ("_pt",)

    ENCODED_BYTES = 0
    _GENERATOR: tuple = ()
    _IDENTITY: tuple = ()
    _B = None

    def __init__(self, pt: tuple) -> None:
        self._pt = pt

    # constructors -----------------------------------------------------------
    @classmethod
    def generator(cls):
        return cls(cls._GENERATOR)

    @classmethod
    def identity(cls):
        """Point at infinity — additive identity."""
        return cls(cls._IDENTITY)

    @classmethod
    def from_scalar(cls, s: int):
        """Compute *s · g*."""
        return cls.generator() * s

    @classmethod
    def from_bytes(cls, data: bytes):
        """
        Deserialise a fixed-width encoding.

        Rejects wrong lengths, bad padding, out-of-range coordinates,
        points off the curve and points outside the order-*r* subgroup.
        """
        if len(data) != cls.ENCODED_BYTES:
            raise PointDecodingError(
                f"need {cls.ENCODED_BYTES} bytes, got {len(data)}"
            )
        if not any(data):
            return cls.identity()
        words = [
            _decode_field(data[i:i + FIELD_ELEMENT_BYTES])
            for i in range(0, len(data), FIELD_ELEMENT_BYTES)
        ]
        pt = cls._from_coordinates(words)
        if not is_on_curve(pt, cls._B):
            raise PointDecodingError("point is not on the curve")
        if not is_inf(multiply(pt, ORDER)):
            raise PointDecodingError("point is not in the prime-order subgroup")
        return cls(pt)

    @classmethod
    def hash_to_point(cls, message: bytes, domain: bytes):
        raise NotImplementedError

    # coordinate hooks -------------------------------------------------------
    @classmethod
    def _from_coordinates(cls, words: List[int]) -> tuple:
        raise NotImplementedError

    def _coordinates(self) -> List[int]:
        raise NotImplementedError

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        if self.is_inf():
            return b"\x00" * self.ENCODED_BYTES
        return b"".join(_encode_field(v) for v in self._coordinates())

    @property
    def point(self) -> tuple:
        """The underlying ``py_ecc`` projective tuple."""
        return self._pt

    def is_inf(self) -> bool:
        return is_inf(self._pt)

    # group operations -------------------------------------------------------
    def __add__(self, o):
        if type(o) is not type(self):
            return NotImplemented
        return type(self)(add(self._pt, o._pt))

    def __neg__(self):
        return type(self)(neg(self._pt))

    def __sub__(self, o):
        return self + (-o)

    def __mul__(self, s):
        if not isinstance(s, int):
            return NotImplemented
        s %= ORDER
        if s == 0:
            return self.identity()
        return type(self)(multiply(self._pt, s))

    __rmul__ = __mul__

    def __eq__(self, o: object) -> bool:
        if type(o) is not type(self):
            return False
        return eq(self._pt, o._pt)

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        if self.is_inf():
            return f"{type(self).__name__}(∞)"
        return f"{type(self).__name__}(0x{self.to_bytes()[16:32].hex()}…)"

    # utility ----------------------------------------------------------------
    @classmethod
    def sum_points(cls, points: Iterable):
        acc = cls._IDENTITY
        for p in points:
            acc = add(acc, p._pt)
        return cls(acc)

    @classmethod
    def multi_scalar(cls, scalars: Sequence[int], points: Sequence):
        """Compute  Σ s_i · P_i."""
        if len(scalars) != len(points):
            raise ValueError("scalars and points must be same length")
        return cls.sum_points(p * s for s, p in zip(scalars, points))


# ── G1 ──────────────────────────────────────────────────────────────────
class G1Point(_GroupPoint):
    """Element of G1 ⊂ E(F_p)."""

    __slots__ = ()

    ENCODED_BYTES = G1_POINT_BYTES
    _GENERATOR = G1
    _IDENTITY = Z1
    _B = b

    @classmethod
    def hash_to_point(cls, message: bytes, domain: bytes) -> G1Point:
        """RFC 9380 ``BLS12381G1_XMD:SHA-256_SSWU_RO_`` under *domain*."""
        return cls(hash_to_G1(message, domain, hashlib.sha256))

    @classmethod
    def _from_coordinates(cls, words: List[int]) -> tuple:
        x, y = words
        return (FQ(x), FQ(y), FQ.one())

    def _coordinates(self) -> List[int]:
        x, y = normalize(self._pt)
        return [x.n, y.n]


# ── G2 ──────────────────────────────────────────────────────────────────
class G2Point(_GroupPoint):
    """Element of G2 ⊂ E'(F_p²)."""

    __slots__ = ()

    ENCODED_BYTES = G2_POINT_BYTES
    _GENERATOR = G2
    _IDENTITY = Z2
    _B = b2

    @classmethod
    def hash_to_point(cls, message: bytes, domain: bytes) -> G2Point:
        """RFC 9380 ``BLS12381G2_XMD:SHA-256_SSWU_RO_`` under *domain*."""
        return cls(hash_to_G2(message, domain, hashlib.sha256))

    @classmethod
    def _from_coordinates(cls, words: List[int]) -> tuple:
        x0, x1, y0, y1 = words
        return (FQ2([x0, x1]), FQ2([y0, y1]), FQ2.one())

    def _coordinates(self) -> List[int]:
        x, y = normalize(self._pt)
        return [int(c) for c in x.coeffs] + [int(c) for c in y.coeffs]


Point = Union[G1Point, G2Point]


# ── pairing ─────────────────────────────────────────────────────────────
def pairing_check(pairs: Sequence[Tuple[G1Point, G2Point]]) -> bool:
    """
    Generalised pairing-product check:  Π e(P_i, Q_i) == 1.

    Miller loops are accumulated and a single final exponentiation is
    applied, the same shape as the EIP-2537 pairing precompile.
    """
    acc = FQ12.one()
    for p, q in pairs:
        if not isinstance(p, G1Point) or not isinstance(q, G2Point):
            raise TypeError("pairs must be (G1Point, G2Point)")
        acc = acc * pairing(q.point, p.point, final_exponentiate=False)
    return final_exponentiate(acc) == FQ12.one()
