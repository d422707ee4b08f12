from .bindings import _FFI, _C, Const
from .errors import ScalarMalformed, PointMalformed
from .rand import draw

from functools import wraps
from binascii import hexlify

import pytest


# The prime order l of the Ristretto255 group.
GROUP_ORDER = 2**252 + 27742317777372353535851937790883648493

_IDENTITY = b"\x00" * Const.POINT_BYTES


def _check(return_val):
    """Checks the return code of the C calls"""
    if return_val == 0:
        return

    raise Exception("Ristretto255 exception")


def _out(size=Const.SCALAR_BYTES):
    return _FFI.new("unsigned char[]", size)


def _read(buf):
    return bytes(_FFI.buffer(buf)[:])


def secure_compare(a1, a2):
    """A constant-time comparison function. Returns True if the two byte
    strings are equal and False otherwise. Only the lengths leak.

    Example:
        >>> secure_compare(b"Hello", b"Hello")
        True
        >>> secure_compare(b"Hello", b"Hellx")
        False
    """
    if not (isinstance(a1, bytes) and isinstance(a2, bytes)):
        raise TypeError("secure_compare needs two byte strings")

    if len(a1) != len(a2):
        return False

    return int(_C.sodium_memcmp(a1, a2, len(a1))) == 0


def force_Scalar(n):
    """A decorator that coerces the nth input to be a Scalar"""

    def convert_nth(f):
        @wraps(f)
        def new_f(*args, **kwargs):
            if n < len(args) and not isinstance(args[n], Scalar):
                if not isinstance(args[n], int):
                    return NotImplemented
                new_args = list(args)
                new_args[n] = Scalar(args[n])
                args = tuple(new_args)

            return f(*args, **kwargs)

        return new_f
    return convert_nth


class Scalar(object):
    """An integer modulo the group order, held as its canonical 32 byte
    little-endian encoding. Supports +, -, * and unary - modulo the order,
    with plain python integers coerced on either side, and multiplication of
    points (``k * P``).

    Example:
        >>> int(Scalar(3) + 4)
        7
        >>> int(Scalar(-1)) == GROUP_ORDER - 1
        True
    """

    __slots__ = ["sc"]

    @staticmethod
    def from_binary(sbin):
        """Parses an untrusted 32 byte scalar encoding.

        Raises:
            ScalarMalformed: if the input is not exactly 32 bytes holding the
                reduced representative of a scalar. Nothing is coerced.

        Example:
            >>> int(Scalar.from_binary(b"\\x05" + b"\\x00" * 31))
            5
        """
        if not isinstance(sbin, (bytes, bytearray)) or len(sbin) != Const.SCALAR_BYTES:
            raise ScalarMalformed()

        sbin = bytes(sbin)
        if int.from_bytes(sbin, "little") >= GROUP_ORDER:
            raise ScalarMalformed()

        return Scalar._wrap(sbin)

    @staticmethod
    def from_hash(digest):
        """Reduces a 64 byte digest modulo the group order."""
        if len(digest) != Const.NONREDUCED_SCALAR_BYTES:
            raise ValueError("Wide reduction needs a %d byte digest, got %d"
                             % (Const.NONREDUCED_SCALAR_BYTES, len(digest)))

        out = _out()
        _C.crypto_core_ristretto255_scalar_reduce(out, bytes(digest))
        return Scalar._wrap(_read(out))

    @staticmethod
    def random(rng=None):
        """Returns a uniformly random scalar, from a single 64 byte draw."""
        return Scalar.from_hash(draw(rng, Const.NONREDUCED_SCALAR_BYTES))

    @staticmethod
    def _wrap(sbin):
        s = Scalar.__new__(Scalar)
        s.sc = sbin
        return s

    def __init__(self, num=0):
        'A scalar from a python integer of any size, reduced modulo the order.'
        self.sc = (int(num) % GROUP_ORDER).to_bytes(Const.SCALAR_BYTES, "little")

    def binary(self):
        """The canonical 32 byte little-endian encoding."""
        return self.sc

    export = binary

    def _op(self, func, other):
        out = _out()
        func(out, self.sc, other.sc)
        return Scalar._wrap(_read(out))

    @force_Scalar(1)
    def __add__(self, other):
        return self._op(_C.crypto_core_ristretto255_scalar_add, other)

    @force_Scalar(1)
    def __radd__(self, other):
        return other._op(_C.crypto_core_ristretto255_scalar_add, self)

    @force_Scalar(1)
    def __sub__(self, other):
        return self._op(_C.crypto_core_ristretto255_scalar_sub, other)

    @force_Scalar(1)
    def __rsub__(self, other):
        return other._op(_C.crypto_core_ristretto255_scalar_sub, self)

    @force_Scalar(1)
    def __mul__(self, other):
        return self._op(_C.crypto_core_ristretto255_scalar_mul, other)

    @force_Scalar(1)
    def __rmul__(self, other):
        return other._op(_C.crypto_core_ristretto255_scalar_mul, self)

    def __neg__(self):
        out = _out()
        _C.crypto_core_ristretto255_scalar_negate(out, self.sc)
        return Scalar._wrap(_read(out))

    @force_Scalar(1)
    def __eq__(self, other):
        return secure_compare(self.sc, other.sc)

    def __ne__(self, other):
        eq = self.__eq__(other)
        if eq is NotImplemented:
            return eq
        return not eq

    def __hash__(self):
        return hash(int(self))

    def __int__(self):
        return int.from_bytes(self.sc, "little")

    def __bool__(self):
        return self.sc != b"\x00" * Const.SCALAR_BYTES

    def __copy__(self):
        return self

    def __deepcopy__(self, memento):
        # pylint: disable=unused-argument
        return self

    def __repr__(self):
        return "Scalar(%s)" % hexlify(self.sc).decode("utf8")


def _valid_point(pbin):
    return _C.crypto_core_ristretto255_is_valid_point(pbin) == 1


def _mult_result(ret, out, pt=None):
    if ret != 0 and pt is not None and not _valid_point(pt):
        raise PointMalformed()

    res = _read(out)
    # An identity result is reported as -1, but its encoding is still written.
    if ret != 0 and res != _IDENTITY:
        _check(ret)
    return RistrettoPt._wrap(res)


class RistrettoPt(object):
    """A Ristretto255 group element, supporting addition, subtraction,
    negation and multiplication with a scalar. Held in its canonical 32 byte
    encoding, so two points are equal exactly when their encodings are.
    """

    __slots__ = ["pt"]

    @staticmethod
    def from_binary(sbin):
        """Decompresses an untrusted 32 byte point encoding.

        Raises:
            PointMalformed: if the input is not exactly 32 bytes holding a
                canonical Ristretto255 encoding.

        Example:
            >>> G = RistrettoGroup()
            >>> byte_string = G.generator().export()
            >>> RistrettoPt.from_binary(byte_string) == G.generator()
            True
        """
        if not isinstance(sbin, (bytes, bytearray)) or len(sbin) != Const.POINT_BYTES:
            raise PointMalformed()

        sbin = bytes(sbin)
        if not _valid_point(sbin):
            raise PointMalformed()

        return RistrettoPt._wrap(sbin)

    @staticmethod
    def _wrap(pbin):
        p = RistrettoPt.__new__(RistrettoPt)
        p.pt = pbin
        return p

    def __init__(self):
        'The identity element. Use from_binary to build a point from its encoding.'
        self.pt = _IDENTITY

    def pt_add(self, other):
        """Adds two points together. Synonym with self + other."""
        return self.__add__(other)

    def __add__(self, other):
        if not isinstance(other, RistrettoPt):
            return NotImplemented

        out = _out(Const.POINT_BYTES)
        _check(_C.crypto_core_ristretto255_add(out, self.pt, other.pt))
        return RistrettoPt._wrap(_read(out))

    def __sub__(self, other):
        if not isinstance(other, RistrettoPt):
            return NotImplemented

        out = _out(Const.POINT_BYTES)
        _check(_C.crypto_core_ristretto255_sub(out, self.pt, other.pt))
        return RistrettoPt._wrap(_read(out))

    def pt_neg(self):
        """Returns the negative of the point. Synonym with -self."""
        return self.__neg__()

    def __neg__(self):
        return RistrettoPt() - self

    def pt_mul(self, scalar):
        """Returns the product of the point with a scalar. Synonym with scalar * self.

        Example:
            >>> g = RistrettoGroup().generator()
            >>> 100 * g == g.pt_mul(100) == Scalar(100) * g
            True
        """
        return self.__rmul__(scalar)

    @force_Scalar(1)
    def __rmul__(self, other):
        out = _out(Const.POINT_BYTES)
        ret = _C.crypto_scalarmult_ristretto255(out, other.sc, self.pt)
        return _mult_result(ret, out, self.pt)

    def __eq__(self, other):
        if not isinstance(other, RistrettoPt):
            return NotImplemented
        return self.pt == other.pt

    def __ne__(self, other):
        if not isinstance(other, RistrettoPt):
            return NotImplemented
        return self.pt != other.pt

    def ct_eq(self, other):
        """Equality in constant time."""
        return secure_compare(self.pt, other.pt)

    def __hash__(self):
        return self.pt.__hash__()

    def export(self):
        """Returns the canonical 32 byte encoding of the point."""
        return self.pt

    binary = export

    def is_infinite(self):
        """Returns True if this is the identity element, otherwise False."""
        return self.pt == _IDENTITY

    def __copy__(self):
        return self

    def __deepcopy__(self, memento):
        # pylint: disable=unused-argument
        return self

    def __str__(self):
        return hexlify(self.pt).decode("utf8")

    def __repr__(self):
        return "RistrettoPt(%s)" % self.__str__()


class RistrettoGroup(object):
    """The prime order Ristretto255 group, built over edwards25519.

    Example:
        >>> G = RistrettoGroup()
        >>> hexlify(G.generator().export()).decode("utf8")
        'e2f2ae0a6abc4e71a884a961c500515f58e30b6aa582dd8db6a65945e08d2d76'
        >>> G.order() * G.generator() == G.infinite()
        True
    """

    _gen = None

    def generator(self):
        """Returns the standard generator (base point)."""
        if RistrettoGroup._gen is None:
            RistrettoGroup._gen = self.base_mul(Scalar(1))
        return RistrettoGroup._gen

    def infinite(self):
        """Returns the identity element."""
        return RistrettoPt()

    def order(self):
        """Returns the order of the group as a python integer."""
        return GROUP_ORDER

    @force_Scalar(1)
    def base_mul(self, scalar):
        """Multiplies the generator by a scalar, using the fixed-base tables."""
        out = _out(Const.POINT_BYTES)
        ret = _C.crypto_scalarmult_ristretto255_base(out, scalar.sc)
        return _mult_result(ret, out)

    def check_point(self, sbin):
        """Returns True if the bytes are a valid point encoding."""
        try:
            RistrettoPt.from_binary(sbin)
        except PointMalformed:
            return False
        return True

    def __eq__(self, other):
        return isinstance(other, RistrettoGroup)

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(RistrettoGroup)

    def __repr__(self):
        return "RistrettoGroup()"


## Ignore some lint warning in tests
# pylint: disable=unused-variable

# Encodings that must be rejected: a field element >= p, a negative (odd)
# field element and the scalar l itself.
_BAD_POINT_FF = b"\xff" * 32
_BAD_POINT_NEG = b"\x01" + b"\x00" * 31
_ORDER_BYTES = GROUP_ORDER.to_bytes(32, "little")


def test_scalar_arithmetic():
    assert Scalar(2) + Scalar(3) == Scalar(5)
    assert Scalar(2) + 3 == 5
    assert 3 + Scalar(2) == Scalar(5)
    assert Scalar(2) - 3 == Scalar(-1)
    assert 2 - Scalar(3) == -Scalar(1)
    assert Scalar(7) * 6 == Scalar(42)
    assert 6 * Scalar(7) == Scalar(42)
    assert Scalar(GROUP_ORDER) == Scalar(0)
    assert int(Scalar(GROUP_ORDER + 5)) == 5
    assert -Scalar(0) == Scalar(0)
    assert Scalar(5) != Scalar(6)
    assert not Scalar(0)
    assert Scalar(1)


def test_scalar_hash():
    assert Scalar(7) == 7
    assert hash(Scalar(7)) == hash(7)
    assert {Scalar(7): 1}.get(7) == 1
    assert {7: 1}.get(Scalar(7 + GROUP_ORDER)) == 1


def test_scalar_matches_python_ints():
    xs = [Scalar.random() for _ in range(20)]
    ys = [Scalar.random() for _ in range(20)]

    for x, y in zip(xs, ys):
        assert int(x + y) == (int(x) + int(y)) % GROUP_ORDER
        assert int(x - y) == (int(x) - int(y)) % GROUP_ORDER
        assert int(x * y) == (int(x) * int(y)) % GROUP_ORDER
        assert int(-x) == (-int(x)) % GROUP_ORDER


def test_scalar_io():
    x = Scalar.random()
    assert len(x.export()) == 32
    assert Scalar.from_binary(x.export()) == x
    assert Scalar.from_binary(bytearray(x.export())) == x

    top = (GROUP_ORDER - 1).to_bytes(32, "little")
    assert int(Scalar.from_binary(top)) == GROUP_ORDER - 1


def test_scalar_malformed():
    for bad in [_ORDER_BYTES, b"\xff" * 32, b"\x00" * 31, b"\x00" * 33, b"", None, 5]:
        with pytest.raises(ScalarMalformed):
            Scalar.from_binary(bad)

    # Non-canonical encodings of small values are not coerced.
    plus_one = (GROUP_ORDER + 1).to_bytes(32, "little")
    with pytest.raises(ScalarMalformed):
        Scalar.from_binary(plus_one)


def test_scalar_from_hash():
    from hashlib import sha512
    d = sha512(b"Hello").digest()
    assert int(Scalar.from_hash(d)) == int.from_bytes(d, "little") % GROUP_ORDER
    assert Scalar.from_hash(b"\x00" * 64) == 0

    with pytest.raises(ValueError):
        Scalar.from_hash(b"\x00" * 32)


def test_scalar_random_uses_rng():
    s1 = Scalar.random(lambda n: b"\x07" * n)
    s2 = Scalar.random(lambda n: b"\x07" * n)
    assert s1 == s2
    assert Scalar.random() != Scalar.random()


def test_ec_arithmetic():
    G = RistrettoGroup()
    g = G.generator()
    assert g + g == g + g
    assert g + g == 2 * g
    assert g + g == Scalar(2) * g
    assert g + g != g + g + g
    assert g + (-g) == G.infinite()
    assert g - g == G.infinite()
    assert (G.order() - 1) * g == -g
    assert G.base_mul(10) == 10 * g

    d = {}
    d[2 * g] = 2
    assert d[2 * g] == 2

    ## Test long names
    assert (g + g) == g.pt_add(g)
    assert -g == g.pt_neg()
    assert 10 * g == g.pt_mul(10)

    assert len(str(g)) == 64
    assert "RistrettoPt" in repr(g)


def test_ec_identity():
    G = RistrettoGroup()
    g = G.generator()
    i = G.infinite()

    assert i.is_infinite()
    assert not g.is_infinite()
    assert 0 * g == i
    assert G.base_mul(0) == i
    assert g + i == g
    assert 5 * i == i
    assert i.export() == b"\x00" * 32
    assert RistrettoPt.from_binary(i.export()) == i


def test_ec_constructor():
    assert RistrettoPt() == RistrettoGroup().infinite()

    # Encodings only enter through from_binary.
    with pytest.raises(TypeError):
        RistrettoPt(b"\x01")


def test_ec_mul_invalid_point():
    for bad in [_BAD_POINT_FF, _BAD_POINT_NEG]:
        pt = RistrettoPt._wrap(bad)
        with pytest.raises(PointMalformed):
            2 * pt
        with pytest.raises(PointMalformed):
            pt.pt_mul(Scalar(0))


def test_ec_io():
    G = RistrettoGroup()
    g = G.generator()
    h = Scalar.random() * g

    assert len(g.export()) == 32
    assert RistrettoPt.from_binary(g.export()) == g
    assert RistrettoPt.from_binary(h.export()) == h
    assert G.check_point(h.export())


def test_ec_malformed():
    G = RistrettoGroup()
    for bad in [_BAD_POINT_FF, _BAD_POINT_NEG, b"\x00" * 31, b"\x00" * 33, b"", None]:
        with pytest.raises(PointMalformed):
            RistrettoPt.from_binary(bad)
        assert not G.check_point(bad)


def test_ct_eq():
    g = RistrettoGroup().generator()
    assert g.ct_eq(g)
    assert not g.ct_eq(2 * g)
    assert Scalar(5) == Scalar(5)


def test_cmp():
    assert secure_compare(b"Hello", b"Hello")
    assert not secure_compare(b"Hello", b"Hellx")
    assert not secure_compare(b"Hello", b"Hell")

    with pytest.raises(TypeError):
        secure_compare(b"Hello", 2)


def test_check():
    with pytest.raises(Exception) as excinfo:
        _check(-1)
    assert 'Ristretto255' in str(excinfo.value)

    _check(0)

# pylint: enable=unused-variable
