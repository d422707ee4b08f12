""" The fixed 96 byte wire form of a signature: e || s || r, each component
in its 32 byte canonical encoding.

Example:
    >>> from ecblind.request import _protocol
    >>> kp, _, _, sig = _protocol(b"Hello")
    >>> data = encode_signature(sig)
    >>> len(data)
    96
    >>> decode_signature(data) == sig
    True

"""

from .group import Scalar, RistrettoPt, RistrettoGroup
from .signature import SignatureTriple
from .errors import ScalarMalformed, PointMalformed

import pytest


SIGNATURE_BYTES = 96

_E = slice(0, 32)
_S = slice(32, 64)
_R = slice(64, 96)


def encode_signature(sig):
    """Returns the 96 byte wire form of a SignatureTriple."""
    return sig.e.export() + sig.s.export() + sig.r.export()


def decode_signature(data):
    """Parses the 96 byte wire form into a SignatureTriple. All components
    are parsed before anything is returned; there are no partial results.

    Raises:
        ValueError: if data is not exactly 96 bytes.
        ScalarMalformed: if e or s is not a canonical scalar.
        PointMalformed: if r is not a valid point.
    """
    if not isinstance(data, (bytes, bytearray)) or len(data) != SIGNATURE_BYTES:
        raise ValueError("A wired signature is exactly %d bytes" % SIGNATURE_BYTES)

    data = bytes(data)
    e = Scalar.from_binary(data[_E])
    s = Scalar.from_binary(data[_S])
    r = RistrettoPt.from_binary(data[_R])
    return SignatureTriple(e, s, r)


def _random_signature():
    G = RistrettoGroup()
    return SignatureTriple(Scalar.random(), Scalar.random(), G.base_mul(Scalar.random()))


def test_roundtrip():
    for _ in range(50):
        sig = _random_signature()
        assert decode_signature(encode_signature(sig)) == sig


def test_layout():
    sig = _random_signature()
    data = encode_signature(sig)
    assert data[:32] == sig.e.export()
    assert data[32:64] == sig.s.export()
    assert data[64:] == sig.r.export()


def test_roundtrip_authenticates():
    from .request import _protocol
    kp, _, _, sig = _protocol(b"Hello")
    sig2 = decode_signature(bytearray(encode_signature(sig)))
    assert sig2.authenticate(kp.public())
    assert sig2.message_const_authenticate(kp.public(), b"Hello")


def test_decode_malformed():
    data = encode_signature(_random_signature())
    bad_scalar = b"\xff" * 32
    bad_point = b"\xff" * 32

    with pytest.raises(ScalarMalformed):
        decode_signature(bad_scalar + data[32:])

    with pytest.raises(ScalarMalformed):
        decode_signature(data[:32] + bad_scalar + data[64:])

    with pytest.raises(PointMalformed):
        decode_signature(data[:64] + bad_point)

    for bad in [data[:95], data + b"\x00", b"", None]:
        with pytest.raises(ValueError):
            decode_signature(bad)
