""" Generate and manage the signer's long term keypair.

The private key (x) is used by the signer to answer blinded challenges, and
the public key (Q = x * G) lets anyone authenticate the unblinded signatures.

Example:
    >>> kp = BlindKeypair.generate()
    >>> kp.public() == RistrettoGroup().base_mul(kp.private())
    True
    >>> len(kp.private_wired()), len(kp.public_wired())
    (32, 32)
    >>> BlindKeypair.from_wired(kp.private_wired(), kp.public_wired()) == kp
    True

"""

from .group import Scalar, RistrettoPt, RistrettoGroup
from .errors import ScalarMalformed, PointMalformed

from binascii import hexlify

import pytest


class BlindKeypair(object):
    """An immutable (private, public) keypair."""

    __slots__ = ["_private", "_public"]

    @staticmethod
    def generate(rng=None):
        """Generates a keypair: a uniformly random private scalar x, and the
        public point Q = x * G.

        Args:
            rng: the secure random source, see ``ecblind.rand``.

        Raises:
            RngUnavailable: if the random source cannot be used.
        """
        private = Scalar.random(rng)
        public = RistrettoGroup().base_mul(private)
        return BlindKeypair(private, public)

    @staticmethod
    def from_wired(private, public):
        """Builds a keypair from its two 32 byte encodings, parsed
        independently. Does not check that the public key matches.

        Raises:
            ScalarMalformed: if the private key is not a canonical scalar.
            PointMalformed: if the public key is not a valid point.
        """
        return BlindKeypair(Scalar.from_binary(private),
                            RistrettoPt.from_binary(public))

    def __init__(self, private, public):
        object.__setattr__(self, "_private", private)
        object.__setattr__(self, "_public", public)

    def __setattr__(self, name, value):
        raise AttributeError("BlindKeypair is immutable")

    def private(self):
        """Returns the private key as a Scalar."""
        return self._private

    def public(self):
        """Returns the public key as a RistrettoPt."""
        return self._public

    def private_wired(self):
        """Returns the private key in its 32 byte wire form."""
        return self._private.export()

    def public_wired(self):
        """Returns the public key in its 32 byte wire form."""
        return self._public.export()

    def __eq__(self, other):
        if not isinstance(other, BlindKeypair):
            return NotImplemented
        return self._private == other._private and self._public == other._public

    def __ne__(self, other):
        eq = self.__eq__(other)
        if eq is NotImplemented:
            return eq
        return not eq

    def __hash__(self):
        return hash(self._public)

    def __repr__(self):
        # Never show the private key.
        return "BlindKeypair(public=%s)" % self._public


def test_generate():
    G = RistrettoGroup()
    kp = BlindKeypair.generate()
    assert kp.public() == kp.private() * G.generator()
    assert BlindKeypair.generate().public() != kp.public()
    assert hexlify(kp.private_wired()).decode("utf8") not in repr(kp)


def test_generate_deterministic():
    rng = lambda n: b"\x2a" * n
    assert BlindKeypair.generate(rng) == BlindKeypair.generate(rng)


def test_generate_rng_failure():
    from .errors import RngUnavailable

    def broken(size):
        raise OSError("no entropy")

    with pytest.raises(RngUnavailable):
        BlindKeypair.generate(broken)


def test_wired_roundtrip():
    kp = BlindKeypair.generate()
    kp2 = BlindKeypair.from_wired(kp.private_wired(), kp.public_wired())
    assert kp2.private() == kp.private()
    assert kp2.public() == kp.public()


def test_wired_no_cross_check():
    kp1 = BlindKeypair.generate()
    kp2 = BlindKeypair.generate()
    mixed = BlindKeypair.from_wired(kp1.private_wired(), kp2.public_wired())
    assert mixed.private() == kp1.private()
    assert mixed.public() == kp2.public()


def test_wired_malformed():
    kp = BlindKeypair.generate()

    with pytest.raises(ScalarMalformed):
        BlindKeypair.from_wired(b"\xff" * 32, kp.public_wired())

    with pytest.raises(PointMalformed):
        BlindKeypair.from_wired(kp.private_wired(), b"\xff" * 32)

    with pytest.raises(ScalarMalformed):
        BlindKeypair.from_wired(kp.private_wired()[:31], kp.public_wired())


def test_immutable():
    kp = BlindKeypair.generate()
    with pytest.raises(AttributeError):
        kp._private = Scalar(1)
    with pytest.raises(AttributeError):
        kp.extra = 1
