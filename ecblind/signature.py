""" The unblinded signature, and its verification.

A signature is the triple (e, s, r): the challenge e = H(r || msg), the
unblinded signature value s and the unblinded commitment r. It authenticates
against the public key Q of the signer when

    s * G == e * Q + r

Both sides of the equation are public, so ``authenticate`` compares them in
variable time; ``const_authenticate`` does the same check in constant time.

Neither proves anything about which message was signed: they only show that
(e, s, r) is self-consistent. To bind a signature to a message use
``message_authenticate`` or ``message_const_authenticate``, which ignore the
stored e and derive it again from r and the message.
"""

from hashlib import sha512

from .group import Scalar, RistrettoPt, RistrettoGroup

import pytest


def _as_bytes(msg):
    if isinstance(msg, str):
        return msg.encode("utf8")
    if isinstance(msg, (bytes, bytearray, memoryview)):
        return bytes(msg)
    raise TypeError("A message is bytes or str, not %s" % type(msg).__name__)


def derive_challenge(r, msg, hash_fn=sha512):
    """Computes the challenge e = H(r || msg), reduced to a scalar.

    Args:
        r (RistrettoPt): the unblinded commitment.
        msg (bytes or str): the message; strings are UTF-8 encoded.
        hash_fn: a hashlib style constructor with a 64 byte digest.

    Example:
        >>> from hashlib import sha512
        >>> r = RistrettoGroup().generator()
        >>> e = derive_challenge(r, b"Hello")
        >>> e == Scalar.from_hash(sha512(r.export() + b"Hello").digest())
        True
    """
    h = hash_fn()
    if h.digest_size != 64:
        raise ValueError("The challenge needs a 512 bit hash, %s has %d bits"
                         % (h.name, 8 * h.digest_size))
    h.update(r.export())
    h.update(_as_bytes(msg))
    return Scalar.from_hash(h.digest())


class SignatureTriple(object):
    """ The immutable (e, s, r) signature produced at protocol completion. """

    __slots__ = ["_e", "_s", "_r"]

    def __init__(self, e, s, r):
        object.__setattr__(self, "_e", e)
        object.__setattr__(self, "_s", s)
        object.__setattr__(self, "_r", r)

    def __setattr__(self, name, value):
        raise AttributeError("SignatureTriple is immutable")

    @property
    def e(self):
        """The challenge H(r || msg)."""
        return self._e

    @property
    def s(self):
        """The unblinded signature value."""
        return self._s

    @property
    def r(self):
        """The unblinded commitment."""
        return self._r

    def _sides(self, pub_key, e):
        G = RistrettoGroup()
        lhs = G.base_mul(self._s)
        rhs = e * pub_key + self._r
        return lhs, rhs

    def authenticate(self, pub_key):
        """Checks s * G == e * Q + r for the public key Q. Not constant
        time, which is fine as neither side holds secret information.

        Returns:
            bool: True if the signature is valid under pub_key.
        """
        lhs, rhs = self._sides(pub_key, self._e)
        return lhs == rhs

    def const_authenticate(self, pub_key):
        """Same as authenticate, but compares in constant time."""
        lhs, rhs = self._sides(pub_key, self._e)
        return lhs.ct_eq(rhs)

    def message_authenticate(self, pub_key, msg, hash_fn=sha512):
        """Same as authenticate, with e derived as H(r || msg) instead of
        the stored value. The stored e is not used at all, and is not
        guaranteed to match H(r || msg)."""
        e = derive_challenge(self._r, msg, hash_fn)
        lhs, rhs = self._sides(pub_key, e)
        return lhs == rhs

    def message_const_authenticate(self, pub_key, msg, hash_fn=sha512):
        """Same as message_authenticate, but compares in constant time."""
        e = derive_challenge(self._r, msg, hash_fn)
        lhs, rhs = self._sides(pub_key, e)
        return lhs.ct_eq(rhs)

    def __eq__(self, other):
        if not isinstance(other, SignatureTriple):
            return NotImplemented
        return (self._e == other._e and self._s == other._s
                and self._r == other._r)

    def __ne__(self, other):
        eq = self.__eq__(other)
        if eq is NotImplemented:
            return eq
        return not eq

    def __hash__(self):
        return hash((self._e, self._s, self._r))

    def __copy__(self):
        return self

    def __deepcopy__(self, memento):
        # pylint: disable=unused-argument
        return self

    def __repr__(self):
        return "SignatureTriple(e=%r, s=%r, r=%r)" % (self._e, self._s, self._r)


## Ignore some lint warning in tests
# pylint: disable=unused-variable

def _direct_signature(msg=b"Hello", x=None):
    # A signature made with the signer knowing the challenge, no blinding.
    G = RistrettoGroup()
    x = x if x is not None else Scalar.random()
    k = Scalar.random()
    r = G.base_mul(k)
    e = derive_challenge(r, msg)
    return x, SignatureTriple(e, x * e + k, r)


def test_authenticate():
    G = RistrettoGroup()
    x, sig = _direct_signature()
    pub = G.base_mul(x)

    assert sig.authenticate(pub)
    assert sig.const_authenticate(pub)
    assert sig.message_authenticate(pub, b"Hello")
    assert sig.message_const_authenticate(pub, b"Hello")
    assert sig.message_authenticate(pub, u"Hello")


def test_authenticate_fail():
    G = RistrettoGroup()
    x, sig = _direct_signature()
    pub = G.base_mul(x)
    other = G.base_mul(Scalar.random())

    assert not sig.authenticate(other)
    assert not sig.const_authenticate(other)
    assert not sig.message_authenticate(pub, b"Hellx")
    assert not sig.message_const_authenticate(pub, b"Hellx")

    forged = SignatureTriple(sig.e, sig.s + 1, sig.r)
    assert not forged.authenticate(pub)
    assert not forged.const_authenticate(pub)


def test_self_consistent_but_unbound():
    # Any e can be made to satisfy the equation, so the plain check says
    # nothing about which message was signed.
    G = RistrettoGroup()
    x, sig = _direct_signature(b"Hello")
    pub = G.base_mul(x)
    e = Scalar.random()
    k = Scalar.random()
    loose = SignatureTriple(e, x * e + k, G.base_mul(k))

    assert loose.authenticate(pub)
    assert not loose.message_authenticate(pub, b"Hello")


def test_challenge_message_types():
    r = RistrettoGroup().generator()
    e = derive_challenge(r, b"\x00\x00\x00")
    assert derive_challenge(r, bytearray(3)) == e
    assert derive_challenge(r, memoryview(b"\x00\x00\x00")) == e

    # No integer is read as a run of zero bytes.
    for bad in [3, 10**12, None, [0, 0, 0]]:
        with pytest.raises(TypeError):
            derive_challenge(r, bad)

    x, sig = _direct_signature(b"\x00\x00\x00")
    with pytest.raises(TypeError):
        sig.message_authenticate(RistrettoGroup().base_mul(x), 3)


def test_challenge_hash_fn():
    from hashlib import sha3_512, sha256
    r = RistrettoGroup().generator()
    assert derive_challenge(r, b"m", sha3_512) != derive_challenge(r, b"m")
    assert derive_challenge(r, b"m") == derive_challenge(r, u"m")

    with pytest.raises(ValueError) as excinfo:
        derive_challenge(r, b"m", sha256)
    assert '512 bit' in str(excinfo.value)

    G = RistrettoGroup()
    x = Scalar.random()
    k = Scalar.random()
    e = derive_challenge(G.base_mul(k), b"m", sha3_512)
    sig = SignatureTriple(e, x * e + k, G.base_mul(k))
    assert sig.message_authenticate(G.base_mul(x), b"m", sha3_512)
    assert not sig.message_authenticate(G.base_mul(x), b"m")


def test_immutable_and_hashable():
    x, sig = _direct_signature()
    with pytest.raises(AttributeError):
        sig.e = Scalar(1)

    sig2 = SignatureTriple(sig.e, sig.s, sig.r)
    assert sig == sig2
    assert not (sig != sig2)
    assert {sig: 1}[sig2] == 1
    assert "SignatureTriple" in repr(sig)


def test_timing_variants_agree():
    G = RistrettoGroup()
    keys = [G.base_mul(Scalar.random()) for _ in range(10)]

    for i in range(1000):
        if i % 2 == 0:
            x, sig = _direct_signature(b"msg %d" % i)
            pub = G.base_mul(x) if i % 4 == 0 else keys[i % 10]
        else:
            sig = SignatureTriple(Scalar.random(), Scalar.random(),
                                  G.base_mul(Scalar.random()))
            pub = keys[i % 10]

        assert sig.authenticate(pub) == sig.const_authenticate(pub)
        assert (sig.message_authenticate(pub, b"msg %d" % i) ==
                sig.message_const_authenticate(pub, b"msg %d" % i))

# pylint: enable=unused-variable
