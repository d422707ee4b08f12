""" The requester side of the protocol.

The requester blinds the signer's commitment R' into a challenge e', and later
unblinds the signer's share S' into a signature the signer cannot link back
to the session. With blinding factors a and b, and the signer's public key Q:

    R  = R' + a * G + b * Q
    e  = H(R || msg)
    e' = e + b              (sent to the signer)
    S' = x * e' + k         (computed by the signer)
    S  = S' + a

so that S * G = x * (e + b) * G + k * G + a * G = e * Q + R.

Example:
    >>> from ecblind.keypair import BlindKeypair
    >>> from ecblind.session import BlindSession
    >>> kp = BlindKeypair.generate()
    >>> rp, session = BlindSession.new()
    >>> ep, request = BlindRequest.new_for_message(rp, kp.public(), b"Hello")
    >>> sp = session.sign(ep, kp.private())
    >>> sig = request.finalize(sp)
    >>> sig.authenticate(kp.public()), sig.message_authenticate(kp.public(), b"Hello")
    (True, True)

"""

import logging
from hashlib import sha512

from .group import Scalar, RistrettoPt, RistrettoGroup
from .bindings import Const
from .rand import draw
from .signature import SignatureTriple, derive_challenge, _as_bytes
from .errors import ScalarMalformed, PointMalformed, SessionConsumed

import pytest

logger = logging.getLogger(__name__)

# Bytes of the random message hashed when the caller gives none.
PLACEHOLDER_BYTES = 32


class BlindRequest(object):
    """A single use requester state, holding the blinding factor a, the
    challenge e, the unblinded commitment R and the message."""

    __slots__ = ["_a", "_e", "_r", "_msg"]

    @staticmethod
    def new(rp, pub_key, rng=None, hash_fn=sha512):
        """Blinds the commitment R' for a request with no specific message.

        A random placeholder message is hashed instead; it is drawn together
        with the blinding factors and kept available through ``message()``.
        Unless the caller keeps it, the resulting signature can only be
        checked with ``authenticate``, not bound to a message.

        See ``new_for_message`` for arguments, return values and errors.
        """
        return BlindRequest._blind(rp, pub_key, None, rng, hash_fn)

    @staticmethod
    def new_for_message(rp, pub_key, msg, rng=None, hash_fn=sha512):
        """Blinds the commitment R' for a request over a specific message.

        Args:
            rp (bytes): the 32 byte commitment R' received from the signer.
            pub_key (RistrettoPt): the signer's public key Q.
            msg (bytes or str): the message to sign.
            rng: the secure random source, see ``ecblind.rand``.
            hash_fn: a hashlib style constructor with a 64 byte digest.

        Returns:
            bytes, BlindRequest: the 32 byte blinded challenge e' for the
            signer, and the request to finalize the signer's answer with.

        Raises:
            PointMalformed: if rp is not a valid point.
            TypeError: if msg is neither bytes nor str.
            RngUnavailable: if the random source cannot be used.
        """
        return BlindRequest._blind(rp, pub_key, _as_bytes(msg), rng, hash_fn)

    @staticmethod
    def _blind(rp, pub_key, msg, rng, hash_fn):
        rp = RistrettoPt.from_binary(rp)

        size = 2 * Const.NONREDUCED_SCALAR_BYTES
        seed = draw(rng, size if msg is not None else size + PLACEHOLDER_BYTES)
        a = Scalar.from_hash(seed[:Const.NONREDUCED_SCALAR_BYTES])
        b = Scalar.from_hash(seed[Const.NONREDUCED_SCALAR_BYTES:size])
        if msg is None:
            msg = seed[size:]

        r = rp + RistrettoGroup().base_mul(a) + b * pub_key
        e = derive_challenge(r, msg, hash_fn)
        ep = e + b

        logger.debug("Blinded a commitment for a %d byte message", len(msg))
        return ep.export(), BlindRequest(a, e, r, msg)

    def __init__(self, a, e, r, msg):
        self._a = a
        self._e = e
        self._r = r
        self._msg = msg

    def e(self):
        """The unblinded challenge H(R || msg)."""
        return self._e

    def r(self):
        """The unblinded commitment R."""
        return self._r

    def message(self):
        """The signed message, or the random placeholder."""
        return self._msg

    def is_consumed(self):
        return self._a is None

    def finalize(self, sp):
        """Consumes the request and unblinds the signer's share into the
        signature (e, S' + a, R).

        The blinding factor is discarded as soon as this is called, even if
        sp turns out to be malformed.

        Args:
            sp (bytes): the 32 byte share S' received from the signer.

        Returns:
            SignatureTriple: the unblinded signature.

        Raises:
            SessionConsumed: if the request was already finalized.
            ScalarMalformed: if sp is not a canonical scalar.
        """
        if self._a is None:
            logger.warning("Refused to reuse a consumed blind request")
            raise SessionConsumed()

        a, self._a = self._a, None
        s = Scalar.from_binary(sp) + a
        return SignatureTriple(self._e, s, self._r)

    def __repr__(self):
        return "BlindRequest(%s, R=%s)" % (
            "consumed" if self._a is None else "open", self._r)


## Ignore some lint warning in tests
# pylint: disable=unused-variable

def _protocol(msg=None, kp=None, rng=None):
    from .keypair import BlindKeypair
    from .session import BlindSession
    kp = kp or BlindKeypair.generate()
    rp, session = BlindSession.new()
    if msg is None:
        ep, request = BlindRequest.new(rp, kp.public(), rng)
    else:
        ep, request = BlindRequest.new_for_message(rp, kp.public(), msg, rng)
    sp = session.sign(ep, kp.private())
    return kp, (rp, ep, sp), request, request.finalize(sp)


def test_protocol_random_msg():
    for _ in range(20):
        kp, _, request, sig = _protocol()
        assert sig.authenticate(kp.public())
        assert sig.const_authenticate(kp.public())
        assert len(request.message()) == PLACEHOLDER_BYTES
        assert sig.message_authenticate(kp.public(), request.message())


def test_protocol_specific_msg():
    kp, _, request, sig = _protocol(b"specific")
    assert sig.authenticate(kp.public())
    assert sig.message_authenticate(kp.public(), b"specific")
    assert sig.message_const_authenticate(kp.public(), b"specific")
    assert not sig.message_authenticate(kp.public(), b"specifiC")
    assert not sig.message_const_authenticate(kp.public(), b"")
    assert request.message() == b"specific"

    kp, _, _, sig = _protocol(u"text")
    assert sig.message_authenticate(kp.public(), b"text")


def test_protocol_cross_key():
    from .keypair import BlindKeypair
    kp, _, _, sig = _protocol(b"Hello")
    for _ in range(20):
        other = BlindKeypair.generate()
        assert not sig.authenticate(other.public())
        assert not sig.message_authenticate(other.public(), b"Hello")


def test_blinded_values_hide_signature():
    kp, (rp, ep, sp), request, sig = _protocol(b"Hello")
    assert sig.r != RistrettoPt.from_binary(rp)
    assert sig.e != Scalar.from_binary(ep)
    assert sig.s != Scalar.from_binary(sp)
    assert request.e() == sig.e
    assert request.r() == sig.r


def test_degenerate_blinding():
    # With a = b = 0 the blinding is trivial: R = R', e' = e and S = S'.
    from .keypair import BlindKeypair
    from .session import BlindSession
    kp = BlindKeypair.generate()
    zero_rng = lambda n: b"\x00" * n
    rp, session = BlindSession.new()
    ep, request = BlindRequest.new_for_message(rp, kp.public(), b"Hello", zero_rng)

    assert request.r() == RistrettoPt.from_binary(rp)
    assert Scalar.from_binary(ep) == request.e()
    assert request.e() == derive_challenge(RistrettoPt.from_binary(rp), b"Hello")

    sp = session.sign(ep, kp.private())
    sig = request.finalize(sp)
    assert sig.s == Scalar.from_binary(sp)
    assert sig.message_authenticate(kp.public(), b"Hello")


def test_deterministic_rng():
    from .keypair import BlindKeypair
    from .session import BlindSession
    kp = BlindKeypair.generate()
    rp, _ = BlindSession.new()
    rng = lambda n: b"\x05" * n
    ep1, r1 = BlindRequest.new(rp, kp.public(), rng)
    ep2, r2 = BlindRequest.new(rp, kp.public(), rng)
    assert ep1 == ep2
    assert r1.message() == r2.message()


def test_single_draw():
    from .keypair import BlindKeypair
    from .session import BlindSession
    calls = []

    def counting(size):
        calls.append(size)
        return b"\x03" * size

    kp = BlindKeypair.generate()
    rp, _ = BlindSession.new()
    BlindRequest.new(rp, kp.public(), counting)
    BlindRequest.new_for_message(rp, kp.public(), b"m", counting)
    assert calls == [128 + PLACEHOLDER_BYTES, 128]


def test_request_single_use():
    kp, (rp, ep, sp), request, sig = _protocol(b"Hello")
    assert request.is_consumed()

    with pytest.raises(SessionConsumed):
        request.finalize(sp)
    assert "consumed" in repr(request)


def test_request_malformed_inputs():
    from .keypair import BlindKeypair
    from .session import BlindSession
    kp = BlindKeypair.generate()

    with pytest.raises(PointMalformed):
        BlindRequest.new(b"\xff" * 32, kp.public())

    with pytest.raises(PointMalformed):
        BlindRequest.new_for_message(b"\x01" * 31, kp.public(), b"m")

    rp, _ = BlindSession.new()
    _, request = BlindRequest.new(rp, kp.public())
    with pytest.raises(ScalarMalformed):
        request.finalize(b"\xff" * 32)

    # A malformed share still uses up the request.
    with pytest.raises(SessionConsumed):
        request.finalize(Scalar(1).export())


def test_request_message_types():
    from .keypair import BlindKeypair
    from .session import BlindSession
    kp = BlindKeypair.generate()
    rp, _ = BlindSession.new()

    with pytest.raises(TypeError):
        BlindRequest.new_for_message(rp, kp.public(), 3)

    _, _, request, sig = _protocol(bytearray(b"\x00\x00\x00"), kp)
    assert request.message() == b"\x00\x00\x00"
    assert sig.message_authenticate(kp.public(), b"\x00\x00\x00")


def test_request_rng_failure():
    from .keypair import BlindKeypair
    from .session import BlindSession
    from .errors import RngUnavailable

    def broken(size):
        raise OSError("no entropy")

    kp = BlindKeypair.generate()
    rp, _ = BlindSession.new()
    with pytest.raises(RngUnavailable):
        BlindRequest.new(rp, kp.public(), broken)


def test_many_runs_one_key():
    from .keypair import BlindKeypair
    kp = BlindKeypair.generate()
    sigs = [_protocol(b"vote", kp)[3] for _ in range(10)]
    assert all(sig.message_authenticate(kp.public(), b"vote") for sig in sigs)
    assert len(set(sigs)) == 10

# pylint: enable=unused-variable
