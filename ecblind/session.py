""" The signer side of the protocol.

The signer opens a session per request, sends the commitment R' to the
requester, and answers the blinded challenge e' it gets back exactly once:

    >>> from ecblind.keypair import BlindKeypair
    >>> kp = BlindKeypair.generate()
    >>> rp, session = BlindSession.new()
    >>> len(rp)
    32
    >>> sp = session.sign(Scalar(5).export(), kp.private())
    >>> Scalar.from_binary(sp) * RistrettoGroup().generator() == 5 * kp.public() + RistrettoPt.from_binary(rp)
    True

Note: no networking is included; how requests reach the signer is up to the
caller.
"""

import logging

from .group import Scalar, RistrettoPt, RistrettoGroup
from .errors import ScalarMalformed, SessionConsumed

import pytest

logger = logging.getLogger(__name__)


class BlindSession(object):
    """A single use signer session, holding the secret nonce k."""

    __slots__ = ["_k"]

    @staticmethod
    def new(rng=None):
        """Opens a session: draws a secret nonce k and returns the
        commitment R' = k * G together with the session.

        Args:
            rng: the secure random source, see ``ecblind.rand``.

        Returns:
            bytes, BlindSession: the 32 byte R' for the requester, and the
            session to answer its challenge with.

        Raises:
            RngUnavailable: if the random source cannot be used.
        """
        k = Scalar.random(rng)
        rp = RistrettoGroup().base_mul(k).export()
        logger.debug("Opened signer session, R'=%s", rp.hex())
        return rp, BlindSession(k)

    def __init__(self, k):
        self._k = k

    def is_consumed(self):
        return self._k is None

    def sign(self, ep, xs):
        """Consumes the session and returns the blind signature share
        S' = xs * e' + k.

        The nonce is discarded as soon as this is called, even if ep turns
        out to be malformed, so it can never sign two challenges.

        Args:
            ep (bytes): the 32 byte blinded challenge e' from the requester.
            xs (Scalar): the signer's private key.

        Returns:
            bytes: the 32 byte share S'.

        Raises:
            SessionConsumed: if the session was already used.
            ScalarMalformed: if ep is not a canonical scalar.
        """
        if self._k is None:
            logger.warning("Refused to reuse a consumed signer session")
            raise SessionConsumed()

        k, self._k = self._k, None
        e = Scalar.from_binary(ep)
        return (xs * e + k).export()

    def __repr__(self):
        return "BlindSession(%s)" % ("consumed" if self._k is None else "open")


def test_session_commitment():
    rp, session = BlindSession.new()
    assert RistrettoGroup().check_point(rp)
    assert not session.is_consumed()
    rp2, _ = BlindSession.new()
    assert rp != rp2


def test_session_sign_math():
    from .keypair import BlindKeypair
    G = RistrettoGroup()
    kp = BlindKeypair.generate()
    rp, session = BlindSession.new()
    ep = Scalar.random()

    sp = Scalar.from_binary(session.sign(ep.export(), kp.private()))
    assert sp * G.generator() == ep * kp.public() + RistrettoPt.from_binary(rp)


def test_session_single_use():
    from .keypair import BlindKeypair
    kp = BlindKeypair.generate()
    _, session = BlindSession.new()
    session.sign(Scalar(1).export(), kp.private())
    assert session.is_consumed()

    with pytest.raises(SessionConsumed):
        session.sign(Scalar(2).export(), kp.private())
    assert "consumed" in repr(session)


def test_session_malformed_challenge_consumes():
    from .keypair import BlindKeypair
    kp = BlindKeypair.generate()
    _, session = BlindSession.new()

    with pytest.raises(ScalarMalformed):
        session.sign(b"\xff" * 32, kp.private())

    with pytest.raises(SessionConsumed):
        session.sign(Scalar(1).export(), kp.private())


def test_session_deterministic_rng():
    rng = lambda n: b"\x11" * n
    rp1, s1 = BlindSession.new(rng)
    rp2, s2 = BlindSession.new(rng)
    assert rp1 == rp2

    xs = Scalar(9)
    assert s1.sign(Scalar(3).export(), xs) == s2.sign(Scalar(3).export(), xs)


def test_session_rng_failure():
    from .errors import RngUnavailable

    with pytest.raises(RngUnavailable):
        BlindSession.new(lambda n: b"")
