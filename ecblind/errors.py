"""The exceptions raised by ecblind.

Every failure a caller can provoke with bad input or a bad environment has its
own class, so that callers can tell them apart without parsing messages:

    >>> from ecblind.group import Scalar
    >>> try:
    ...     Scalar.from_binary(b"\\xff" * 32)
    ... except ScalarMalformed as e:
    ...     print(e)
    failed to convert wired scalar to scalar

A failed authentication is not an error: the ``authenticate`` family of
methods simply returns ``False``.
"""

import pytest


class BlindSignatureError(Exception):
    """Base class of all ecblind errors."""

    message = "blind signature error"

    def __init__(self, message=None):
        Exception.__init__(self, message or self.message)


class RngUnavailable(BlindSignatureError):
    """The secure random source could not be used. Never retried."""

    message = "failed to obtain secure randomness"


class ScalarMalformed(BlindSignatureError, ValueError):
    """The bytes are not the canonical 32 byte encoding of a scalar."""

    message = "failed to convert wired scalar to scalar"


class PointMalformed(BlindSignatureError, ValueError):
    """The bytes are not a valid 32 byte Ristretto255 encoding."""

    message = "failed to convert wired ristretto point to ristretto point"


class SessionConsumed(BlindSignatureError):
    """A single use signer session or requester blinder was used twice."""

    message = "session already consumed"


def test_messages():
    assert str(RngUnavailable()) == "failed to obtain secure randomness"
    assert str(ScalarMalformed("custom")) == "custom"
    assert "ristretto point" in str(PointMalformed())
    assert "consumed" in str(SessionConsumed())


def test_hierarchy():
    for cls in [RngUnavailable, ScalarMalformed, PointMalformed, SessionConsumed]:
        assert issubclass(cls, BlindSignatureError)

    with pytest.raises(ValueError):
        raise ScalarMalformed()

    with pytest.raises(ValueError):
        raise PointMalformed()

    assert not issubclass(RngUnavailable, ValueError)
