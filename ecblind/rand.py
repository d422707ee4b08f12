"""The secure randomness capability.

Every operation that creates a secret (a keypair, a signer session or a
requester blinder) takes an ``rng`` argument: a callable that, given a number
of bytes ``n``, returns exactly ``n`` bytes from a cryptographically secure
source. ``None`` selects the operating system source. Tests inject their own
deterministic source instead.

Example:
    >>> len(draw(None, 64))
    64
    >>> draw(lambda n: b"\\x00" * n, 4)
    b'\\x00\\x00\\x00\\x00'
"""

import os
import logging

from .errors import RngUnavailable

import pytest

logger = logging.getLogger(__name__)


def system_random(size):
    """The default source: the operating system CSPRNG."""
    return os.urandom(size)


def draw(rng, size):
    """Draw exactly ``size`` bytes from ``rng``, in a single call.

    Raises:
        RngUnavailable: if the source raises any exception, or returns
            anything other than ``size`` bytes. There is no fallback to a
            weaker source.
    """
    if rng is None:
        rng = system_random

    try:
        data = rng(size)
    except Exception as e:
        logger.error("Secure random source failed: %s", e)
        raise RngUnavailable() from e

    if not isinstance(data, (bytes, bytearray)):
        raise RngUnavailable("secure random source returned no bytes")

    if len(data) != size:
        raise RngUnavailable("secure random source returned %d bytes, expected %d"
                             % (len(data), size))

    return bytes(data)


def test_system_random():
    a = draw(None, 32)
    b = draw(system_random, 32)
    assert len(a) == len(b) == 32
    assert a != b


def test_failing_source():
    def broken(size):
        raise OSError("no entropy")

    with pytest.raises(RngUnavailable) as excinfo:
        draw(broken, 32)
    assert 'randomness' in str(excinfo.value)

    def missing(size):
        raise NotImplementedError()

    with pytest.raises(RngUnavailable):
        draw(missing, 32)


def test_short_source():
    with pytest.raises(RngUnavailable) as excinfo:
        draw(lambda n: b"\x01" * (n - 1), 32)
    assert '31' in str(excinfo.value)

    with pytest.raises(RngUnavailable):
        draw(lambda n: None, 32)


def test_any_source_failure():
    def faulty(size):
        raise RuntimeError("device gone")

    with pytest.raises(RngUnavailable) as excinfo:
        draw(faulty, 32)
    assert isinstance(excinfo.value.__cause__, RuntimeError)
