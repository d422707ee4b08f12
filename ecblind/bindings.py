#!/usr/bin/env python

import logging

import cffi

from ._compat import open_sodium, get_sodium_version, SodiumVersion  # pylint: disable=unused-import

logger = logging.getLogger(__name__)


_SODIUM_DEFS = """
int sodium_init(void);
const char *sodium_version_string(void);
int sodium_library_version_major(void);
int sodium_library_version_minor(void);

int sodium_memcmp(const unsigned char *b1_, const unsigned char *b2_, size_t len);

int crypto_core_ristretto255_is_valid_point(const unsigned char *p);
int crypto_core_ristretto255_add(unsigned char *r,
                                 const unsigned char *p, const unsigned char *q);
int crypto_core_ristretto255_sub(unsigned char *r,
                                 const unsigned char *p, const unsigned char *q);

int crypto_scalarmult_ristretto255(unsigned char *q, const unsigned char *n,
                                   const unsigned char *p);
int crypto_scalarmult_ristretto255_base(unsigned char *q, const unsigned char *n);

void crypto_core_ristretto255_scalar_reduce(unsigned char *r, const unsigned char *s);
void crypto_core_ristretto255_scalar_negate(unsigned char *neg, const unsigned char *s);
void crypto_core_ristretto255_scalar_add(unsigned char *z, const unsigned char *x,
                                         const unsigned char *y);
void crypto_core_ristretto255_scalar_sub(unsigned char *z, const unsigned char *x,
                                         const unsigned char *y);
void crypto_core_ristretto255_scalar_mul(unsigned char *z, const unsigned char *x,
                                         const unsigned char *y);
"""

_FFI = cffi.FFI()
_FFI.cdef(_SODIUM_DEFS)

_C, _LIBRARY_NAME = open_sodium(_FFI)
_SODIUM_VERSION = get_sodium_version(_C, warn=True)


# Store constants
class Const:
    SCALAR_BYTES = 32
    POINT_BYTES = 32
    NONREDUCED_SCALAR_BYTES = 64


def version():
    return _FFI.string(_C.sodium_version_string()).decode("utf8")


class InitSodium(object):

    def __init__(self):
        # 0 on first success, 1 if already initialised, -1 on failure.
        if _C.sodium_init() < 0:
            raise Exception("libsodium failed to initialise")
        logger.debug("Loaded libsodium %s from %s", version(), _LIBRARY_NAME)


_sodium = InitSodium()


def test_double_load():
    _s2 = InitSodium()
    del _s2
    # Nothing bad should happen


def test_version():
    print(version())
    assert version()
    assert _SODIUM_VERSION in (SodiumVersion.V1_0_18, SodiumVersion.LATER)


def test_memcmp():
    assert _C.sodium_memcmp(b"\x01" * 32, b"\x01" * 32, 32) == 0
    assert _C.sodium_memcmp(b"\x01" * 32, b"\x02" * 32, 32) != 0


def test_multithread():
    import threading
    from .group import RistrettoGroup, RistrettoPt

    G = RistrettoGroup()
    g2_s = (2 * G.generator()).export()

    def worker():
        for _ in range(100):
            RistrettoPt.from_binary(g2_s)

    threads = []
    for _ in range(20):
        t = threading.Thread(target=worker)
        threads.append(t)
        t.start()
    for t in threads:
        t.join()
