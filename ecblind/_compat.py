import os
import platform
import warnings


# Environment variable naming the libsodium shared library to load.
SODIUM_LIBRARY_ENV = "ECBLIND_SODIUM_LIBRARY"

# Ristretto255 landed in libsodium 1.0.18, which ships library version 10.3.
MIN_LIBRARY_VERSION = (10, 3)


class SodiumVersion:
    V1_0_18 = "1_0_18"
    LATER = "later"


def sodium_library_names():
    """Returns the candidate names for the libsodium shared library, most
    specific first. An explicit ECBLIND_SODIUM_LIBRARY always wins."""

    override = os.environ.get(SODIUM_LIBRARY_ENV)
    if override:
        return [override]

    if platform.system() == "Windows":
        return ["libsodium", "sodium"]
    if platform.system() == "Darwin":
        return ["sodium", "libsodium.dylib",
                "/usr/local/lib/libsodium.dylib",
                "/opt/homebrew/lib/libsodium.dylib"]

    return ["sodium", "libsodium.so", "libsodium.so.26", "libsodium.so.23"]


def open_sodium(ffi):
    """dlopen the first libsodium candidate that loads."""

    errors = []
    for name in sodium_library_names():
        try:
            return ffi.dlopen(name), name
        except OSError as e:
            errors.append("%s: %s" % (name, e))

    raise OSError("Cannot load libsodium (set %s to its path). Tried: %s"
                  % (SODIUM_LIBRARY_ENV, "; ".join(errors)))


def has_ristretto(lib):
    try:
        lib.crypto_core_ristretto255_add
    except AttributeError:
        return False
    return True


def get_sodium_version(lib, warn=False):
    """Returns the libsodium version family that is used for bindings."""

    version = (int(lib.sodium_library_version_major()),
               int(lib.sodium_library_version_minor()))

    if version < MIN_LIBRARY_VERSION or not has_ristretto(lib):
        raise OSError(
            "System libsodium (library version %d.%d) has no Ristretto255 "
            "support. Please upgrade to libsodium 1.0.18 or later." % version)

    if version == MIN_LIBRARY_VERSION:
        return SodiumVersion.V1_0_18

    if warn and version[0] > 26:
        warnings.warn(
            "System libsodium library version %d.%d is newer than any tested. "
            "Attempting to use it in 1.0.18 mode." % version)
    return SodiumVersion.LATER
