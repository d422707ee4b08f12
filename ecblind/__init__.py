# The ecblind version
VERSION = '0.1.0'

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = ["bindings", "errors", "rand", "group", "keypair", "session", "request",
           "signature", "wire"]

def run_tests():
    # These are only needed in case we test
    import pytest
    import os.path
    import glob

    # List all ecblind files in the directory
    ecblind_dir = os.path.dirname(os.path.realpath(__file__))
    pyfiles = glob.glob(os.path.join(ecblind_dir, '*.py'))

    # Run the test suite
    print("Directory: %s" % pyfiles)
    res = pytest.main(["-v", "-x", "--doctest-modules"] + pyfiles)
    print("Result: %s" % res)

    # Return exit result
    return res
