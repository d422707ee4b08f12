#!/usr/bin/env python

from setuptools import setup

import ecblind

setup(name='ecblind',
      version=ecblind.VERSION,
      description='Elliptic curve blind signatures over the Ristretto255 group',
      packages=['ecblind'],
      license="2-clause BSD",
      long_description="""A sans-IO library for blind Schnorr signatures over Ristretto255, wrapping the libsodium group operations through cffi""",
      python_requires=">=3.7",

      install_requires=[
            "cffi >= 1.0.0",
            "pytest >= 2.5.0",
      ],
      extras_require={
            "test": [
                  "pytest >= 2.5.0",
                  "pytest-cov >= 1.8.1",
                  "paver >= 1.2.3",
            ],
      },
      zip_safe=False,
)
