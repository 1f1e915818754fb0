#!/usr/bin/env python3

from setuptools import setup

setup(
    author="Elias Zamaria",
    description="This package solves the Cryptopals MT19937 challenges using linear "
                "algebra over GF(2).",
    extras_require={"test": ["pytest >= 7.0"]},
    install_requires="pycryptodomex >= 3.4.2",
    license="MIT",
    name="cryptopals-mt19937",
    py_modules=[
        "challenges",
        "linear_algebra",
        "mersenne_twister",
        "mersenne_twister_attacks",
        "util",
    ],
    python_requires=">=3.7",
    version="0.1.0",
)
