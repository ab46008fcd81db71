""" btclib_braid build script for setuptools.

"""

from setuptools import find_packages, setup  # type: ignore

import btclib_braid

with open("README.md", "r", encoding="ascii") as file_:
    longdescription = file_.read()

setup(
    name=btclib_braid.name,
    version=btclib_braid.__version__,
    url="https://btclib.org",
    license=btclib_braid.__license__,
    author=btclib_braid.__author__,
    author_email=btclib_braid.__author_email__,
    description="Multisig wallet braids of BIP32 extended public keys",
    long_description=longdescription,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=["btclib>=2023.5.30,<2024"],
    extras_require={
        "secp256k1": ["btclib_libsecp256k1"],
        "test": ["pytest"],
    },
    keywords=(
        "bitcoin multisig bip32 xpub bip67 bip174 psbt p2sh p2wsh "
        "wallet braid"
    ),
    python_requires=">=3.7",
    classifiers=[
        "Programming Language :: Python :: 3.7",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Topic :: Security :: Cryptography",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
