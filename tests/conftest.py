#!/usr/bin/env python3

# Copyright (C) 2017-2022 The btclib developers
#
# This file is part of btclib. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btclib including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Test keys: BIP48 P2WSH testnet cosigners generated from known seeds."

from dataclasses import dataclass
from typing import List

import pytest
from btclib.bip32 import BIP32KeyData, derive, rootxprv_from_seed, xpub_from_xprv
from btclib.hashes import hash160
from btclib.network import NETWORKS

from btclib_braid.xpub import ExtendedPublicKey

ACCOUNT_PATH = "m/48'/1'/0'/2'"

SEEDS = [
    "000102030405060708090a0b0c0d0e0f",
    "fffcf9f6f3f0edeae7e4e1dedbd8d5d2cfccc9c6c3c0bdbab7b4b1aeaba8a5a2",
    "4b381541583be4423346c643850da4b320e46a87ae3d2a4e6da11eba819cd4ac",
    "a0a1a2a3a4a5a6a7a8a9aaabacadaeafb0b1b2b3b4b5b6b7b8b9babbbcbdbebf",
]


@dataclass
class Cosigner:
    root_xprv: str
    root_xpub: str
    root_fingerprint: str
    xprv: str
    xpub: str

    @property
    def extended_public_key(self) -> ExtendedPublicKey:
        return ExtendedPublicKey(self.xpub, ACCOUNT_PATH, self.root_fingerprint)

    def pub_key(self, der_path: str) -> str:
        "Return the child public key, derived from the private key."
        xprv = derive(self.xprv, der_path)
        return BIP32KeyData.b58decode(xpub_from_xprv(xprv)).key.hex()


def cosigner_from_seed(seed: str, network: str = "testnet") -> Cosigner:
    root_xprv = rootxprv_from_seed(seed, NETWORKS[network].bip32_prv)
    root_xpub = xpub_from_xprv(root_xprv)
    root_fingerprint = hash160(BIP32KeyData.b58decode(root_xpub).key)[:4].hex()
    xprv = derive(root_xprv, ACCOUNT_PATH)
    return Cosigner(root_xprv, root_xpub, root_fingerprint, xprv, xpub_from_xprv(xprv))


@pytest.fixture(scope="session")
def cosigners() -> List[Cosigner]:
    return [cosigner_from_seed(seed) for seed in SEEDS]


@pytest.fixture(scope="session")
def mainnet_cosigner() -> Cosigner:
    return cosigner_from_seed(SEEDS[0], "mainnet")


@pytest.fixture(scope="session")
def xpubs(cosigners: List[Cosigner]) -> List[ExtendedPublicKey]:
    "Three testnet cosigners, with key origin."
    return [cosigner.extended_public_key for cosigner in cosigners[:3]]
