#!/usr/bin/env python3

# Copyright (C) 2017-2022 The btclib developers
#
# This file is part of btclib. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btclib including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `btclib_braid.multisig` and `btclib_braid.braid_multisig` modules."

from typing import List

import pytest
from btclib import b32, b58
from btclib.exceptions import BTClibValueError
from btclib.script import ScriptPubKey

from btclib_braid.braid import Braid
from btclib_braid.braid_multisig import multisig_at_index, multisig_at_path
from btclib_braid.derivation import bip32_derivations_at_index, pub_keys_at_index
from btclib_braid.exceptions import (
    BranchMismatchError,
    InvalidPathError,
    UpstreamDerivationError,
)
from btclib_braid.multisig import (
    MULTISIG_ADDRESS_TYPES,
    P2SH,
    P2SH_P2WSH,
    P2WSH,
    multisig_from_pub_keys,
)
from btclib_braid.xpub import ExtendedPublicKey
from conftest import Cosigner, cosigner_from_seed


def test_multisig(cosigners: List[Cosigner]) -> None:

    assert MULTISIG_ADDRESS_TYPES == ("P2SH", "P2SH-P2WSH", "P2WSH")

    pub_keys = sorted(cosigner.pub_key("0/5") for cosigner in cosigners[:3])
    keys = [bytes.fromhex(pub_key) for pub_key in pub_keys]
    ms = ScriptPubKey.p2ms(2, keys, "testnet", lexicographic_sorting=False).script

    multisig = multisig_from_pub_keys("testnet", P2SH, 2, *pub_keys)
    assert multisig.network == "testnet"
    assert multisig.address_type == P2SH
    assert multisig.required_signers == 2
    assert multisig.total_signers == 3
    assert multisig.pub_keys == tuple(keys)
    assert multisig.multisig_script == ms
    assert multisig.redeem_script == ms
    assert multisig.witness_script == b""
    assert multisig.script_pub_key == ScriptPubKey.p2sh(ms, "testnet").script
    assert multisig.address == b58.p2sh(ms, "testnet")
    assert multisig.address.startswith("2")

    multisig = multisig_from_pub_keys("testnet", P2SH_P2WSH, 2, *pub_keys)
    assert multisig.witness_script == ms
    assert multisig.redeem_script[:2] == b"\x00\x20"
    assert len(multisig.redeem_script) == 34
    assert multisig.address == b58.p2wsh_p2sh(ms, "testnet")
    assert multisig.address.startswith("2")

    multisig = multisig_from_pub_keys("testnet", P2WSH, 2, *pub_keys)
    assert multisig.witness_script == ms
    assert multisig.redeem_script == b""
    assert multisig.script_pub_key == ScriptPubKey.p2wsh(ms, "testnet").script
    assert multisig.address == b32.p2wsh(ms, "testnet")
    assert multisig.address.startswith("tb1q")

    # same script, different network
    multisig = multisig_from_pub_keys("mainnet", P2WSH, 2, *keys)
    assert multisig.witness_script == ms
    assert multisig.address == b32.p2wsh(ms, "mainnet")
    assert multisig.address.startswith("bc1q")
    multisig = multisig_from_pub_keys("regtest", P2WSH, 2, *keys)
    assert multisig.address.startswith("bcrt1q")


def test_key_order_is_preserved(cosigners: List[Cosigner]) -> None:

    pub_keys = sorted(cosigner.pub_key("0/5") for cosigner in cosigners[:3])
    multisig = multisig_from_pub_keys("testnet", P2WSH, 2, *pub_keys)
    multisig2 = multisig_from_pub_keys("testnet", P2WSH, 2, *pub_keys[::-1])
    assert multisig2.pub_keys == multisig.pub_keys[::-1]
    assert multisig2.witness_script != multisig.witness_script
    assert multisig2.address != multisig.address


def test_invalid_multisig(cosigners: List[Cosigner]) -> None:

    pub_keys = sorted(cosigner.pub_key("0/5") for cosigner in cosigners[:3])

    for m in (0, 4):
        with pytest.raises(BTClibValueError, match="invalid m in m-of-n: "):
            multisig_from_pub_keys("testnet", P2WSH, m, *pub_keys)

    with pytest.raises(BTClibValueError, match="invalid address type: "):
        multisig_from_pub_keys("testnet", "P2PKH", 2, *pub_keys)

    with pytest.raises(BTClibValueError, match="unknown network: "):
        multisig_from_pub_keys("bogusnet", P2WSH, 2, *pub_keys)

    with pytest.raises(BTClibValueError):
        multisig_from_pub_keys("testnet", P2WSH, 1, pub_keys[0][:-2])

    with pytest.raises(BTClibValueError, match="no public keys"):
        multisig_from_pub_keys("testnet", P2WSH, 1)


def test_multisig_at_index(xpubs: List[ExtendedPublicKey]) -> None:

    for address_type in MULTISIG_ADDRESS_TYPES:
        braid = Braid("testnet", address_type, xpubs, 2, "0")
        braid_multisig = multisig_at_index(braid, 5)
        assert braid_multisig == multisig_at_path(braid, "0/5")
        assert braid_multisig == multisig_at_path(braid, "m/0/5")

        multisig = braid_multisig.multisig
        pub_keys = pub_keys_at_index(braid, 5)
        assert multisig.pub_keys == tuple(bytes.fromhex(k) for k in pub_keys)
        assert multisig == multisig_from_pub_keys(
            "testnet", address_type, 2, *pub_keys
        )
        assert braid_multisig.address == multisig.address
        assert braid_multisig.script_pub_key == multisig.script_pub_key

        assert braid_multisig.braid_details == braid.to_json()
        assert braid_multisig.braid == braid

        bip32_derivs = braid_multisig.bip32_derivations
        assert bip32_derivs == tuple(bip32_derivations_at_index(braid, 5))
        assert [d.pub_key for d in bip32_derivs] == list(multisig.pub_keys)

    braid = Braid("testnet", P2WSH, xpubs, 2, "0")
    assert multisig_at_index(braid, 6).address != multisig_at_index(braid, 5).address
    change = Braid("testnet", P2WSH, xpubs, 2, "1")
    assert multisig_at_index(change, 5).address != multisig_at_index(braid, 5).address


def test_multisig_is_permutation_invariant(xpubs: List[ExtendedPublicKey]) -> None:

    braid = Braid("testnet", P2SH_P2WSH, xpubs, 2, "0")
    braid2 = Braid("testnet", P2SH_P2WSH, xpubs[::-1], 2, "0")
    braid_multisig = multisig_at_index(braid, 0)
    braid_multisig2 = multisig_at_index(braid2, 0)
    assert braid_multisig2.multisig == braid_multisig.multisig
    assert braid_multisig2.bip32_derivations == braid_multisig.bip32_derivations
    # the braid details keep the provided order
    assert braid_multisig2.braid_details != braid_multisig.braid_details
    assert braid_multisig2.braid == braid2


def test_invalid_multisig_at_path(xpubs: List[ExtendedPublicKey]) -> None:

    braid = Braid("testnet", P2WSH, xpubs, 2, "0")

    with pytest.raises(BranchMismatchError):
        multisig_at_path(braid, "1/5")
    with pytest.raises(InvalidPathError):
        multisig_at_path(braid, "0//5")
    with pytest.raises(InvalidPathError):
        multisig_at_index(braid, 0x80000000)
    with pytest.raises(UpstreamDerivationError):
        multisig_at_path(braid, "0/5'")


def test_too_many_keys() -> None:

    seeds = [bytes([i]) * 16 for i in range(1, 18)]
    handles = [cosigner_from_seed(seed.hex()).extended_public_key for seed in seeds]
    # braids do not cap the number of keys
    braid = Braid("testnet", P2WSH, handles, 2, "0")
    assert len(pub_keys_at_index(braid, 0)) == 17

    with pytest.raises(UpstreamDerivationError, match="multisig failure at ") as e:
        multisig_at_index(braid, 0)
    assert isinstance(e.value.__cause__, BTClibValueError)

    braid = Braid("testnet", P2WSH, handles[:16], 2, "0")
    assert multisig_at_index(braid, 0).multisig.total_signers == 16
