#!/usr/bin/env python3

# Copyright (C) 2017-2022 The btclib developers
#
# This file is part of btclib. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btclib including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Multisig script and address from an ordered list of public keys.

The m-of-n multisig script is wrapped according to the address type:

- P2SH: the multisig script is the redeem script
- P2SH-P2WSH: the multisig script is the witness script,
  the v0 witness program is the redeem script
- P2WSH: the multisig script is the witness script

Public keys are used in the order they are provided:
sorting them (BIP67) is up to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from btclib.alias import Octets
from btclib.exceptions import BTClibValueError
from btclib.hashes import sha256
from btclib.network import NETWORKS
from btclib.script import ScriptPubKey, serialize
from btclib.utils import bytes_from_octets

P2SH = "P2SH"
P2SH_P2WSH = "P2SH-P2WSH"
P2WSH = "P2WSH"

MULTISIG_ADDRESS_TYPES = (P2SH, P2SH_P2WSH, P2WSH)


@dataclass(frozen=True)
class Multisig:
    network: str
    address_type: str
    required_signers: int
    pub_keys: Tuple[bytes, ...]
    multisig_script: bytes
    # empty if not used by the address type
    redeem_script: bytes
    witness_script: bytes
    script_pub_key: bytes
    address: str

    @property
    def total_signers(self) -> int:
        return len(self.pub_keys)


def multisig_from_pub_keys(
    network: str, address_type: str, required_signers: int, *pub_keys: Octets
) -> Multisig:
    "Return the m-of-n Multisig of the provided (ordered) public keys."

    if network not in NETWORKS:
        raise BTClibValueError(f"unknown network: {network}")
    if address_type not in MULTISIG_ADDRESS_TYPES:
        err_msg = f"invalid address type: {address_type}"
        err_msg += f" not in {MULTISIG_ADDRESS_TYPES}"
        raise BTClibValueError(err_msg)
    keys = tuple(bytes_from_octets(pub_key, 33) for pub_key in pub_keys)
    if not keys:
        raise BTClibValueError("no public keys")

    multisig_script = ScriptPubKey.p2ms(
        required_signers, keys, network, compressed=True, lexicographic_sorting=False
    ).script

    if address_type == P2SH:
        redeem_script = multisig_script
        witness_script = b""
        script_pub_key = ScriptPubKey.p2sh(redeem_script, network)
    elif address_type == P2SH_P2WSH:
        witness_script = multisig_script
        redeem_script = serialize(["OP_0", sha256(witness_script)])
        script_pub_key = ScriptPubKey.p2sh(redeem_script, network)
    else:  # P2WSH
        redeem_script = b""
        witness_script = multisig_script
        script_pub_key = ScriptPubKey.p2wsh(witness_script, network)

    return Multisig(
        network=network,
        address_type=address_type,
        required_signers=required_signers,
        pub_keys=keys,
        multisig_script=multisig_script,
        redeem_script=redeem_script,
        witness_script=witness_script,
        script_pub_key=script_pub_key.script,
        address=script_pub_key.address,
    )
