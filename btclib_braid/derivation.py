#!/usr/bin/env python3

# Copyright (C) 2017-2022 The btclib developers
#
# This file is part of btclib. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btclib including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Braid public keys and their BIP32 derivation information.

At a given path, each extended public key of a braid
derives one child public key.
The child public keys are returned in BIP67 lexicographic order,
the order used in the multisig script,
so that everybody derives the very same multisig from the same braid.

The key origin (master fingerprint and full derivation path)
of each public key is returned in the same order:
it is what PSBT signers need to recognize and sign for their keys.

https://github.com/bitcoin/bips/blob/master/bip-0067.mediawiki
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from btclib.bip32 import BIP32KeyOrigin, HdKeyPaths
from btclib.exceptions import BTClibValueError
from btclib.utils import bytes_from_octets

from btclib_braid.braid import Braid
from btclib_braid.der_path import int_from_index, path_suffix
from btclib_braid.exceptions import (
    InvalidPathError,
    KeyCollisionError,
    UpstreamDerivationError,
)
from btclib_braid.xpub import derive_child_pub_key

logger = logging.getLogger(__name__)

# Used when the master fingerprint of an extended key is not known.
# It is not a real fingerprint: it marks unverified key provenance.
# Signing devices (e.g. Coldcard) match their keys by fingerprint,
# so at least one key of the braid must have the actual one.
UNKNOWN_ROOT_FINGERPRINT = "00000000"


@dataclass(frozen=True)
class BIP32Derivation:
    master_fingerprint: bytes
    path: str
    pub_key: bytes

    @property
    def key_origin(self) -> BIP32KeyOrigin:
        return BIP32KeyOrigin(self.master_fingerprint, self.path)

    def to_dict(self) -> dict[str, str]:
        "Return the btclib bip32_derivs representation."
        return {
            "pub_key": self.pub_key.hex(),
            "master_fingerprint": self.master_fingerprint.hex(),
            "path": self.path,
        }


# pub_key hex-string -> BIP32Derivation
PubKeyObjects = Dict[str, BIP32Derivation]


def pub_key_objects_at_path(braid: Braid, path: str) -> PubKeyObjects:
    """Return the braid public keys at path, with their derivation info.

    The path must be under the braid index.
    Public keys are derived in braid order;
    the returned mapping is keyed by public key hex-string.
    """

    braid.assert_valid_path(path)
    suffix = path_suffix(path)

    pub_key_objects: PubKeyObjects = {}
    for i, xpub in enumerate(braid.xpubs):
        try:
            pub_key = derive_child_pub_key(xpub.base58_string, path)
        except BTClibValueError as e:
            err_msg = f"derivation failure for extended public key #{i}: {e}"
            raise UpstreamDerivationError(err_msg) from e

        if pub_key in pub_key_objects:
            err_msg = f"extended public key #{i} derives a duplicated"
            err_msg += f" public key at {path!r}: {pub_key}"
            raise KeyCollisionError(err_msg)

        fingerprint = xpub.fingerprint or UNKNOWN_ROOT_FINGERPRINT
        pub_key_objects[pub_key] = BIP32Derivation(
            master_fingerprint=bytes_from_octets(fingerprint, 4),
            path=xpub.base_path + "/" + suffix,
            pub_key=bytes.fromhex(pub_key),
        )

    logger.debug("derived %d public keys at %s", len(pub_key_objects), path)
    return pub_key_objects


def sorted_pub_keys(pub_key_objects: PubKeyObjects) -> List[str]:
    "Return the public keys in BIP67 lexicographic order."
    return sorted(pub_key_objects)


def bip32_derivations_in_order(
    pub_key_objects: PubKeyObjects,
) -> List[BIP32Derivation]:
    "Return the derivation info aligned with sorted_pub_keys."
    return [pub_key_objects[pub_key] for pub_key in sorted_pub_keys(pub_key_objects)]


def path_at_index(braid: Braid, index: Any) -> str:
    "Return the braid path of a child index, e.g. '0/5'."

    if isinstance(index, str):
        raise InvalidPathError(f"invalid child index type: {index!r}")
    if int_from_index(index) >= 0x80000000:
        raise InvalidPathError(f"not an unhardened child index: {index}")
    return braid.index + "/" + str(index)


def pub_keys_at_path(braid: Braid, path: str) -> List[str]:
    "Return the BIP67 sorted braid public keys at path."
    return sorted_pub_keys(pub_key_objects_at_path(braid, path))


def pub_keys_at_index(braid: Braid, index: int) -> List[str]:
    "Return the BIP67 sorted braid public keys at the braid child index."
    return pub_keys_at_path(braid, path_at_index(braid, index))


def bip32_derivations_at_path(braid: Braid, path: str) -> List[BIP32Derivation]:
    "Return the braid derivation info at path, in BIP67 key order."
    return bip32_derivations_in_order(pub_key_objects_at_path(braid, path))


def bip32_derivations_at_index(braid: Braid, index: int) -> List[BIP32Derivation]:
    "Return the braid derivation info at the braid child index."
    return bip32_derivations_at_path(braid, path_at_index(braid, index))


def hd_key_paths_at_path(braid: Braid, path: str) -> HdKeyPaths:
    "Return the braid key origins at path, as used in PSBT."
    return {
        bip32_deriv.pub_key: bip32_deriv.key_origin
        for bip32_deriv in bip32_derivations_at_path(braid, path)
    }


def hd_key_paths_at_index(braid: Braid, index: int) -> HdKeyPaths:
    return hd_key_paths_at_path(braid, path_at_index(braid, index))
