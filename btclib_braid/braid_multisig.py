#!/usr/bin/env python3

# Copyright (C) 2017-2022 The btclib developers
#
# This file is part of btclib. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btclib including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Braid-aware multisig.

The multisig derived by a braid at a given path,
together with what a signer needs to sign for it:
the braid itself (as JSON) and the BIP32 derivation info of each key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from btclib.exceptions import BTClibValueError

from btclib_braid.braid import Braid
from btclib_braid.derivation import (
    BIP32Derivation,
    bip32_derivations_in_order,
    path_at_index,
    pub_key_objects_at_path,
    sorted_pub_keys,
)
from btclib_braid.exceptions import UpstreamDerivationError
from btclib_braid.multisig import Multisig, multisig_from_pub_keys


@dataclass(frozen=True)
class BraidMultisig:
    multisig: Multisig
    # Braid.to_json() of the braid that derived the multisig
    braid_details: str
    # aligned with multisig.pub_keys
    bip32_derivations: Tuple[BIP32Derivation, ...]

    @property
    def address(self) -> str:
        return self.multisig.address

    @property
    def script_pub_key(self) -> bytes:
        return self.multisig.script_pub_key

    @property
    def braid(self) -> Braid:
        return Braid.from_json(self.braid_details)


def multisig_at_path(braid: Braid, path: str) -> BraidMultisig:
    "Return the braid-aware multisig at path."

    pub_key_objects = pub_key_objects_at_path(braid, path)
    pub_keys = sorted_pub_keys(pub_key_objects)
    try:
        multisig = multisig_from_pub_keys(
            braid.network, braid.address_type, braid.required_signers, *pub_keys
        )
    except BTClibValueError as e:
        raise UpstreamDerivationError(f"multisig failure at {path!r}: {e}") from e

    return BraidMultisig(
        multisig=multisig,
        braid_details=braid.to_json(),
        bip32_derivations=tuple(bip32_derivations_in_order(pub_key_objects)),
    )


def multisig_at_index(braid: Braid, index: int) -> BraidMultisig:
    "Return the braid-aware multisig at the braid child index."
    return multisig_at_path(braid, path_at_index(braid, index))
