#!/usr/bin/env python3

# Copyright (C) 2017-2022 The btclib developers
#
# This file is part of btclib. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btclib including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Braid: the xpubs of a multisig wallet branch.

A braid groups the extended public keys of a multisig wallet
with the information needed to derive its addresses:
network, address type, number of required signers,
and the branch index (usually 0 for deposit, 1 for change).

The branch index is a single unhardened index,
relative to all the extended public keys:
a braid can only derive paths under its own branch,
e.g. "0/5" but not "1/5" for a deposit braid.

A wallet, in the traditional sense of the word,
is then a collection of braids.

A Braid is immutable and it is validated once, when created:
a Braid either is valid or does not exist at all.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Tuple, Union

from btclib.network import NETWORKS

from btclib_braid.der_path import (
    assert_valid_bip32_path,
    assert_valid_index,
    indexes_from_path,
    int_from_index,
)
from btclib_braid.exceptions import (
    BranchMismatchError,
    InvalidPathError,
    ValidationError,
)
from btclib_braid.multisig import MULTISIG_ADDRESS_TYPES
from btclib_braid.xpub import (
    ExtendedPublicKey,
    XpubHandle,
    assert_valid_xpub,
    xpub_from_handle,
)

logger = logging.getLogger(__name__)

_JSON_KEYS = (
    "network",
    "addressType",
    "extendedPublicKeys",
    "requiredSigners",
    "index",
)


@dataclass(frozen=True)
class Braid:
    network: str
    address_type: str
    extended_public_keys: Tuple[XpubHandle, ...]
    required_signers: int
    # canonical string form of the branch index, e.g. "0"
    index: str
    # the branch index as BIP32 path indexes, e.g. (0,)
    sequence: Tuple[int, ...]

    def __init__(
        self,
        network: str,
        address_type: str,
        extended_public_keys: Sequence[XpubHandle],
        required_signers: int,
        index: Union[str, int],
    ) -> None:

        object.__setattr__(self, "network", network)
        object.__setattr__(self, "address_type", address_type)
        if isinstance(extended_public_keys, (str, ExtendedPublicKey)):
            err_msg = "extended public keys must be a sequence, "
            err_msg += f"not a single {type(extended_public_keys).__name__}"
            raise ValidationError(err_msg)
        object.__setattr__(self, "extended_public_keys", tuple(extended_public_keys))
        object.__setattr__(self, "required_signers", required_signers)
        object.__setattr__(self, "index", index)
        object.__setattr__(self, "sequence", ())

        self.assert_valid()

        # normalized only after validation
        object.__setattr__(self, "index", str(int_from_index(index)))
        object.__setattr__(self, "sequence", tuple(indexes_from_path(self.index)))
        logger.debug(
            "braid %s %s %d-of-%d index %s",
            self.network,
            self.address_type,
            self.required_signers,
            len(self.extended_public_keys),
            self.index,
        )

    def assert_valid(self) -> None:

        if self.address_type not in MULTISIG_ADDRESS_TYPES:
            err_msg = f"invalid address type: {self.address_type!r}"
            err_msg += f" not in {MULTISIG_ADDRESS_TYPES}"
            raise ValidationError(err_msg)

        if self.network not in NETWORKS:
            err_msg = f"invalid network: {self.network!r}"
            err_msg += f" not in {tuple(NETWORKS)}"
            raise ValidationError(err_msg)

        for i, xpub in enumerate(self.extended_public_keys):
            try:
                assert_valid_xpub(xpub, self.network)
            except ValueError as e:
                err_msg = f"invalid extended public key #{i}: {e}"
                raise ValidationError(err_msg) from e

        m = self.required_signers
        # bool is an int subclass, but never a meaningful quorum
        if isinstance(m, bool) or not isinstance(m, int) or m < 1:
            err_msg = f"invalid required signers: {m!r}"
            err_msg += " instead of a positive int"
            raise ValidationError(err_msg)
        n = len(self.extended_public_keys)
        if m > n:
            err_msg = f"more required signers than keys: {m} > {n}"
            raise ValidationError(err_msg)

        try:
            assert_valid_index(self.index, mode="unhardened")
        except InvalidPathError as e:
            raise ValidationError(f"invalid braid index: {e}") from e

    @property
    def xpubs(self) -> Tuple[ExtendedPublicKey, ...]:
        "Return the extended public keys, resolved and in braid order."
        return tuple(xpub_from_handle(xpub) for xpub in self.extended_public_keys)

    def assert_valid_path(self, path: str) -> None:
        """Raise an exception if the path cannot be derived by the braid.

        The path must be a valid BIP32 path
        and its first index must be the braid index.
        Relative paths, e.g. "0/5", are checked as if rooted, e.g. "/0/5".
        """

        assert_valid_bip32_path(path)
        sequence = indexes_from_path(path)
        if tuple(sequence[:1]) != self.sequence:
            err_msg = f"cannot derive paths outside of the braid index {self.index}:"
            err_msg += f" {path!r}"
            raise BranchMismatchError(err_msg)

    def to_dict(self) -> dict[str, Any]:
        return {
            "network": self.network,
            "addressType": self.address_type,
            "extendedPublicKeys": [
                xpub if isinstance(xpub, str) else xpub.to_dict()
                for xpub in self.extended_public_keys
            ],
            "requiredSigners": self.required_signers,
            "index": self.index,
        }

    @classmethod
    def from_dict(cls: type[Braid], dict_: Mapping[str, Any]) -> Braid:

        if not isinstance(dict_, Mapping):
            raise ValidationError(f"invalid braid data: {type(dict_).__name__}")
        missing = [key for key in _JSON_KEYS if key not in dict_]
        if missing:
            raise ValidationError(f"missing braid data: {', '.join(missing)}")
        unknown = [key for key in dict_ if key not in _JSON_KEYS]
        if unknown:
            raise ValidationError(f"unknown braid data: {', '.join(unknown)}")

        xpubs = dict_["extendedPublicKeys"]
        if not isinstance(xpubs, list):
            err_msg = f"invalid extended public keys: {type(xpubs).__name__}"
            raise ValidationError(err_msg)
        handles = []
        for i, xpub in enumerate(xpubs):
            if not isinstance(xpub, Mapping):
                handles.append(xpub)
                continue
            try:
                handles.append(ExtendedPublicKey.from_dict(xpub))
            except (KeyError, ValueError) as e:
                err_msg = f"invalid extended public key #{i}: {e}"
                raise ValidationError(err_msg) from e

        return cls(
            dict_["network"],
            dict_["addressType"],
            handles,
            dict_["requiredSigners"],
            dict_["index"],
        )

    def to_json(self) -> str:
        "Return the canonical JSON representation of the braid."
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json(cls: type[Braid], data: str) -> Braid:
        "Return the Braid of a JSON representation, validating it."

        try:
            dict_ = json.loads(data)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"invalid braid JSON: {e}") from e
        return cls.from_dict(dict_)


def braid_config(braid: Braid) -> str:
    "Return the JSON data that can later be used to reconstitute the braid."
    return braid.to_json()


def validate_bip32_path_for_braid(braid: Braid, path: str) -> None:
    braid.assert_valid_path(path)


def generate_braid(
    network: str,
    address_type: str,
    extended_public_keys: Sequence[XpubHandle],
    required_signers: int,
    index: Union[str, int],
) -> Braid:
    return Braid(network, address_type, extended_public_keys, required_signers, index)
