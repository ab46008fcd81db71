#!/usr/bin/env python3

# Copyright (C) 2017-2022 The btclib developers
#
# This file is part of btclib. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btclib including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Extended public keys as braid members.

A braid member can be provided as a plain base58 xpub string
or as an ExtendedPublicKey, which also records the key origin:

- the derivation path of the xpub from its master key
  (e.g. "m/48'/1'/0'/2'")
- the fingerprint of that master key (e.g. "f57ec65d")

Both shapes are resolved into an ExtendedPublicKey by xpub_from_handle.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, Optional, Union

from btclib.bip32 import BIP32KeyData, derive
from btclib.exceptions import BTClibValueError
from btclib.hashes import hash160
from btclib.network import XPRV_VERSIONS_ALL, xpubversions_from_network

from btclib_braid.der_path import indexes_from_path
from btclib_braid.exceptions import InvalidPathError


@dataclass(frozen=True)
class ExtendedPublicKey:
    base58_string: str
    path: Optional[str]
    root_fingerprint: Optional[str]

    def __init__(
        self,
        base58_string: str,
        path: Optional[str] = None,
        root_fingerprint: Optional[str] = None,
        check_validity: bool = True,
    ) -> None:
        object.__setattr__(self, "base58_string", base58_string)
        object.__setattr__(self, "path", path)
        if isinstance(root_fingerprint, str):
            root_fingerprint = root_fingerprint.strip().lower()
        object.__setattr__(self, "root_fingerprint", root_fingerprint)

        if check_validity:
            self.assert_valid()

    @property
    def key_data(self) -> BIP32KeyData:
        return BIP32KeyData.b58decode(self.base58_string)

    @property
    def base_path(self) -> str:
        "Return the key derivation path, 'm' if unknown."
        return self.path if self.path else "m"

    @property
    def fingerprint(self) -> Optional[str]:
        """Return the hex fingerprint of the master key, if known.

        A master key (zero depth) is its own root:
        its fingerprint is computed, not required.
        """
        if self.root_fingerprint:
            return self.root_fingerprint
        xkey = self.key_data
        if xkey.depth == 0:
            return hash160(xkey.key)[:4].hex()
        return None

    def assert_valid(self) -> None:

        if not isinstance(self.base58_string, str):
            err_msg = f"invalid base58 string type: {type(self.base58_string).__name__}"
            raise BTClibValueError(err_msg)

        xkey = self.key_data
        if xkey.version in XPRV_VERSIONS_ALL:
            raise BTClibValueError(f"not a public key: {self.base58_string[:4]}...")

        if self.path is not None:
            try:
                depth = len(indexes_from_path(self.path))
            except InvalidPathError as e:
                raise BTClibValueError(f"invalid key path: {self.path!r}") from e
            if depth != xkey.depth:
                err_msg = f"key path depth mismatch: {depth} in {self.path!r}"
                err_msg += f" instead of {xkey.depth}"
                raise BTClibValueError(err_msg)

        if self.root_fingerprint is not None:
            if not isinstance(self.root_fingerprint, str):
                err_msg = "invalid root fingerprint type: "
                err_msg += f"{type(self.root_fingerprint).__name__}"
                raise BTClibValueError(err_msg)
            try:
                fingerprint = bytes.fromhex(self.root_fingerprint)
            except ValueError as e:
                err_msg = f"invalid root fingerprint: {self.root_fingerprint!r}"
                raise BTClibValueError(err_msg) from e
            if len(fingerprint) != 4:
                err_msg = "invalid root fingerprint length: "
                err_msg += f"{len(fingerprint)}"
                raise BTClibValueError(err_msg)

    def to_dict(self, check_validity: bool = True) -> dict[str, Optional[str]]:
        if check_validity:
            self.assert_valid()

        return {
            "base58String": self.base58_string,
            "path": self.path,
            "rootFingerprint": self.root_fingerprint,
        }

    @classmethod
    def from_dict(
        cls: type[ExtendedPublicKey],
        dict_: Mapping[str, Any],
        check_validity: bool = True,
    ) -> ExtendedPublicKey:
        return cls(
            dict_["base58String"],
            dict_.get("path"),
            dict_.get("rootFingerprint"),
            check_validity,
        )


XpubHandle = Union[str, ExtendedPublicKey]


def xpub_from_handle(handle: XpubHandle) -> ExtendedPublicKey:
    "Return the ExtendedPublicKey of a base58 string or ExtendedPublicKey."

    if isinstance(handle, ExtendedPublicKey):
        return handle
    if isinstance(handle, str):
        return ExtendedPublicKey(handle.strip())
    raise BTClibValueError(f"invalid extended public key type: {type(handle).__name__}")


def assert_valid_xpub(handle: XpubHandle, network: str) -> None:
    "Raise an exception if handle is not a valid xpub for the network."

    xpub = xpub_from_handle(handle)
    xpub.assert_valid()
    if xpub.key_data.version not in xpubversions_from_network(network):
        raise BTClibValueError(f"not a {network} key: {xpub.base58_string[:4]}...")


@lru_cache(maxsize=4096)
def derive_child_pub_key(xpub: str, der_path: str) -> str:
    """Return the hex compressed public key derived from xpub at der_path.

    der_path is relative to xpub, e.g. "m/0/5", "/0/5", and "0/5"
    all derive the same child.
    """
    return BIP32KeyData.b58decode(derive(xpub, der_path)).key.hex()
