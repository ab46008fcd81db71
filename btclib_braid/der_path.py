#!/usr/bin/env python3

# Copyright (C) 2017-2022 The btclib developers
#
# This file is part of btclib. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btclib including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Strict BIP32 derivation path validation.

btclib parsing of derivation paths is blank/case/extra-slash insensitive
(e.g. "M /44h / 0' /1H // 0/ 10 / "): that is convenient for derivation,
but a braid path is also written verbatim into the signing metadata,
so here it must be well formed:

- "m/48'/1'/0'/2'" rooted path
- "/0/5" rooted path, without the master key marker
- "0/5" relative path, rooted at the extended key being derived

Each index is a decimal integer, optionally followed by
one of the hardening symbols "'", "h", "H".
"""

from typing import List, Optional, Union

from btclib.bip32 import indexes_from_bip32_path

from btclib_braid.exceptions import InvalidPathError

_HARDENED = 0x80000000
_HARDENING_SYMBOLS = ("'", "h", "H")
_MODES = (None, "hardened", "unhardened")
_MAX_DEPTH = 255

Index = Union[int, str]


def _int_from_index_str(s: str) -> int:

    hardened = s[-1:] in _HARDENING_SYMBOLS
    digits = s[:-1] if hardened else s
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidPathError(f"invalid index: {s!r}")

    index = int(digits)
    if index >= _HARDENED:
        raise InvalidPathError(f"invalid index: {s!r}")
    return index + (_HARDENED if hardened else 0)


def int_from_index(index: Index) -> int:
    "Return the int value of a single index, hardened offset included."

    # bool is an int subclass, but never a meaningful index
    if isinstance(index, bool):
        raise InvalidPathError(f"invalid index type: {type(index).__name__}")
    if isinstance(index, int):
        if not 0 <= index <= 0xFFFFFFFF:
            raise InvalidPathError(f"invalid index: {index}")
        return index
    if isinstance(index, str):
        return _int_from_index_str(index)
    raise InvalidPathError(f"invalid index type: {type(index).__name__}")


def assert_valid_index(index: Index, mode: Optional[str] = None) -> None:
    """Raise InvalidPathError if index is not a valid single index.

    mode can be None (any index), "hardened", or "unhardened".
    """

    if mode not in _MODES:
        raise InvalidPathError(f"invalid index mode: {mode!r}")

    i = int_from_index(index)
    if mode == "hardened" and i < _HARDENED:
        raise InvalidPathError(f"not a hardened index: {index!r}")
    if mode == "unhardened" and i >= _HARDENED:
        raise InvalidPathError(f"not an unhardened index: {index!r}")


def _index_steps(der_path: str) -> List[str]:

    if not isinstance(der_path, str):
        raise InvalidPathError(f"invalid path type: {type(der_path).__name__}")
    if der_path == "":
        raise InvalidPathError("empty path")

    steps = der_path.split("/")
    if steps[0] in ("m", "M") or (steps[0] == "" and len(steps) > 1):
        steps = steps[1:]

    if len(steps) > _MAX_DEPTH:
        raise InvalidPathError(f"depth greater than {_MAX_DEPTH}: {len(steps)}")
    for step in steps:
        if step == "":
            raise InvalidPathError(f"empty index in path: {der_path!r}")
        _int_from_index_str(step)
    return steps


def assert_valid_bip32_path(der_path: str) -> None:
    "Raise InvalidPathError if der_path is not a well formed BIP32 path."
    _index_steps(der_path)


def indexes_from_path(der_path: str) -> List[int]:
    "Return the int indexes of a validated path."

    assert_valid_bip32_path(der_path)
    return indexes_from_bip32_path(der_path)


def path_suffix(der_path: str) -> str:
    """Return the path without its leading "m/" or "/".

    The result is suitable for appending to another path.
    """

    if der_path[:2] in ("m/", "M/"):
        return der_path[2:]
    if der_path[:1] == "/":
        return der_path[1:]
    return der_path
