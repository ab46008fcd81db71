#!/usr/bin/env python3

# Copyright (C) 2017-2022 The btclib developers
#
# This file is part of btclib. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of btclib including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Braid exception classes.

They discriminate the kind of failure (invalid braid, invalid path,
path outside of the braid branch, rejected derivation)
while still being BTClibValueError, i.e. ValueError:
users already catching btclib errors need no change.
"""

from btclib.exceptions import BTClibValueError


class BraidValueError(BTClibValueError):
    pass


class ValidationError(BraidValueError):
    "The braid descriptor (or its JSON snapshot) breaks an invariant."


class InvalidPathError(BraidValueError):
    "Malformed BIP32 path or child index."


class BranchMismatchError(BraidValueError):
    "The path does not start with the braid index."


class UpstreamDerivationError(BraidValueError):
    "Key derivation or multisig assembly rejected the input."


class KeyCollisionError(UpstreamDerivationError):
    "Different extended keys derived the same child public key."
