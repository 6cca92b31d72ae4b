# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 10


def hash_password(plain: str, *, rounds: int = DEFAULT_ROUNDS) -> str:
    if not plain:
        raise ValueError("Empty password")
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hash_value.encode("ascii"))
    except ValueError:
        # corrupt or non-bcrypt hash
        return False
