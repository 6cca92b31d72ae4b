# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- PIN hashing/verification (bcrypt)
- The singleton credential store with bootstrap-on-first-use
- Session tokens, signed (itsdangerous) or in the legacy base64 encoding
"""
