#!/usr/bin/env python3
"""Create the vault credential, or reset the PIN when it has been forgotten.

Without arguments this runs the same idempotent bootstrap the server runs at
startup (default PIN from DEFAULT_PASSWORD). With --reset it prompts for a
new PIN and overwrites the stored one.
"""
from __future__ import annotations

import argparse
from getpass import getpass

from pinvault.app import configure_logging
from pinvault.context import VaultContext
from pinvault.errors import VaultError
from pinvault.settings import Settings


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--reset", action="store_true", help="overwrite the PIN with a new one")
    args = parser.parse_args()

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    ctx = VaultContext(settings)
    store = ctx.credentials()

    try:
        if not args.reset:
            created = store.ensure_credential()
            print("OK -> credential created" if created else "OK -> credential already present")
            return

        pin1 = getpass("New PIN: ")
        pin2 = getpass("Repeat PIN: ")
        if pin1 != pin2:
            raise SystemExit("PINs do not match")
        store.reset_password(pin1)
        print("OK -> PIN reset")
    except VaultError as exc:
        raise SystemExit(f"Error: {exc.message}")
    finally:
        ctx.mongo.close()


if __name__ == "__main__":
    main()
