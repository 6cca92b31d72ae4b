"""pinvault entrypoint.

Run with:
  python -m pinvault
"""

import os
import uvicorn

from pinvault.app import configure_logging


def main() -> None:
    host = os.getenv("VAULT_HOST", "0.0.0.0")
    port = int(os.getenv("VAULT_PORT", "8000"))
    reload = os.getenv("VAULT_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    configure_logging(os.getenv("VAULT_LOG_LEVEL", "INFO").upper())
    uvicorn.run("pinvault.app:app", host=host, port=port, reload=reload, log_config=None)


if __name__ == "__main__":
    main()
