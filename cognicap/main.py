"""
Entry point — start the CogniCap API.

Usage:
    python -m cognicap.main
    uvicorn cognicap.api.app:app --host 127.0.0.1 --port 3025 --reload
"""

import uvicorn

from .config import config


def main():
    uvicorn.run(
        "cognicap.api.app:app",
        host=config.api_host,
        port=config.api_port,
        reload=False,
        log_level=config.log_level,
    )


if __name__ == "__main__":
    main()
