from __future__ import annotations

import os

import uvicorn

from mediavault.app.core.env import pick
from mediavault.app.core.logging import setup_logging


def main() -> None:
    setup_logging()
    uvicorn.run(
        "mediavault.api.fastapi:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        reload=pick(prod=False, nonprod=os.getenv("RELOAD") == "1"),
        log_config=None,
    )


if __name__ == "__main__":
    main()
