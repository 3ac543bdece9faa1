"""localauth entrypoint.

Run with:
  LOCALAUTH_SECRET_KEY=... python -m localauth
"""

import os
import uvicorn

def main() -> None:
    host = os.getenv("LOCALAUTH_HOST", "127.0.0.1")
    port = int(os.getenv("LOCALAUTH_PORT", "8000"))
    reload = os.getenv("LOCALAUTH_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("localauth.app:create_app", factory=True, host=host, port=port, reload=reload)

if __name__ == "__main__":
    main()
