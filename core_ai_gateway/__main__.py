import logging

import uvicorn

from .config import settings

def main():
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    uvicorn.run("core_ai_gateway.server:app", host="0.0.0.0", port=settings.port)

if __name__ == "__main__":
    main()
