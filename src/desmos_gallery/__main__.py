import logging
import os

import uvicorn


def main() -> int:
    logging.basicConfig(
        level=os.getenv("DESMOS_GALLERY_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.getenv("DESMOS_GALLERY_HOST", "0.0.0.0")
    port = int(os.getenv("DESMOS_GALLERY_PORT", os.getenv("PORT", "3000")))
    uvicorn.run("desmos_gallery.app:app", host=host, port=port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
