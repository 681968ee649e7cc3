"""Run the API server: ``python -m adcanvas``."""

import uvicorn

from adcanvas.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "adcanvas.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL,
    )


if __name__ == "__main__":
    main()
