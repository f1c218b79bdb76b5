import uvicorn

from ratelimiter.shared.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "ratelimiter.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_local,
        log_config=None,  # structlog/dictConfig already set up by create_app
    )


if __name__ == "__main__":
    main()
