from gateway_admin.logging_config import setup_logging
from gateway_admin.routes import create_app
from gateway_admin.settings import settings


# Configure logging once for the whole process.
setup_logging()

# FastAPI application instance for uvicorn.
app = create_app()


def run() -> None:
    import uvicorn

    # Use our own logging configuration configured in gateway_admin.logging_config.
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_config=None)


if __name__ == "__main__":
    run()
