"""
Main entrypoint: audit API server.

Env: SOLANA_RPC_URL (or HELIUS_API_KEY / SOLANA_NETWORK), API_HOST, API_PORT, LOG_LEVEL.

Equivalent: uvicorn backend_solaudit.api_server.app:app --host 0.0.0.0 --port 8000
"""

# Configure structured JSON logging before other imports that may log
from backend_solaudit.audit_logging import get_logger
from backend_solaudit.config import get_settings
from backend_solaudit.config.env import mask_rpc_url

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server in the main thread."""
    settings = get_settings()

    from backend_solaudit.api_server.app import app
    import uvicorn

    logger.info(
        "main_server_starting",
        host=settings.api_host,
        port=settings.api_port,
        network=settings.solana_network,
        rpc=mask_rpc_url(settings.solana_rpc_url),
    )
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
