"""
Main entry point for Bot Gateway.

Starts the API server.
"""

import sys

import uvicorn

from botgateway.api import create_app
from botgateway.shared import get_settings


def main():
    """Main entry point."""
    if len(sys.argv) > 1 and sys.argv[1] == "serve":
        settings = get_settings()
        uvicorn.run(
            create_app(),
            host=settings.api_host,
            port=settings.api_port,
            log_level=settings.log_level.lower()
        )
    else:
        print("Bot Gateway - retrieval-augmented chat API")
        print("")
        print("Usage:")
        print("  python -m botgateway serve    # Start API server")
        print("  bot-gateway serve             # Same, via console script")
        print("")
        print("API Documentation:")
        print("  http://localhost:8000/docs    # Swagger UI")


if __name__ == "__main__":
    main()
