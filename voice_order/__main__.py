"""
Startup script for the voice order service.

Usage:
    python -m voice_order
    python -m voice_order --port 8001 --reload
"""

import argparse


def main():
    parser = argparse.ArgumentParser(description="Run the voice order API")
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=8000,
        help="Port to run on (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    args = parser.parse_args()

    import uvicorn

    uvicorn.run(
        "voice_order.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
