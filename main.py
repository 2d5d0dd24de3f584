import logging

import uvicorn

from admin_api.app import create_app
from config import API_HOST, API_PORT, LOG_LEVEL

logger = logging.getLogger("admin_analytics")


def main():
    import argparse
    parser = argparse.ArgumentParser(description="Run the admin analytics API.")
    parser.add_argument("--host", default=API_HOST, help="Interface to bind")
    parser.add_argument("--port", type=int, default=API_PORT, help="Port to listen on")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (DEBUG, INFO, WARNING, ...)")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format='%(asctime)s - %(levelname)s - %(message)s', force=True)
    logger.info(f"🚀 Starting admin analytics API on {args.host}:{args.port}")
    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
