"""Entry point for the session core.

Usage:
    python -m bulkadmin [options] serve|status|logout

Options:
    --api-url URL               Remote API base URL (default: https://providusbulk.approot.ng)
    --storage-dir DIR           Directory of the persistent store (default: ~/.bulkadmin)
    --idle-timeout SECS         Idle logout after SECS without activity (default: 3600)
    --session-timeout SECS      Absolute session lifetime (default: 108000)
    --port PORT                 Local HTTP port for `serve` (default: 8200)
    --log-dir DIR               Also write logs to DIR
"""

import argparse
import asyncio
import sys
from datetime import datetime

import uvicorn

from .config import SessionConfig
from .logging import close_logging, get_logger, setup_logging
from .runtime import build_runtime
from .server import create_session_app
from .session.manager import EMAIL_KEY, LOGIN_TIME_KEY, ROLE_KEY, TOKEN_KEY
from .session.storage import FileStore, NamespacedStorage

logger = get_logger("main")


def parse_args(argv=None) -> tuple[argparse.Namespace, SessionConfig]:
    parser = argparse.ArgumentParser(description="Bulk SMS admin session core")
    parser.add_argument("--api-url", default="", help="Remote API base URL")
    parser.add_argument("--storage-dir", default="", help="Persistent store directory")
    parser.add_argument("--idle-timeout", type=float, default=0, help="Idle timeout (seconds)")
    parser.add_argument("--session-timeout", type=float, default=0, help="Absolute session lifetime (seconds)")
    parser.add_argument("--port", type=int, default=8200, help="Local HTTP server port")
    parser.add_argument("--log-dir", default="", help="Directory for log files")
    parser.add_argument("command", choices=["serve", "status", "logout"], nargs="?", default="serve")

    args = parser.parse_args(argv)

    config = SessionConfig(
        api_url=args.api_url,
        storage_dir=args.storage_dir,
        idle_timeout=args.idle_timeout,
        session_timeout=args.session_timeout,
        port=args.port,
    )
    return args, config


def _persistent_store(config: SessionConfig) -> NamespacedStorage:
    return NamespacedStorage(FileStore(config.storage_file), config.storage_prefix)


def show_status(config: SessionConfig) -> int:
    store = _persistent_store(config)
    if not store.get(TOKEN_KEY):
        print("Not logged in")
        return 1

    print(f"Logged in as:  {store.get(EMAIL_KEY)}")
    print(f"Role:          {store.get(ROLE_KEY)}")
    raw_login_time = store.get(LOGIN_TIME_KEY)
    if raw_login_time and raw_login_time.isdigit():
        started = datetime.fromtimestamp(int(raw_login_time) / 1000)
        print(f"Since:         {started:%Y-%m-%d %H:%M:%S}")
    return 0


def purge_session(config: SessionConfig) -> int:
    """Drop the persisted session without contacting the server."""
    _persistent_store(config).purge()
    print("Session cleared")
    return 0


def serve(config: SessionConfig) -> int:
    runtime = build_runtime(config)
    app = create_session_app(runtime)

    logger.info("Session core starting")
    logger.info(f"  Backend:         {config.api_url}")
    logger.info(f"  Storage:         {config.storage_file}")
    logger.info(f"  Idle timeout:    {config.idle_timeout:.0f}s")
    logger.info(f"  Session timeout: {config.session_timeout:.0f}s")
    logger.info(f"  Port:            {config.port}")

    uvi_config = uvicorn.Config(app, host="127.0.0.1", port=config.port, log_level="warning")
    server = uvicorn.Server(uvi_config)
    asyncio.run(server.serve())
    return 0


def main(argv=None) -> int:
    args, config = parse_args(argv)
    if args.log_dir:
        setup_logging(args.log_dir)

    try:
        if args.command == "status":
            return show_status(config)
        if args.command == "logout":
            return purge_session(config)
        return serve(config)
    except KeyboardInterrupt:
        return 0
    finally:
        close_logging()


if __name__ == "__main__":
    sys.exit(main())
