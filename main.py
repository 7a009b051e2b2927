#!/usr/bin/env python3
"""
School records service -- registration, login, and role-gated CRUD for
students and teachers.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 0.0.0.0 --port 3000 --reload

Configuration comes from environment variables or a .env file (see
core/config.py). SECRET_KEY is required unless DEBUG=true.
"""

import argparse

import uvicorn


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the school records API server.")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=3000, help="Port to listen on (default: 3000)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    # Import string (not the app object) so --reload can re-import on change.
    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
