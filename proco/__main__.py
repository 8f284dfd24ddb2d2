"""
Run the Proco backend: `python -m proco [--host HOST] [--port PORT]`.
"""

from __future__ import annotations

import argparse

from proco.server import run


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the Proco backend API.")
    parser.add_argument("--host", default=None, help="Interface to bind (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="First port to try (default: PORT or 5000)")
    args = parser.parse_args()
    run(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
