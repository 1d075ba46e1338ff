"""Run the API: python -m curvas [--host HOST] [--port PORT]"""

from __future__ import annotations

import argparse

import uvicorn


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="curvas", description="Curvas ticketing API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args(argv)
    uvicorn.run("curvas.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
