"""drive_index/cli.py
Command line access to the drive index.

Usage:
  drive-index auth-link
  drive-index exchange-code CODE
  drive-index ls [PATH]
  drive-index meta PATH
  drive-index download PATH LOCAL [--range bytes=0-1023]

Credentials come from GDRIVE_* environment variables or `.env`. Output is
JSON on stdout; tokens are only printed by `exchange-code`, which exists
to obtain them.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from drive_index.integrations.errors import DriveError
from drive_index.integrations.google_drive_client import GoogleDrive
from drive_index.integrations.oauth import GoogleOAuth


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="drive-index", description="Path-addressable Google Drive access")
    sub = parser.add_subparsers(dest="action", required=True)
    sub.add_parser("auth-link", help="print the OAuth consent link")
    exchange = sub.add_parser("exchange-code", help="exchange an authorization code for tokens")
    exchange.add_argument("code")
    ls = sub.add_parser("ls", help="list a folder")
    ls.add_argument("path", nargs="?", default="")
    meta = sub.add_parser("meta", help="show metadata of a path")
    meta.add_argument("path")
    download = sub.add_parser("download", help="download a file")
    download.add_argument("path")
    download.add_argument("local_path")
    download.add_argument("--range", dest="range_header", default="", help="HTTP Range value, e.g. bytes=0-1023")
    return parser


def _print(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


async def run(args: argparse.Namespace) -> int:
    if args.action == "auth-link":
        print(GoogleOAuth().build_auth_link())
        return 0
    if args.action == "exchange-code":
        _print(await GoogleOAuth().get_tokens(args.code))
        return 0

    async with GoogleDrive() as drive:
        view = await drive.index(args.path)
        if args.action == "meta":
            _print(view.to_dict())
        elif args.action == "ls":
            if not view.is_folder:
                _print([view.to_dict()])
            else:
                _print([child.to_dict() for child in await view.list()])
        elif args.action == "download":
            if view.is_folder:
                raise SystemExit(f"{args.path} is a folder")
            target = Path(args.local_path)
            target.parent.mkdir(parents=True, exist_ok=True)
            raw = await view.raw(args.range_header)
            written = 0
            with open(target, "wb") as fh:
                async for chunk in raw.iter_chunked():
                    fh.write(chunk)
                    written += len(chunk)
            _print({"path": args.path, "local_path": str(target), "bytes": written, "status": raw.status})
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except DriveError as exc:
        print(json.dumps(exc.to_dict()), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
