"""
Normalize a single WeChat payload from the command line.

Demonstrates:
- routing a markup payload to the extractor for a given message kind
- waiting for the referenced media to land on disk (or fetching a sticker)

Example:
    python examples/normalize_cli.py reply msg.xml
    python examples/normalize_cli.py image msg.xml --file-path "wxid_me\\Image\\a.dat" \
        --self wxid_me --workdir ./work --docdir ./docs --save-to ./out
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from pywxbridge import BridgeConfig, MessageKind, RawPayload, WeChatBridge
from pywxbridge.config import wechat_files_dir
from pywxbridge.exceptions import MediaDownloadError, MediaUnavailableError
from pywxbridge.messages import MEDIA_KINDS, MediaReference


async def main() -> None:
    ap = argparse.ArgumentParser(prog="normalize_cli.py")
    ap.add_argument("kind", choices=[k.value for k in MessageKind])
    ap.add_argument("markup", help="file holding the message markup")
    ap.add_argument("--extra", help="file holding the <msgsource> extra info")
    ap.add_argument("--self", dest="self_id", default="", help="logged-in account id")
    ap.add_argument("--file-path", default="", help="file path hint sent with the message")
    ap.add_argument("--thumbnail", default="", help="thumbnail hint sent with the message")
    ap.add_argument("--workdir", default=".", help="working directory (default: .)")
    ap.add_argument("--docdir", default=None, help="document root (default: WeChat Files)")
    ap.add_argument("--timeout", type=float, default=30.0, help="media deadline in seconds")
    ap.add_argument("--save-to", default=None, help="write resolved media into this folder")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    payload = RawPayload(
        message=Path(args.markup).read_text("utf-8"),
        extra_info=Path(args.extra).read_text("utf-8") if args.extra else "",
        self_id=args.self_id,
        file_path=args.file_path,
        thumbnail=args.thumbnail,
    )
    config = BridgeConfig(
        workdir=Path(args.workdir).expanduser().resolve(),
        docdir=Path(args.docdir).expanduser() if args.docdir else wechat_files_dir(),
        media_timeout_s=args.timeout,
    )

    async with WeChatBridge(config) as bridge:
        kind = MessageKind(args.kind)
        record = bridge.normalize(kind, payload)
        print("record:", record)

        if kind not in MEDIA_KINDS or not isinstance(record, MediaReference):
            return

        try:
            blob = await bridge.download_media(record)
        except MediaUnavailableError as e:
            print("media unavailable:", e)
            return
        except MediaDownloadError as e:
            print("media download failed:", e)
            return

        print(f"media: {blob.name} ({len(blob.binary)} bytes)")
        if args.save_to:
            out = Path(args.save_to).expanduser()
            out.mkdir(parents=True, exist_ok=True)
            target = out / blob.name
            target.write_bytes(blob.binary)
            print("saved:", target)


if __name__ == "__main__":
    asyncio.run(main())
