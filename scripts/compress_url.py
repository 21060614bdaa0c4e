#!/usr/bin/env python3
"""
Run the transcode pipeline against one URL and write the result to disk.

Usage: python scripts/compress_url.py URL [--policy race] [--mode relaxed] [--out result]
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from shrinkray.core.config import settings  # noqa: E402
from shrinkray.core.models import Compressed, Passthrough  # noqa: E402
from shrinkray.core.pipeline import TranscodePipeline  # noqa: E402
from shrinkray.schemas.report import DebugReport  # noqa: E402

EXTENSIONS = {
    "image/avif": ".avif",
    "image/webp": ".webp",
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compress a remote image the way the proxy would.")
    parser.add_argument("url", help="Source image URL")
    parser.add_argument("--policy", choices=["single", "race", "target"], default=None)
    parser.add_argument("--mode", choices=["strict", "relaxed"], default="strict")
    parser.add_argument("--width", type=int, default=None, help="Override max width")
    parser.add_argument("--out", default="result", help="Output path without extension")
    return parser.parse_args()


async def main() -> int:
    args = parse_args()
    config = settings.transcode_config(args.mode).with_overrides(codec_policy=args.policy, max_width=args.width)
    outcome = await TranscodePipeline().run(args.url, config)
    print(json.dumps(DebugReport.from_outcome(args.url, outcome).model_dump(), indent=2))

    if isinstance(outcome, (Compressed, Passthrough)):
        media_type = outcome.content_type.split(";")[0].strip().lower()
        out_path = Path(args.out).with_suffix(EXTENSIONS.get(media_type, ".bin"))
        out_path.write_bytes(outcome.data)
        print(f"wrote {out_path} ({len(outcome.data)} bytes)")
        return 0
    return 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
