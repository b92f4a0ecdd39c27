"""
Edit a local image from the command line

Usage:
    python scripts/edit_image.py photo.jpg --prompt "Make it look like a vintage photo"
    python scripts/edit_image.py photo.jpg --preset "Sketch Style" --output sketch.png
"""

import argparse
import asyncio
import mimetypes
import os
import sys
from pathlib import Path

# Load environment variables from .env
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent / '.env')

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.presets import PRESETS
from models.image_edit import SourceImage, WorkflowState
from services.edit_session import EditSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Edit an image with a natural language prompt")
    parser.add_argument("image", type=Path, help="Image file to edit")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--prompt", help="Edit instruction")
    group.add_argument(
        "--preset",
        choices=[preset.label for preset in PRESETS],
        help="Use a canned edit instruction"
    )
    parser.add_argument("--output", type=Path, help="Where to write the edited image")
    return parser


async def run(args: argparse.Namespace) -> int:
    session = EditSession()

    source = SourceImage.from_path(args.image)
    if not source.is_image:
        print(f"❌ Not an image file: {args.image}")
        return 2
    session.select_image(source)

    if args.preset:
        session.apply_preset(args.preset)
    else:
        session.set_prompt(args.prompt)

    if not session.can_generate:
        print("❌ Prompt must not be empty")
        return 2

    print(f"🔍 Editing {args.image} with {session.edit_service.model}...")
    await session.generate()

    if session.state != WorkflowState.COMPLETE:
        print(f"❌ {session.error}")
        return 1

    result = session.result
    extension = mimetypes.guess_extension(result.mime_type) or ".png"
    output = args.output or args.image.with_name(f"{args.image.stem}-edited{extension}")
    output.write_bytes(result.to_bytes())
    print(f"✅ Saved edited image to {output}")
    return 0


def main():
    args = build_parser().parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
