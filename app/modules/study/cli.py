from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from app.core.db.base import build_engine, build_session_maker, init_models
from app.core.logging import setup_logging
from app.modules.study.encoder import encode_path
from app.modules.study.errors import GenerationError
from app.modules.study.models.items import GenerationMode, InputKind
from app.modules.study.state import build_study_session


def _load_text(args: argparse.Namespace) -> str | None:
    if args.text_file:
        return Path(args.text_file).read_text(encoding="utf-8")
    return args.text


async def _generate(args: argparse.Namespace) -> list[dict]:
    engine = build_engine()
    try:
        await init_models(engine)
        session = build_study_session(build_session_maker(engine))
        await session.load()

        session.set_mode(GenerationMode(args.mode))
        text = _load_text(args)
        if args.image:
            session.set_input_kind(InputKind.IMAGE)
            session.set_image(encode_path(args.image), name=Path(args.image).name)
        else:
            session.set_input_kind(InputKind.TEXT)
            session.set_text(text or "")
        session.set_generate_icons(args.icons)

        state = await session.generate()
        items = state.mcqs if state.mode == GenerationMode.MCQS else state.flashcards
        return [i.model_dump(by_alias=True, exclude_none=True) for i in items]
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="study-aid", description="Generate flashcards or MCQs with Gemini"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate study items from text or an image")
    g.add_argument("--text", "-t", help="Study material (text)")
    g.add_argument("--text-file", help="Path to a file containing the study material")
    g.add_argument("--image", help="Path to a PNG or JPEG image")
    g.add_argument(
        "--mode",
        choices=[m.value for m in GenerationMode],
        default=GenerationMode.FLASHCARDS.value,
    )
    g.add_argument("--icons", action="store_true", help="Generate an AI icon per item")
    g.add_argument("--log-level", default=None)

    args = parser.parse_args(argv)
    if args.cmd == "generate":
        if sum(1 for s in (args.text, args.text_file, args.image) if s is not None) != 1:
            g.error("provide exactly one of --text, --text-file or --image")
        setup_logging(args.log_level)
        try:
            items = asyncio.run(_generate(args))
        except GenerationError as e:
            print(json.dumps({"error": e.kind, "message": e.user_message}, indent=2))
            return 1
        print(json.dumps(items, indent=2, ensure_ascii=False))
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
