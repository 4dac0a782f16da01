"""Command line front-end: catalog, creative and edit generation plus history listing.

Examples::

    luxelens catalog --product ring.heic --reference velvet.jpg --ratio 9:16
    luxelens creative --prompt "emerald ring on marble pedestal" --ratio 16:9
    luxelens edit --image ring.png --instructions "remove the background"
    luxelens history --email me@example.com --password ...
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import AppConfig, SQLiteSettings, SupabaseSettings, load_config
from .errors import AuthenticationError, PersistenceFailure
from .history import HistoryRecorderProtocol, create_history_recorder
from .image.gemini import GeminiGenerationClient
from .image.normalizer import RawImage, load_image
from .logging_utils import RunLogger, create_logger
from .messages import MESSAGES, Messages
from .modes import CATALOG_ASPECT_RATIOS, AspectRatio, CatalogInputs, CreativeInputs, EditInputs, GenerationInputs
from .pipeline import Failed, Orchestrator
from .session import Session, SupabaseAuth
from .storage import ArtifactWriter

__all__ = ["build_parser", "main"]


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="Path to a YAML configuration file")
    common.add_argument("--email", default=None, help="Account e-mail (or LUXELENS_EMAIL)")
    common.add_argument("--password", default=None, help="Account password (or LUXELENS_PASSWORD)")
    common.add_argument("--user", default=None, help="Local user id for the SQLite history backend")
    common.add_argument("--lang", default=None, choices=sorted(MESSAGES), help="Language for user messages")
    common.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    common.add_argument("--log-file", default=None)
    return common


def _output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--out-dir", default="output", help="Directory for generated images")
    parser.add_argument("--name", default=None, help="File name stem for the generated image")


def build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(prog="luxelens", description="AI jewelry photography studio.")
    sub = parser.add_subparsers(dest="command", required=True)

    catalog = sub.add_parser("catalog", parents=[common], help="Composite a product photo with a style reference")
    catalog.add_argument("--product", default=None, help="Photo of the jewelry piece")
    catalog.add_argument("--reference", default=None, help="Style reference photo")
    catalog.add_argument(
        "--ratio",
        default=AspectRatio.SQUARE.value,
        choices=sorted(ratio.value for ratio in CATALOG_ASPECT_RATIOS),
    )
    _output_options(catalog)

    creative = sub.add_parser("creative", parents=[common], help="Generate an image from a description")
    creative.add_argument("--prompt", default="", help="Description of the image")
    creative.add_argument("--ratio", default=AspectRatio.SQUARE.value, choices=[ratio.value for ratio in AspectRatio])
    _output_options(creative)

    edit = sub.add_parser("edit", parents=[common], help="Edit an image with natural-language instructions")
    edit.add_argument("--image", default=None, help="Image to edit")
    edit.add_argument("--instructions", default="", help="What to change")
    _output_options(edit)

    history = sub.add_parser("history", parents=[common], help="List your saved generations")
    history.add_argument("--limit", type=int, default=20)
    return parser


def _optional_image(path: Optional[str]) -> Optional[RawImage]:
    return load_image(Path(path)) if path else None


def inputs_from_args(args: argparse.Namespace) -> GenerationInputs:
    if args.command == "catalog":
        return CatalogInputs(
            product=_optional_image(args.product),
            reference=_optional_image(args.reference),
            aspect_ratio=AspectRatio(args.ratio),
        )
    if args.command == "creative":
        return CreativeInputs(description=args.prompt, aspect_ratio=AspectRatio(args.ratio))
    if args.command == "edit":
        return EditInputs(image=_optional_image(args.image), instructions=args.instructions)
    raise ValueError(f"'{args.command}' is not a generation command")


def _open_session(
    args: argparse.Namespace,
    config: AppConfig,
    auth: Optional[SupabaseAuth],
) -> Optional[Session]:
    email = args.email or os.environ.get("LUXELENS_EMAIL")
    password = args.password or os.environ.get("LUXELENS_PASSWORD")
    if auth is not None and email and password:
        return auth.sign_in(email, password)
    if isinstance(config.history, SQLiteSettings) and args.user:
        return Session(user_id=args.user)
    return None


def _show_history(
    recorder: HistoryRecorderProtocol,
    session: Optional[Session],
    limit: int,
    logger: RunLogger,
) -> int:
    if session is None:
        logger.log("history", "sign in to list your generations", level="ERROR")
        return 1
    try:
        records = recorder.list_records(session, limit=limit)
    except PersistenceFailure as exc:
        logger.log("history", str(exc), level="ERROR")
        return 1
    if not records:
        print("(no generations yet)")
    for record in records:
        print(f"{record.created_at or '-':<32} {record.mode:<9} {record.aspect_ratio or '-':<5} {record.prompt}")
    return 0


def _generate(
    args: argparse.Namespace,
    config: AppConfig,
    recorder: HistoryRecorderProtocol,
    session: Optional[Session],
    messages: Messages,
    logger: RunLogger,
) -> int:
    try:
        inputs = inputs_from_args(args)
    except OSError as exc:
        logger.log("norm", f"cannot read image: {exc}", level="ERROR")
        return 1

    orchestrator = Orchestrator(
        GeminiGenerationClient(config.provider),
        recorder,
        messages=messages,
        logger=logger,
    )
    state = orchestrator.run(inputs, session=session)
    if isinstance(state, Failed):
        logger.log("result", state.message, level="ERROR")
        return 1

    writer = ArtifactWriter(Path(args.out_dir))
    ratio = inputs.aspect_ratio
    path = writer.write(
        state.result,
        args.name or writer.default_stem(inputs.mode.value),
        meta={
            "mode": inputs.mode.value,
            "aspect_ratio": ratio.value if ratio is not None else None,
            "prompt": inputs.prompt_text,
        },
    )
    logger.log("result", f"saved {path}")
    print(path)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(Path(args.config) if args.config else None)
    messages = Messages(args.lang or config.language)
    logger = create_logger(args.log_level, Path(args.log_file) if args.log_file else None)
    if config.degraded:
        logger.log("config", "no history backend configured; results will not be saved", level="WARN")

    auth = SupabaseAuth(config.history) if isinstance(config.history, SupabaseSettings) else None
    try:
        session = _open_session(args, config, auth)
    except AuthenticationError as exc:
        logger.log("auth", messages.describe(exc), level="ERROR")
        logger.close()
        return 1

    try:
        recorder = create_history_recorder(config)
        if args.command == "history":
            return _show_history(recorder, session, args.limit, logger)
        return _generate(args, config, recorder, session, messages, logger)
    finally:
        if auth is not None and session is not None:
            try:
                auth.sign_out(session)
            except AuthenticationError as exc:
                logger.log("auth", str(exc), level="WARN")
        logger.close()


if __name__ == "__main__":  # pragma: no cover - script entry
    sys.exit(main())
