import argparse
import json
import mimetypes
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from docingest.config.settings import Settings
from docingest.database.connection import close_pool, init_pool
from docingest.logging.logger import Log
from docingest.processor.exceptions import ProcessorError
from docingest.processor.models import FileDescriptor
from docingest.processor.processor import DocumentProcessor, build_processor
from docingest.storage.exceptions import StorageError

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docingest",
        description="Ingest documents and extract their text.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="Upload a file and extract its text.")
    ingest.add_argument("file", type=Path, help="Path to the file to ingest.")
    ingest.add_argument("--owner", default=None, help="Owner id; omit for a public document.")
    ingest.add_argument(
        "--content-type",
        default=None,
        help="Declared content type (default: guessed from the file name).",
    )

    reprocess = commands.add_parser("reprocess", help="Run text extraction again.")
    reprocess.add_argument("document_id", help="Document id.")

    show = commands.add_parser("show", help="Print a document and its processing history.")
    show.add_argument("document_id", help="Document id.")
    return parser


def _read_file(path: Path, content_type: str | None) -> FileDescriptor:
    guessed, _encoding = mimetypes.guess_type(path.name)
    return FileDescriptor(
        original_name=path.name,
        content_type=content_type or guessed or DEFAULT_CONTENT_TYPE,
        content=path.read_bytes(),
    )


def _dump(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def run_command(args: argparse.Namespace, processor: DocumentProcessor) -> None:
    if args.command == "ingest":
        document = processor.create_document(args.owner, _read_file(args.file, args.content_type))
        _dump(asdict(document))
    elif args.command == "reprocess":
        result = processor.process_document_text(args.document_id)
        _dump({"text": result.text, "metadata": result.metadata.to_dict()})
    elif args.command == "show":
        document = processor.get_document(args.document_id)
        history = processor.get_processing_history(args.document_id)
        _dump({"document": asdict(document), "processing": [asdict(r) for r in history]})


def main(argv: list[str] | None = None) -> int:
    """Entry point: initialize pool -> build processor -> run one command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    processor: DocumentProcessor | None = None
    try:
        processor = build_processor(settings)
        run_command(args, processor)
        return 0
    except (ProcessorError, StorageError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        if processor is not None:
            processor.shutdown()
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
