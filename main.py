#!/usr/bin/env python
"""Main CLI interface for the client-bank exchange codec."""
import argparse
import io
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

# Fix Unicode encoding issues on Windows
if sys.platform == 'win32':
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')

from pydantic import ValidationError

from clientbank.codec.charset import EncodingType
from clientbank.codec.registry import ExchangeDocument
from clientbank.config import Config
from clientbank.errors import ExchangeError
from clientbank.models import ExportEnvelope, ImportEnvelope, document_registry

logger = logging.getLogger(__name__)


def document_to_dict(document: ExchangeDocument) -> Dict[str, Any]:
    """JSON form of a document: its type label followed by its fields."""
    data = {"type": document_registry.label_for(document.document_type())}
    data.update(document.model_dump(mode="json"))
    return data


def document_from_dict(data: Dict[str, Any]) -> ExchangeDocument:
    fields = dict(data)
    label = fields.pop("type", "")
    return document_registry.shape_for_label(label).model_validate(fields)


def load_documents(path: Path) -> List[ExchangeDocument]:
    """Read documents from a JSON file: a list or ``{"documents": [...]}``."""
    with open(path, 'r', encoding='utf-8') as f:
        payload = json.load(f)
    if isinstance(payload, dict):
        payload = payload.get("documents", [])
    return [document_from_dict(item) for item in payload]


def resolve_output(path: str, directory: str) -> Path:
    """Relative output paths are placed under the configured output directory."""
    output = Path(path)
    if output.is_absolute():
        return output
    return Path(directory) / output


def run_import(args: argparse.Namespace, settings: Config) -> int:
    data = Path(args.input).read_bytes()
    encoding = EncodingType.from_exchange(args.encoding) if args.encoding else None
    envelope = ImportEnvelope.unmarshal(data, encoding)

    print("\n" + "=" * 50)
    print("Import Summary")
    print("=" * 50)
    print(f"Format Version: {envelope.version or 'Not set'}")
    print(f"Encoding: {envelope.encoding.value}")
    print(f"Sender: {envelope.sender or 'Not set'}")
    print(f"Account: {envelope.account or 'Not set'}")
    print(f"Account Sections: {len(envelope.account_sections)}")
    print(f"Documents Found: {len(envelope.documents)}")
    for document in envelope.documents:
        print(f"  - {document.document_type().value} №{document.number} "
              f"from {document.business_date()} sum {document.amount:.2f}")
    print("=" * 50)

    if args.output:
        result = {
            "account": envelope.account,
            "date_from": envelope.date_from.isoformat() if envelope.date_from else None,
            "date_to": envelope.date_to.isoformat() if envelope.date_to else None,
            "account_sections": [s.model_dump(mode="json") for s in envelope.account_sections],
            "documents": [document_to_dict(d) for d in envelope.documents],
        }
        output = resolve_output(args.output, settings.output_directory)
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(result, f, ensure_ascii=False, indent=2)
        print(f"✓ Documents written to {output}")
    return 0


def run_export(args: argparse.Namespace, settings: Config) -> int:
    documents = load_documents(Path(args.input))
    envelope = ExportEnvelope(documents=documents)
    if args.encoding:
        envelope.encoding = EncodingType.from_exchange(args.encoding)

    content = envelope.marshal()
    output = resolve_output(args.output, settings.output_directory)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(content)

    print(f"✓ Exported {len(documents)} document(s) "
          f"({envelope.date_from} - {envelope.date_to}) to {output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="1C client-bank exchange file import/export"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to config file (default: config.yaml)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Parse a file received from the bank")
    import_parser.add_argument("--input", "-i", required=True, type=str,
                               help="Path to exchange file")
    import_parser.add_argument("--output", "-o", type=str,
                               help="Write parsed documents to this JSON file (relative to output directory)")
    import_parser.add_argument("--encoding", choices=[e.value for e in EncodingType],
                               help="Skip detection and use this encoding")
    import_parser.set_defaults(handler=run_import)

    export_parser = subparsers.add_parser("export", help="Write documents for the bank")
    export_parser.add_argument("--input", "-i", required=True, type=str,
                               help="Path to JSON file with documents")
    export_parser.add_argument("--output", "-o", required=True, type=str,
                               help="Path of the exchange file to write (relative to output directory)")
    export_parser.add_argument("--encoding", choices=[e.value for e in EncodingType],
                               help="Encoding of the exchange file (default from config)")
    export_parser.set_defaults(handler=run_export)
    return parser


def main(argv: List[str] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    settings = Config(args.config) if args.config else Config()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    if not Path(args.input).exists():
        print(f"Error: Input file not found: {args.input}")
        return 1

    try:
        return args.handler(args, settings)
    except (ExchangeError, ValidationError, json.JSONDecodeError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
