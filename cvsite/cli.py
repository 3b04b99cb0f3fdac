from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import yaml

from cvsite.config import ConfigError, content_dir, load_config
from cvsite.csp import build_csp
from cvsite.localize import available_locales, check_locales
from cvsite.pipeline import process_document
from cvsite.sanitizer import to_plain
from cvsite.schema_cv import DocumentValidationError, validate_cv
from cvsite.store import DirectoryContentStore, NotFoundError, read_document


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cvsite", add_help=True)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", default=None, help="Path to portfolio.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Check a CV file against the schema and locales")
    validate.add_argument("file", nargs="?", default=None)
    validate.add_argument(
        "--strict", action="store_true", help="Fail when configured locales are missing"
    )

    localize = sub.add_parser("localize", help="Print the localized, sanitized CV as JSON")
    localize.add_argument("--locale", default=None)
    localize.add_argument("--id", dest="document_id", default=None)

    sub.add_parser("csp", help="Print the Content-Security-Policy")
    return parser


def _validate(args, config) -> int:
    if args.file:
        path = Path(args.file)
    else:
        path = DirectoryContentStore(content_dir()).path_for(config.data.cv_file)
        if path is None:
            print(f"CV file '{config.data.cv_file}' not found in {content_dir()}", file=sys.stderr)
            return 1
    try:
        raw = read_document(path)
    except FileNotFoundError:
        print(f"CV file not found: {path}", file=sys.stderr)
        return 1
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        print(f"CV file {path} could not be parsed: {exc}", file=sys.stderr)
        return 1

    try:
        document = validate_cv(raw, source=str(path))
    except DocumentValidationError as exc:
        print("VALIDATION FAILED:")
        for v in exc.violations:
            print(f"   - {v}")
        return 1
    print("STRUCTURAL INTEGRITY: OK")

    i18n = config.i18n
    missing = check_locales(document, i18n.locales, i18n.default_locale)
    print(f"Available locales: {', '.join(available_locales(document, i18n.default_locale))}")
    if missing:
        print(f"Locales configured but missing in CV data: [ {', '.join(m.locale for m in missing)} ]")
        if args.strict:
            return 1
    else:
        print("CV is clean and ready for deployment.")
    return 0


def _localize(args, config) -> int:
    store = DirectoryContentStore(content_dir())
    document_id = args.document_id or config.data.cv_file
    try:
        document = store.get(document_id)
    except NotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except DocumentValidationError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    result = process_document(document, config, args.locale)
    print(json.dumps(to_plain(result.document), ensure_ascii=False, indent=2))
    return 0


def _csp(args, config) -> int:
    print(build_csp(config.features.security))
    return 0


COMMANDS = {"validate": _validate, "localize": _localize, "csp": _csp}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    return COMMANDS[args.command](args, config)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
