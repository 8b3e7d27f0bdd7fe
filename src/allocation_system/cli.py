#!/usr/bin/env python3
"""
Allocator CLI - Operator commands for survey audio pools

    audio-allocator sync 42
    audio-allocator select 42 audq01k --session S1
    audio-allocator select 42 audq01k --dry-run
    audio-allocator counter 42
    audio-allocator complete 42 --session S1
    audio-allocator export catalog.csv
"""

import argparse
import logging
import sys
from typing import List, Optional

from hybridLogger import HybridLogger
from .allocator import AudioAllocator, QuestionRenderRequest, create_allocator
from .catalog_exporter import CatalogExporter
from .config import AllocationConfig
from .errors import AllocationError, StorageError
from .storage import InMemoryAllocationStorage


def build_parser() -> argparse.ArgumentParser:
    defaults = AllocationConfig()
    parser = argparse.ArgumentParser(
        prog="audio-allocator",
        description="Manage audio pools of audio-stimulus surveys"
    )
    parser.add_argument("--surveys-dir", default=defaults.surveys_base_dir,
                        help="Directory holding one folder per survey")
    parser.add_argument("--public-url", default=defaults.public_url_base,
                        help="URL path equivalent to --surveys-dir")
    parser.add_argument("--database", default=defaults.database_path,
                        help="SQLite database for the catalog and usage log")
    parser.add_argument("--log-dir", default=defaults.log_dir,
                        help="Directory for log files")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    sync = commands.add_parser("sync", help="Catalog all audio files of a survey")
    sync.add_argument("survey_id")

    select = commands.add_parser(
        "select",
        help="Allocate audio for one question code",
        description="Allocate audio for one question code. Each run is a session of its own: "
                    "unless --dry-run is given it advances the survey's subfolder counter "
                    "and writes a usage log row."
    )
    select.add_argument("survey_id")
    select.add_argument("code")
    select.add_argument("--session", default=None, help="Session id (default: 'default')")
    select.add_argument("--question-type", default="K",
                        help="Host question type letter (default: K)")
    select.add_argument("--dry-run", action="store_true",
                        help="Preview the allocation without touching the counter or usage log")

    counter = commands.add_parser("counter", help="Show the subfolder rotation state")
    counter.add_argument("survey_id")

    complete = commands.add_parser("complete", help="Run the survey-complete hook for a session")
    complete.add_argument("survey_id")
    complete.add_argument("--session", default=None, help="Session id (default: 'default')")

    export = commands.add_parser("export", help="Write the catalog to a CSV file")
    export.add_argument("csv_path")

    return parser


def config_from_args(args: argparse.Namespace) -> AllocationConfig:
    return AllocationConfig(
        surveys_base_dir=args.surveys_dir,
        public_url_base=args.public_url,
        database_path=args.database,
        log_dir=args.log_dir,
        log_level=logging.DEBUG if args.debug else logging.INFO
    )


def preview_allocator(allocator: AudioAllocator, survey_id: str, config: AllocationConfig,
                      hybrid_logger: HybridLogger) -> AudioAllocator:
    """Allocator over an in-memory copy of the survey's counter, so nothing is persisted"""
    preview = InMemoryAllocationStorage()
    state = allocator.storage.load_counter(survey_id)
    if state is not None:
        preview.save_counter(survey_id, state)
    return AudioAllocator(config, preview, hybrid_logger)


def run_command(args: argparse.Namespace, config: AllocationConfig, hybrid_logger: HybridLogger) -> int:
    logger = hybrid_logger.get_main_logger(config.log_level)
    allocator = create_allocator(config, hybrid_logger)

    if args.command == "sync":
        report = allocator.on_survey_page(args.survey_id)
        if report is None:
            return 1
        print(f"scanned={report.scanned} inserted={report.inserted} failed={report.failed}")
        return 0 if report.failed == 0 else 1

    if args.command == "select":
        session = allocator.new_session(args.session)
        if args.dry_run:
            allocator = preview_allocator(allocator, args.survey_id, config, hybrid_logger)
        request = QuestionRenderRequest(args.survey_id, args.code, session, args.question_type)
        url = allocator.render_question(request)
        if url is None:
            logger.error(f"No audio allocated for {args.code}")
            return 1
        print(url)
        return 0

    if args.command == "counter":
        state = allocator.counter.read_state(args.survey_id)
        print(f"lastUsedIndex={state.last_used_index} totalSubfolders={state.total_subfolders} "
              f"SubfolderTimesUsed={state.usage_counts}")
        return 0

    if args.command == "complete":
        session = allocator.new_session(args.session)
        return 0 if allocator.on_survey_complete(args.survey_id, session) else 1

    if args.command == "export":
        exporter = CatalogExporter(
            allocator.storage, hybrid_logger.get_class_logger("CatalogExporter", config.log_level)
        )
        exporter.export_csv(args.csv_path)
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    config.validate()

    hybrid_logger = HybridLogger("AudioAllocator", log_dir=config.log_dir)
    logger = hybrid_logger.get_main_logger(config.log_level)

    try:
        return run_command(args, config, hybrid_logger)
    except KeyboardInterrupt:
        logger.info("Cancelled by user")
        return 130
    except (AllocationError, StorageError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        hybrid_logger.cleanup()


if __name__ == "__main__":
    sys.exit(main())
