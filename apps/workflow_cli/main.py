"""CLI harness for batch minutes processing, meeting import and summarization."""
import argparse
import json
import os
import sys
from pathlib import Path

from services.meetings.importer import import_meetings
from services.meetings.store import ScheduledMeetingStore
from services.summarizer.run import summarize
from utils.errors import PecPulseError
from utils.logging import configure_logging
from workflows.minutes_pipeline.graph import run_minutes_pipeline


def should_save_output() -> bool:
    """Determine whether to save command output to disk."""
    flag = os.getenv("WORKFLOW_SAVE_OUTPUT", "false").strip().lower()
    return flag not in {"0", "false", "no", "off"}


def _emit(result: dict, output_file: str | None) -> None:
    print(json.dumps(result, indent=2, default=str))
    if output_file and should_save_output():
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2, default=str, ensure_ascii=False)
        print(f"\nOutput saved to {output_file}")


def _process_minutes(args: argparse.Namespace) -> int:
    print("=" * 60)
    print("Processing pending meeting minutes")
    print("=" * 60)
    result = run_minutes_pipeline(minutes_ids=args.minutes_id or None, limit=args.limit)
    _emit(result, args.output)
    if result["errors"]:
        print(f"\n⚠ Completed with {len(result['errors'])} error(s).")
    else:
        print("\n✅ All pending minutes processed.")
    return 0


def _import_meetings(args: argparse.Namespace) -> int:
    content = Path(args.file).read_text(encoding="utf-8")
    fmt = args.format or ("ical" if args.file.lower().endswith((".ics", ".ical")) else "csv")
    result = import_meetings(content, fmt, args.workbody, ScheduledMeetingStore())
    _emit(result, args.output)
    print(f"\nImported {result['imported']} meeting(s), skipped {len(result['skipped'])}.")
    return 0


def _summarize(args: argparse.Namespace) -> int:
    summary = summarize(args.minutes_id)
    _emit(summary.to_view(), args.output)
    print("\n✅ Summary stored.")
    return 0


def _parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(description="PEC Pulse batch commands.")
    parser.add_argument(
        "--output",
        default=None,
        help="Path to write the command's JSON result when WORKFLOW_SAVE_OUTPUT is enabled.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("PEC_LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    process = sub.add_parser("process-minutes", help="Extract, summarize and analyze pending minutes.")
    process.add_argument(
        "--minutes-id",
        action="append",
        default=[],
        help="Only process this minutes id (can be used multiple times).",
    )
    process.add_argument("--limit", type=int, default=None, help="Maximum number of documents to pick up.")
    process.set_defaults(handler=_process_minutes)

    importer = sub.add_parser("import-meetings", help="Import meetings from a CSV or iCal file.")
    importer.add_argument("file", help="Path to the CSV or .ics file.")
    importer.add_argument(
        "--format",
        choices=("csv", "ical"),
        default=None,
        help="File format; guessed from the extension when omitted.",
    )
    importer.add_argument("--workbody", required=True, help="Workbody id the meetings belong to.")
    importer.set_defaults(handler=_import_meetings)

    summarizer = sub.add_parser("summarize", help="Summarize one minutes document.")
    summarizer.add_argument("minutes_id", help="meeting_minutes row id.")
    summarizer.set_defaults(handler=_summarize)

    return parser.parse_args(argv)


def _main(argv: list[str]) -> int:
    """Entry point used by `python -m apps.workflow_cli.main`."""
    args = _parse_args(argv)
    configure_logging(args.log_level)
    try:
        return args.handler(args)
    except PecPulseError as exc:
        print(f"\n❌ {type(exc).__name__}: {exc}")
        return 1


def main() -> int:
    return _main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
