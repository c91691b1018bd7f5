"""
Command-line interface for the assessment scoring core.

Drafts are JSON files shaped like the API payload:

    {
      "assignment_id": "a-1",
      "subject": {"kind": "individual", "subject_id": "c-1", "name": "Ada"},
      "scores": {"leadership": 8, "communication": 7},
      "notes": {"leadership": "Took charge of the planning round"},
      "general_notes": ""
    }

A "ticks" object (criterion id -> list of true/false behaviours) may be given
instead of "scores".
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .aggregator import scores_from_ticks
from .catalog import get_catalog
from .errors import ScorecardError
from .insights import compose_summary
from .lifecycle import AssessmentLifecycle, count_by_state
from .models import AssessmentRecord, LifecycleState, draft_from_dict
from .store import get_store


def load_draft(path: Path):
    """Read a draft JSON file.

    Raises:
        ScorecardError: If the file is missing or not a valid draft
    """
    if not path.exists():
        raise ScorecardError(f"Draft file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ScorecardError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ScorecardError(f"Invalid draft in {path}: expected a JSON object")
    if "ticks" in data and "scores" not in data:
        ticks = data["ticks"]
        if not isinstance(ticks, dict) or not all(isinstance(items, list) for items in ticks.values()):
            raise ScorecardError(f"Invalid draft in {path}: ticks must map criterion ids to lists")
        data["scores"] = scores_from_ticks(ticks)
    try:
        return draft_from_dict(data)
    except (KeyError, ValueError) as e:
        raise ScorecardError(f"Invalid draft in {path}: {e}") from e


def print_record(record: AssessmentRecord):
    """Print a record's scores, band and findings."""
    catalog = get_catalog(record.catalog_key)
    print(f"\nAssignment: {record.assignment_id} ({record.lifecycle_state.value})")
    print(f"Subject:    {record.subject.name or record.subject.subject_id} ({record.subject.kind.value})")
    print(f"Total:      {record.total_score:g}/{record.max_score:g} ({record.completion_pct:.0f}%)")
    print(f"Band:       {record.performance_band.value}")
    if record.submitted_at:
        print(f"Submitted:  {record.submitted_at.isoformat()}")

    print("\nScores:")
    for criterion in catalog:
        value = record.scores.get(criterion.id, 0)
        print(f"  {criterion.display_name:<28} {value:g}/{criterion.max_value:g}")

    if record.reinforcing_findings:
        print("\nStrengths:")
        for text in record.reinforcing_findings:
            print(f"  + {text}")
    if record.cautionary_findings:
        print("\nConcerns:")
        for text in record.cautionary_findings:
            print(f"  - {text}")

    print("\nSummary:")
    print(f"  {compose_summary(record.subject.name or record.subject.subject_id, record, catalog)}")


def print_record_list(records):
    """Print one line per record."""
    if not records:
        print("No assessments stored.")
        return
    for record in records:
        submitted = record.submitted_at.strftime("%Y-%m-%d %H:%M") if record.submitted_at else "-"
        print(f"  {record.assignment_id:<20} {record.lifecycle_state.value:<12} "
              f"{record.total_score:>5g}/{record.max_score:g}  {record.performance_band.value:<12} {submitted}")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Score, save, submit and reopen competency assessments"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    score_parser = subparsers.add_parser("score", help="Score a draft without saving it")
    score_parser.add_argument("draft", type=str, help="Path to draft JSON file")

    save_parser = subparsers.add_parser("save", help="Save a draft as in progress")
    save_parser.add_argument("draft", type=str, help="Path to draft JSON file")

    submit_parser = subparsers.add_parser("submit", help="Submit a draft")
    submit_parser.add_argument("draft", type=str, help="Path to draft JSON file")

    reopen_parser = subparsers.add_parser("reopen", help="Reopen a submitted assessment")
    reopen_parser.add_argument("assignment_id", type=str, help="Assignment ID")

    show_parser = subparsers.add_parser("show", help="Show a stored assessment")
    show_parser.add_argument("assignment_id", type=str, help="Assignment ID")

    list_parser = subparsers.add_parser("list", help="List stored assessments")
    list_parser.add_argument(
        "--state",
        choices=[state.value for state in LifecycleState],
        help="Only list assessments in this state"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    try:
        lifecycle = AssessmentLifecycle(get_store())

        if args.command == "score":
            record, readiness = lifecycle.preview(load_draft(Path(args.draft)))
            print_record(record)
            print(f"\nReadiness: {readiness.completion_score}% "
                  f"({'ready to submit' if readiness.is_ready else 'not ready'})")
            for check in readiness.failed():
                print(f"  [{check.type}] {check.title}: {check.description}")

        elif args.command == "save":
            record = lifecycle.save(load_draft(Path(args.draft)))
            print(f"Saved assessment {record.assignment_id}.")
            print_record(record)

        elif args.command == "submit":
            record = lifecycle.submit(load_draft(Path(args.draft)))
            print(f"Submitted assessment {record.assignment_id}.")
            print_record(record)

        elif args.command == "reopen":
            record = lifecycle.reopen(args.assignment_id)
            print(f"Reopened assessment {record.assignment_id} for editing.")

        elif args.command == "show":
            record = lifecycle.load(args.assignment_id)
            if record is None:
                print(f"Error: no assessment stored for assignment {args.assignment_id}")
                sys.exit(1)
            print_record(record)

        elif args.command == "list":
            all_records = lifecycle.list_records()
            if args.state:
                records = lifecycle.list_records(LifecycleState(args.state))
            else:
                records = all_records
            print_record_list(records)
            counts = count_by_state(all_records)
            print(f"\nIn progress: {counts[LifecycleState.IN_PROGRESS.value]}  "
                  f"Submitted: {counts[LifecycleState.SUBMITTED.value]}")

    except ScorecardError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
