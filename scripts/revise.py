"""
Command-line access to the revision scheduler.

Usage:
    python -m scripts.revise memorize 1 112 113 114
    python -m scripts.revise review 112 easy
    python -m scripts.revise backdate 113 medium 2026-03-01
    python -m scripts.revise due
    python -m scripts.revise upcoming --days 7
    python -m scripts.revise streak
    python -m scripts.revise history 112 --limit 5
    python -m scripts.revise goals --daily 5
    python -m scripts.revise reset --yes
"""

from __future__ import annotations

import argparse
import itertools
import sys
from datetime import date, datetime
from typing import Optional

from hifz import config, srs
from hifz.errors import RevisionError
from hifz.notifications import pending_reminders
from hifz.schemas import Goals
from hifz.service import RevisionScheduler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Track revisions of memorized surahs")
    sub = parser.add_subparsers(dest="command", required=True)

    memorize = sub.add_parser("memorize", help="Mark items as memorized")
    memorize.add_argument("item_ids", type=int, nargs="+")
    memorize.add_argument(
        "--strict",
        action="store_true",
        help="Fail if an item is already memorized"
    )

    forget = sub.add_parser("forget", help="Take an item out of the schedule")
    forget.add_argument("item_id", type=int)

    review = sub.add_parser("review", help="Record a revision done now")
    review.add_argument("item_id", type=int)
    review.add_argument("outcome", choices=[o.value for o in srs.ReviewOutcome])
    review.add_argument("--at", type=datetime.fromisoformat, help="ISO timestamp of the revision")

    backdate = sub.add_parser("backdate", help="Record a past revision")
    backdate.add_argument("item_id", type=int)
    backdate.add_argument("outcome", choices=[o.value for o in srs.ReviewOutcome])
    backdate.add_argument("occurred_on", type=date.fromisoformat, help="YYYY-MM-DD")

    sub.add_parser("due", help="List revisions due today")

    upcoming = sub.add_parser("upcoming", help="List revisions due soon")
    upcoming.add_argument("--days", type=int, default=7)

    sub.add_parser("streak", help="Show the current revision streak")

    history = sub.add_parser("history", help="Show past revisions of an item")
    history.add_argument("item_id", type=int)
    history.add_argument("--limit", type=int, default=10)

    goals = sub.add_parser("goals", help="Show or update goals and progress")
    goals.add_argument("--daily", type=int)
    goals.add_argument("--weekly", type=int)
    goals.add_argument("--monthly", type=int)

    sub.add_parser("reminders", help="List pending reminder times")

    reset = sub.add_parser("reset", help="Drop all items, revisions and goals")
    reset.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    return parser


def default_scheduler() -> RevisionScheduler:
    engine = srs.get_engine()
    srs.init_db(engine)
    return RevisionScheduler(srs.SqlRevisionStore(engine), params=config.load_scheduler_params())


def _describe(item: srs.RevisionItem) -> str:
    due = item.next_due_at.strftime("%Y-%m-%d %H:%M") if item.next_due_at else "-"
    return (
        f"#{item.item_id:<4} step {item.learning_step}  interval {item.interval_days}d  "
        f"ease {item.ease_factor:.2f}  lapses {item.lapse_count}  due {due}"
    )


def run(args: argparse.Namespace, scheduler: RevisionScheduler) -> None:
    if args.command == "memorize":
        for item_id in args.item_ids:
            print(_describe(scheduler.mark_memorized(item_id, strict=args.strict)))

    elif args.command == "forget":
        scheduler.mark_unmemorized(args.item_id)
        print(f"#{args.item_id} removed from the schedule")

    elif args.command == "review":
        print(_describe(scheduler.complete_review(args.item_id, args.outcome, at=args.at)))

    elif args.command == "backdate":
        print(_describe(scheduler.add_backdated_review(args.item_id, args.outcome, args.occurred_on)))

    elif args.command == "due":
        due = scheduler.due_today()
        if not due:
            nxt = srs.next_due(scheduler.items())
            print("Nothing due today.")
            if nxt is not None:
                print(f"Next: #{nxt.item_id} on {nxt.next_due_at:%Y-%m-%d}")
        for entry in due:
            flag = "  (overdue)" if entry.overdue else ""
            if entry.completed:
                flag += "  (done today)"
            print(f"#{entry.item_id:<4} due {entry.next_due_at:%Y-%m-%d}{flag}")

    elif args.command == "upcoming":
        for entry in scheduler.due_within(args.days):
            print(f"#{entry.item_id:<4} due {entry.next_due_at:%Y-%m-%d %H:%M}")

    elif args.command == "streak":
        print(f"Current streak: {scheduler.current_streak()} day(s)")

    elif args.command == "history":
        for event in itertools.islice(scheduler.history_for(args.item_id), args.limit):
            print(f"{event.occurred_at:%Y-%m-%d %H:%M}  {event.outcome.value}")

    elif args.command == "goals":
        updates = {
            "daily_revisions": args.daily,
            "weekly_revisions": args.weekly,
            "memorize_per_month": args.monthly,
        }
        updates = {k: v for k, v in updates.items() if v is not None}
        if updates:
            scheduler.update_goals(Goals(**{**scheduler.goals().model_dump(), **updates}))

        progress = scheduler.goal_progress()
        print(f"Today:      {progress.daily}/{progress.goals.daily_revisions}")
        print(f"This week:  {progress.weekly}/{progress.goals.weekly_revisions}")
        print(f"This month: {progress.monthly}/{progress.goals.memorize_per_month} memorized")
        print(f"Streak:     {progress.streak} day(s)")

    elif args.command == "reminders":
        for item_id, due_at in pending_reminders(scheduler.items(), scheduler.clock()):
            print(f"#{item_id:<4} remind at {due_at:%Y-%m-%d %H:%M}")

    elif args.command == "reset":
        _reset(scheduler, confirmed=args.yes)


def _reset(scheduler: RevisionScheduler, confirmed: bool) -> None:
    engine = getattr(scheduler.store, "engine", None)
    if engine is None:
        raise ValueError("reset needs a database-backed store")

    memorized = sum(1 for item in scheduler.items() if item.memorized)
    events = sum(1 for _ in scheduler.store.iter_events())
    print(f"{engine.url.render_as_string(hide_password=True)}: "
          f"{memorized} memorized item(s), {events} revision(s) recorded")

    if not confirmed:
        answer = input("Drop everything, including goals? Type 'yes' to confirm: ")
        if answer.strip().lower() != "yes":
            print("Nothing changed.")
            return

    srs.reset_db(engine)
    print("Revision tables recreated empty.")


def main(argv: Optional[list[str]] = None, scheduler: Optional[RevisionScheduler] = None) -> int:
    config.configure_logging()
    args = build_parser().parse_args(argv)
    scheduler = scheduler or default_scheduler()

    try:
        run(args, scheduler)
    except (RevisionError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
