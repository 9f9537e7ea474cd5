import argparse
import json
from datetime import datetime
from pathlib import Path

from . import __version__
from .database import SqlLearnedStore
from .env import db_path, load_env, log_level, store_path
from .errors import InitializationTimeout, NoQuestionsFound
from .fill import run_fill
from .forms import HtmlFormFiller, HtmlFormInspector, HtmlReviewAnnotator, fetch_form_html, parse_form
from .logger import get_logger
from .models import Settings
from .resolver import Resolver
from .scoring import SimilarityScorer
from .storage import (
    JsonLearnedStore,
    delete_profile,
    filter_pairs,
    get_profile,
    list_profiles,
    load_settings,
    load_store,
    now_ms,
    read_learned_file,
    remove_profile_field,
    save_settings,
    save_store,
    set_profile_field,
    write_learned_file,
)


def _learned_store(args: argparse.Namespace):
    if args.db:
        return SqlLearnedStore(Path(args.db))
    return JsonLearnedStore(Path(args.store))


def _require_profile(store: dict, name: str) -> dict:
    profile = get_profile(store, name)
    if profile is None:
        raise SystemExit(f"Profile not found: {name}")
    return profile


def _run_settings(store: dict, args: argparse.Namespace) -> Settings:
    """Stored settings with this run's CLI overrides applied (not saved)."""
    try:
        settings = load_settings(store)
        if getattr(args, "review", None) is not None:
            settings.review_mode = args.review
        if getattr(args, "learn", None) is not None:
            settings.learning_enabled = args.learn
        if getattr(args, "threshold", None) is not None:
            settings = Settings(settings.review_mode, settings.learning_enabled, args.threshold)
    except ValueError as e:
        raise SystemExit(f"Invalid settings: {e}")
    return settings


def cmd_match(args: argparse.Namespace) -> None:
    store = load_store(Path(args.store))
    profile = _require_profile(store, args.profile)
    settings = _run_settings(store, args)
    scorer = SimilarityScorer()
    resolver = Resolver(scorer, settings.threshold)

    result = resolver.resolve(args.question, profile, _learned_store(args).pairs())
    if result is None:
        print("No match")
    else:
        score = "n/a" if result.score is None else f"{result.score:.3f}"
        print(f"Answer: {result.value}")
        print(f"  Source: {result.source}")
        print(f"  Matched: {result.key}")
        print(f"  Score: {score}")

    if args.explain:
        print("Profile key scores:")
        for key in profile:
            breakdown = scorer.explain(args.question, key)
            print(f"  {key}: {json.dumps(breakdown.as_dict())}")


def cmd_fill(args: argparse.Namespace) -> None:
    store = load_store(Path(args.store))
    profile = _require_profile(store, args.profile)
    settings = _run_settings(store, args)

    if args.url:
        try:
            html = fetch_form_html(args.url)
        except ValueError as e:
            raise SystemExit(str(e))
    else:
        input_path = Path(args.html)
        if not input_path.exists():
            raise SystemExit(f"Input file not found: {input_path}")
        html = input_path.read_text(encoding="utf-8")

    soup = parse_form(html)
    inspector = HtmlFormInspector(soup)
    try:
        inspector.require_questions()
        # Static documents never gain questions, so there is nothing to wait for
        report = run_fill(
            profile,
            settings,
            inspector=inspector,
            filler=HtmlFormFiller(),
            annotator=HtmlReviewAnnotator(soup),
            learned_store=_learned_store(args),
            question_timeout=0,
        )
    except (NoQuestionsFound, InitializationTimeout) as e:
        raise SystemExit(str(e))

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(str(soup), encoding="utf-8")
        print(f"Wrote {output_path}")

    mode = "review" if settings.review_mode else "fill"
    print(f"Done ({mode}). questions={report.questions} matched={report.matched} "
          f"applied={report.applied} suggested={report.suggested} learned={report.learned} "
          f"unresolved={report.unresolved} failed={report.failed}")
    get_logger().log_metrics_summary()


def cmd_profiles(args: argparse.Namespace) -> None:
    store = load_store(Path(args.store))
    names = list_profiles(store)
    if not names:
        print("No profiles saved yet.")
        return
    for name in names:
        print(f"{name} ({len(store['profiles'][name])} fields)")


def cmd_profile_show(args: argparse.Namespace) -> None:
    store = load_store(Path(args.store))
    profile = _require_profile(store, args.name)
    print(f"Profile: {args.name}")
    for key, value in profile.items():
        print(f"  {key}: {value}")


def cmd_profile_set(args: argparse.Namespace) -> None:
    path = Path(args.store)
    store = load_store(path)
    try:
        set_profile_field(store, args.name, args.key, args.value)
    except ValueError as e:
        raise SystemExit(str(e))
    save_store(path, store)
    print(f"Saved {args.key!r} in profile {args.name!r}")


def cmd_profile_unset(args: argparse.Namespace) -> None:
    path = Path(args.store)
    store = load_store(path)
    if not remove_profile_field(store, args.name, args.key):
        raise SystemExit(f"Field {args.key!r} not found in profile {args.name!r}")
    save_store(path, store)
    print(f"Removed {args.key!r} from profile {args.name!r}")


def cmd_profile_delete(args: argparse.Namespace) -> None:
    path = Path(args.store)
    store = load_store(path)
    if not delete_profile(store, args.name):
        raise SystemExit(f"Profile not found: {args.name}")
    save_store(path, store)
    print(f"Deleted profile {args.name!r}")


def cmd_learned(args: argparse.Namespace) -> None:
    items = filter_pairs(_learned_store(args).pairs(), args.search)
    if not items:
        print("No learned pairs found.")
        return
    for index, pair in items:
        when = datetime.fromtimestamp(pair.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
        print(f"[{index}] {when}")
        print(f"  Q: {pair.question}")
        print(f"  A: {pair.answer}")


def cmd_learned_add(args: argparse.Namespace) -> None:
    question, answer = args.question.strip(), args.answer.strip()
    if not question or not answer:
        raise SystemExit("Question and answer must both be non-empty")
    _learned_store(args).append(question, answer, now_ms())
    print("Learned 1 pair")


def cmd_learned_delete(args: argparse.Namespace) -> None:
    try:
        pair = _learned_store(args).delete(args.index)
    except IndexError as e:
        raise SystemExit(str(e))
    print(f"Deleted: {pair.question} -> {pair.answer}")


def cmd_learned_clear(args: argparse.Namespace) -> None:
    if not args.yes:
        raise SystemExit("Refusing to clear learned pairs without --yes")
    count = _learned_store(args).clear()
    print(f"Cleared {count} learned pairs")


def cmd_learned_export(args: argparse.Namespace) -> None:
    count = write_learned_file(Path(args.output), _learned_store(args).pairs())
    print(f"Exported {count} learned pairs to {args.output}")


def cmd_learned_import(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    try:
        pairs = read_learned_file(input_path)
    except ValueError as e:
        raise SystemExit(str(e))
    count = _learned_store(args).extend(pairs)
    print(f"Imported {count} learned pairs")


def cmd_settings(args: argparse.Namespace) -> None:
    path = Path(args.store)
    store = load_store(path)
    settings = _run_settings(store, args)
    if args.review is not None or args.learn is not None or args.threshold is not None:
        save_settings(store, settings)
        save_store(path, store)
        print("Settings saved.")
    print(f"Review mode: {'on' if settings.review_mode else 'off'}")
    print(f"Learning: {'on' if settings.learning_enabled else 'off'}")
    print(f"Threshold: {settings.threshold:.2f}")


def _add_store_args(p: argparse.ArgumentParser, learned: bool = False) -> None:
    p.add_argument("--store", default=store_path(), help="Path to JSON store (default: data/store.json or $SMARTFORM_STORE)")
    if learned:
        p.add_argument("--db", default=db_path(), help="Keep learned pairs in this SQLite file instead (or $SMARTFORM_DB)")


def _add_run_overrides(p: argparse.ArgumentParser) -> None:
    p.add_argument("--review", action=argparse.BooleanOptionalAction, default=None, help="Suggest answers instead of filling")
    p.add_argument("--learn", action=argparse.BooleanOptionalAction, default=None, help="Record filled answers as learned pairs")
    p.add_argument("--threshold", type=float, help="Minimum match score in [0, 1]")


def main():
    # Load .env if present (SMARTFORM_STORE, SMARTFORM_DB, SMARTFORM_LOG_LEVEL)
    load_env()
    get_logger(level=log_level())
    parser = argparse.ArgumentParser(prog="smartform", description="SmartForm: lexical form answer matching")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")

    mt = subparsers.add_parser("match", help="Resolve a single question against learned pairs and a profile")
    mt.add_argument("--question", required=True, help="Question label text")
    mt.add_argument("--profile", required=True, help="Profile name")
    mt.add_argument("--threshold", type=float, help="Minimum match score in [0, 1]")
    mt.add_argument("--explain", action="store_true", help="Show the score breakdown for every profile key")
    _add_store_args(mt, learned=True)
    mt.set_defaults(func=cmd_match)

    fl = subparsers.add_parser("fill", help="Fill (or review) an HTML form with a profile")
    src = fl.add_mutually_exclusive_group(required=True)
    src.add_argument("--html", help="Path to a saved form HTML file")
    src.add_argument("--url", help="Form URL to download")
    fl.add_argument("--profile", required=True, help="Profile name")
    fl.add_argument("--output", help="Write the filled/annotated HTML here")
    _add_run_overrides(fl)
    _add_store_args(fl, learned=True)
    fl.set_defaults(func=cmd_fill)

    pl = subparsers.add_parser("profiles", help="List saved profiles")
    _add_store_args(pl)
    pl.set_defaults(func=cmd_profiles)

    ps = subparsers.add_parser("profile-show", help="Show the fields of a profile")
    ps.add_argument("--name", required=True, help="Profile name")
    _add_store_args(ps)
    ps.set_defaults(func=cmd_profile_show)

    pset = subparsers.add_parser("profile-set", help="Add or replace a profile field (creates the profile)")
    pset.add_argument("--name", required=True, help="Profile name")
    pset.add_argument("--key", required=True, help="Field key, e.g. \"email\"")
    pset.add_argument("--value", required=True, help="Field value")
    _add_store_args(pset)
    pset.set_defaults(func=cmd_profile_set)

    pun = subparsers.add_parser("profile-unset", help="Remove a profile field")
    pun.add_argument("--name", required=True, help="Profile name")
    pun.add_argument("--key", required=True, help="Field key")
    _add_store_args(pun)
    pun.set_defaults(func=cmd_profile_unset)

    pdel = subparsers.add_parser("profile-delete", help="Delete a profile")
    pdel.add_argument("--name", required=True, help="Profile name")
    _add_store_args(pdel)
    pdel.set_defaults(func=cmd_profile_delete)

    ll = subparsers.add_parser("learned", help="List learned pairs")
    ll.add_argument("--search", default="", help="Only pairs whose question or answer contains this text")
    _add_store_args(ll, learned=True)
    ll.set_defaults(func=cmd_learned)

    la = subparsers.add_parser("learned-add", help="Record a question/answer pair")
    la.add_argument("--question", required=True, help="Question label")
    la.add_argument("--answer", required=True, help="Answer value")
    _add_store_args(la, learned=True)
    la.set_defaults(func=cmd_learned_add)

    ld = subparsers.add_parser("learned-delete", help="Delete a learned pair by index")
    ld.add_argument("--index", type=int, required=True, help="Index shown by 'learned'")
    _add_store_args(ld, learned=True)
    ld.set_defaults(func=cmd_learned_delete)

    lc = subparsers.add_parser("learned-clear", help="Delete all learned pairs")
    lc.add_argument("--yes", action="store_true", help="Confirm")
    _add_store_args(lc, learned=True)
    lc.set_defaults(func=cmd_learned_clear)

    le = subparsers.add_parser("learned-export", help="Export learned pairs to a JSON file")
    le.add_argument("--output", default="smart-form-assistant-mappings.json", help="Output JSON path")
    _add_store_args(le, learned=True)
    le.set_defaults(func=cmd_learned_export)

    li = subparsers.add_parser("learned-import", help="Append learned pairs from an exported JSON file")
    li.add_argument("--input", required=True, help="Exported JSON list")
    _add_store_args(li, learned=True)
    li.set_defaults(func=cmd_learned_import)

    st = subparsers.add_parser("settings", help="Show or update stored settings")
    _add_run_overrides(st)
    _add_store_args(st)
    st.set_defaults(func=cmd_settings)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
