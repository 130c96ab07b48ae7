"""
Delete superseded (non-current) CV rows. The current CV is never touched.

Usage:
  python -m cv_backend.scripts.purge_superseded [--keep N] [--yes]
"""
import argparse
import sys

from cv_backend.database import SessionLocal, ensure_tables_exist
from cv_backend.errors import StorageError
from cv_backend.repos.cv_repo import purge_superseded


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Delete superseded CV uploads from the database.")
    parser.add_argument(
        "--keep", "-k",
        type=int,
        default=0,
        help="Number of most recent superseded CVs to keep (default: 0)",
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Skip confirmation prompt",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.keep < 0:
        print("--keep must be zero or positive.")
        return 1

    if not args.yes:
        print(f"This will permanently delete superseded CV uploads, keeping the {args.keep} most recent.")
        print("The current CV will NOT be deleted.")
        try:
            reply = input("Type 'yes' to continue: ").strip().lower()
        except EOFError:
            reply = ""
        if reply != "yes":
            print("Aborted.")
            return 1

    ensure_tables_exist()
    db = SessionLocal()
    try:
        removed = purge_superseded(db, keep=args.keep)
    except StorageError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Done. Superseded CV rows removed: {removed}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
