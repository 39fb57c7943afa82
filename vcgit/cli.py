"""Command-line interface: ``vcgit <command> ...``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from vcgit import __version__
from vcgit.api.facade import VCGit
from vcgit.config import env_help
from vcgit.errors import VCGitError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vcgit",
        description="Snapshot a working tree into commits and sync them with an object store.",
        epilog=env_help(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"vcgit {__version__}")
    parser.add_argument(
        "-C",
        dest="project_root",
        default=".",
        metavar="DIR",
        help="Run as if started in DIR (default: current directory)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override VCGIT_LOG_LEVEL",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_init = sub.add_parser("init", help="Create the .VCGit control directory")
    p_init.add_argument("bucket", nargs="?", default=None, help="Remote bucket identifier")

    p_add = sub.add_parser("add", help="Stage files or directories from Project/")
    p_add.add_argument("paths", nargs="*", help="Paths relative to the working tree")

    p_commit = sub.add_parser("commit", help="Commit the staged files")
    p_commit.add_argument("message", help="Commit message")

    p_push = sub.add_parser("push", help="Push the latest commit to username/reponame")
    p_push.add_argument("path", help="username/reponame")

    p_pull = sub.add_parser("pull", help="Replace Project/ with username/reponame")
    p_pull.add_argument("path", help="username/reponame")

    p_revert = sub.add_parser("revert", help="Restore Project/ from a commit")
    p_revert.add_argument("commit_id", help="Commit ID to restore")

    p_log = sub.add_parser("log", help="Show commit history")
    p_log.add_argument("-n", "--limit", type=int, default=None, metavar="N")

    p_show = sub.add_parser("show", help="Show one commit and its files")
    p_show.add_argument("commit_id")

    p_ls = sub.add_parser("ls-remote", help="List files pushed to username/reponame")
    p_ls.add_argument("path", help="username/reponame")

    sub.add_parser("rebuild-ledger", help="Rebuild allCommits.json from snapshots")

    return parser


def _run(vc: VCGit, args: argparse.Namespace) -> int:
    if args.command == "init":
        root = vc.init(args.bucket)
        print(f"Repository initialized at {root}")
    elif args.command == "add":
        result = vc.add(args.paths)
        for path in result.staged:
            print(f"staged  {path}")
        for path in result.skipped:
            print(f"skipped {path}")
    elif args.command == "commit":
        print(vc.commit(args.message))
    elif args.command == "push":
        result = vc.push(args.path)
        print(f"Pushed {result.record.commit_id} to {result.target} ({len(result.uploaded)} objects)")
    elif args.command == "pull":
        result = vc.pull(args.path)
        if result.empty:
            print(f"Nothing to pull from {result.target}")
        else:
            print(f"Pulled {result.record.commit_id} from {result.target} ({len(result.written)} files)")
    elif args.command == "revert":
        vc.revert(args.commit_id)
        print(f"Reverted {vc.state.working_tree} to {args.commit_id}")
    elif args.command == "log":
        for record in vc.log(args.limit):
            print(f"{record.commit_id}  {record.timestamp.isoformat()}  {record.message}")
    elif args.command == "show":
        details = vc.show(args.commit_id)
        print(f"commit  {details.record.commit_id}")
        print(f"date    {details.record.timestamp.isoformat()}")
        print(f"pushed  {'yes' if details.pushed else 'no'}")
        print(f"\n    {details.record.message}\n")
        for path in details.files:
            print(path)
    elif args.command == "ls-remote":
        for entry in vc.list_remote_files(args.path):
            print(f"{entry.type:<9} {entry.path}")
    elif args.command == "rebuild-ledger":
        records = vc.rebuild_ledger()
        print(f"Rebuilt ledger with {len(records)} commits")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point.  Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    vc = VCGit(args.project_root)
    level = args.log_level or vc.settings.log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return _run(vc, args)
    except VCGitError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    except OSError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
