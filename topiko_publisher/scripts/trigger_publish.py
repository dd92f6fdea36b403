"""Trigger a site preview or publish from a local checkout of the sites repository.

This is the manual counterpart of the preview and publish workers: it writes
``data/sites/<siteId>/siteConfig.json`` into the working copy, commits it on the
preview branch or the default branch, and pushes so the repository's workflows
pick up the change.

Examples:
- ``python -m topiko_publisher.scripts.trigger_publish preview acme --config acme.json``
- ``python -m topiko_publisher.scripts.trigger_publish publish acme --config - < acme.json``
- Pass ``--no-push`` to commit locally without touching the remote.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from topiko_publisher.services.local_git import LocalGitPublisher

LOGGER = logging.getLogger("topiko.publish")


def _configure_logging() -> None:
    level_name = os.getenv("TOPIKO_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] [Topiko Publish] %(name)s: %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Commit a Topiko site configuration for preview or publish.")
    parser.add_argument("mode", choices=["preview", "publish"], help="Stage on preview-<siteId> or publish to main.")
    parser.add_argument("site_id", help="Site identifier; used verbatim in the branch name and file path.")
    parser.add_argument(
        "--config",
        required=True,
        help="Path to the site configuration JSON file, or '-' to read it from stdin.",
    )
    parser.add_argument(
        "--repo",
        type=Path,
        default=Path(os.getenv("TOPIKO_REPO_PATH") or Path.cwd()),
        help="Working copy of the sites repository (default from TOPIKO_REPO_PATH or the current directory).",
    )
    parser.add_argument("--remote", default="origin", help="Remote to push to (default: origin).")
    parser.add_argument(
        "--default-branch",
        default=os.getenv("TOPIKO_DEFAULT_BRANCH", "main"),
        help="Branch used for production publishes (default from TOPIKO_DEFAULT_BRANCH or 'main').",
    )
    parser.add_argument("--no-push", action="store_true", help="Commit locally without pulling or pushing.")
    return parser.parse_args(argv)


def _load_site_config(source: str) -> dict[str, Any]:
    try:
        raw = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise SystemExit(f"Could not read site configuration: {exc}") from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SystemExit("Site configuration must contain valid JSON") from exc

    if not isinstance(payload, dict):
        raise SystemExit("Site configuration must be a JSON object")
    return payload


def run(argv: list[str] | None = None) -> int:
    _configure_logging()
    args = _parse_args(argv)
    if not args.site_id:
        raise SystemExit("siteId must be a non-empty string")

    site_config = _load_site_config(args.config)
    repo_path = args.repo.resolve()
    publisher = LocalGitPublisher(repo_path=repo_path, remote=args.remote, default_branch=args.default_branch)

    push = not args.no_push
    try:
        if args.mode == "preview":
            result = publisher.trigger_preview(args.site_id, site_config, push=push)
        else:
            result = publisher.trigger_publish(args.site_id, site_config, push=push)
    except (FileNotFoundError, RuntimeError) as exc:
        LOGGER.error("%s failed: %s", args.mode.title(), exc)
        return 1

    print(json.dumps(result.to_payload(repo_path)))
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(run())
