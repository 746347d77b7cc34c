"""branch-merge entry point.

Merges every open PR whose head branch equals --branch (or the ``branch``
action input), writes the ``pr_list`` and ``merge_results`` step outputs and
reports failure through an ``::error::`` workflow command.
Usage: branch-merge --branch feature-x [--config config.yaml].
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from branch_merge.actions import set_failed, set_output
from branch_merge.adapters import GitHubAdapter
from branch_merge.config import MERGE_METHODS, AppConfig, load_config
from branch_merge.logging import MergeLogging
from branch_merge.models import RepoContext, RunResult
from branch_merge.orchestrator import MergeOrchestrator

logger = logging.getLogger("branch_merge")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="branch-merge",
        description="Merge open pull requests whose head branch matches a name",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to optional YAML config file",
    )
    parser.add_argument("--branch", "-b", help="Head branch to scan (default: action input 'branch')")
    parser.add_argument("--repository", "-r", help="owner/name (default: GITHUB_REPOSITORY)")
    parser.add_argument("--token", help="API token (default: INPUT_TOKEN, PAT_TOKEN or GITHUB_TOKEN)")
    parser.add_argument("--merge-method", choices=MERGE_METHODS, help="Merge method passed to the API")
    parser.add_argument(
        "--fail-on-error",
        action="store_true",
        default=None,
        help="Report failure when any merge fails",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    return parser.parse_args(argv if argv is not None else sys.argv[1:])


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Command line flags win over file, inputs and env."""
    if args.branch is not None:
        config.merge.branch = args.branch
    if args.repository is not None:
        config.github.repository = args.repository
    if args.token is not None:
        config.github.token = args.token
    if args.merge_method is not None:
        config.merge.merge_method = args.merge_method
    if args.fail_on_error is not None:
        config.merge.fail_on_error = args.fail_on_error
    return config


def write_outputs(result: RunResult) -> None:
    """Publish the matched PR list and per-item merge results."""
    set_output("pr_list", json.dumps([pr.to_api() for pr in result.pull_requests]))
    set_output("merge_results", json.dumps([o.model_dump(mode="json") for o in result.outcomes]))


def run(config: AppConfig) -> RunResult:
    """Resolve token and repo, then list and merge. Raises on fatal errors."""
    token = config.token_resolved()
    if not token:
        raise ValueError("No API token: set the 'token' input, PAT_TOKEN or GITHUB_TOKEN")
    repo = RepoContext.from_slug(config.github.repository)
    adapter = GitHubAdapter(token=token, api_url=config.github.api_url)
    orchestrator = MergeOrchestrator(
        adapter,
        repo,
        per_page=config.merge.per_page,
        merge_method=config.merge.merge_method,
    )
    return orchestrator.run(config.merge.branch)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = _apply_overrides(load_config(args.config), args)
    except Exception as e:
        return set_failed(str(e))

    MergeLogging(config.logging).setup()

    if args.check:
        print("Config OK:", config.github.repository, config.merge.branch)
        return 0

    try:
        result = run(config)
        write_outputs(result)
    except Exception as e:
        logger.debug("Run aborted", exc_info=True)
        return set_failed(str(e))

    if result.failed and config.merge.fail_on_error:
        numbers = ", ".join(f"#{o.number}" for o in result.failed)
        return set_failed(f"Failed to merge PR(s) {numbers} from branch {config.merge.branch}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
