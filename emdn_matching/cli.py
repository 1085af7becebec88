"""Command line entry point for the batch runs.

Usage:
    emdn-match recategorize [--apply] [--csv changes.csv]
    emdn-match map-leaf-categories [--apply]
    emdn-match match-prices [--apply]
    emdn-match match-prices --enqueue        # hand the run to the arq worker

Runs are dry-runs unless ``--apply`` is given. The report goes to stdout,
logs go to stderr.

Exit status:
    0  run completed
    1  some rows failed to persist
    2  configuration error (unknown rule/mapping code, category cycle)
"""
import argparse
import asyncio
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional
from uuid import uuid4

from arq import ArqRedis
from arq.connections import RedisSettings, create_pool
import structlog

from emdn_matching.config import configure_logging, settings
from emdn_matching.tasks.common import STATUS_CONFIG_ERROR, STATUS_PARTIAL
from emdn_matching.tasks.leaf_tasks import map_leaf_categories_task
from emdn_matching.tasks.matching_tasks import match_products_to_prices_task
from emdn_matching.tasks.recategorize_tasks import recategorize_products_task

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_PERSISTENCE_FAILED = 1
EXIT_CONFIG_ERROR = 2

TaskFn = Callable[..., Awaitable[Dict[str, Any]]]

COMMANDS: Dict[str, TaskFn] = {
    "recategorize": recategorize_products_task,
    "map-leaf-categories": map_leaf_categories_task,
    "match-prices": match_products_to_prices_task,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="emdn-match",
        description="Rule-based recategorization and reference-price matching",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("recategorize", "Reassign product categories with the curated rule list"),
        ("map-leaf-categories", "Narrow reference prices to leaf categories by subcode"),
        ("match-prices", "Match products to reference prices"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--apply",
            action="store_true",
            help="Write changes to the database (default: dry run)",
        )
        sub.add_argument(
            "--log-level",
            default=settings.log_level,
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
            type=str.upper,
            help="Log level for stderr output",
        )
        sub.add_argument(
            "--enqueue",
            action="store_true",
            help="Enqueue the run on the arq worker instead of running it here",
        )
        sub.add_argument(
            "--task-id",
            default=None,
            help="Task identifier used in logs (default: generated)",
        )
        if name == "recategorize":
            sub.add_argument(
                "--csv",
                dest="csv_path",
                default=None,
                help="Export the proposed changes to this CSV file",
            )

    return parser


def task_kwargs(args: argparse.Namespace) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"task_id": args.task_id, "apply": args.apply}
    if getattr(args, "csv_path", None):
        kwargs["csv_path"] = args.csv_path
    return kwargs


def exit_code(result: Dict[str, Any]) -> int:
    status = result.get("status")
    if status == STATUS_CONFIG_ERROR:
        return EXIT_CONFIG_ERROR
    if status == STATUS_PARTIAL:
        return EXIT_PERSISTENCE_FAILED
    return EXIT_OK


async def enqueue(function_name: str, kwargs: Dict[str, Any]) -> str:
    """Enqueue a task on the worker queue and return the job id."""
    pool: ArqRedis = await create_pool(RedisSettings.from_dsn(settings.redis_url))
    try:
        job = await pool.enqueue_job(
            function_name,
            _queue_name=settings.queue_name,
            **kwargs,
        )
        return job.job_id if job else ""
    finally:
        await pool.close()


async def run(args: argparse.Namespace) -> int:
    task = COMMANDS[args.command]
    kwargs = task_kwargs(args)

    if args.enqueue:
        job_id = await enqueue(task.__name__, kwargs)
        logger.info("task_enqueued", function=task.__name__, job_id=job_id, **kwargs)
        print(f"Enqueued {task.__name__} as job {job_id}")
        return EXIT_OK

    result = await task({}, **kwargs)

    if result.get("status") == STATUS_CONFIG_ERROR:
        print(f"Configuration error ({result.get('error_type')}): {result.get('error')}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    sys.stdout.write(result["report"])
    if result.get("persistence"):
        sys.stdout.write("\n")
        sys.stdout.write(result["persistence"])
    return exit_code(result)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    args.task_id = args.task_id or f"{args.command}-{uuid4().hex[:8]}"
    configure_logging(args.log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
