"""CLI entry point for testing and applying DSC configuration profiles."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

from dsc_runner.client import DEFAULT_EXECUTABLE, DscClient
from dsc_runner.durations import format_duration
from dsc_runner.environment import EnvironmentInfo, detect_environment
from dsc_runner.models.result import ExecutionMode, ExecutionResult, ResourceState
from dsc_runner.profiles import (
    clear_staging_dir,
    resolve_profile_file_name,
    stage_profile,
)
from dsc_runner.repositories.base import (
    ProfileNotFoundError,
    ProfileRepository,
    RepositoryError,
)
from dsc_runner.repositories.caching import CachingProfileRepository
from dsc_runner.repositories.loading import (
    available_repositories,
    load_repository_manifest,
)

STATE_SYMBOLS = {
    ResourceState.COMPLIANT: "✓",
    ResourceState.NON_COMPLIANT: "!",
    ResourceState.CHANGED: "~",
    ResourceState.EXECUTED: ">",
    ResourceState.FAILED: "✗",
    ResourceState.SKIPPED: "-",
}


@dataclass(frozen=True, kw_only=True)
class RunOptions:
    """Options shared by all commands."""

    repository_key: str = "github"
    repository_config_json: str = "{}"
    cache_dir: Path | None = None
    cache_ttl: float = 3600
    use_cache: bool = True
    staging_dir: Path | None = None
    executable: str = DEFAULT_EXECUTABLE
    output_json: bool = False
    verbose: bool = False


def log_results_summary(
    log: logging.Logger, results: Sequence[ExecutionResult], *, verbose: bool = False
) -> None:
    """Log a formatted summary of execution results.

    Resources are listed for failed profiles, or for all profiles when
    ``verbose`` is set.
    """
    log.info("=" * 80)
    log.info("Execution Results Summary:")
    log.info("=" * 80)

    for result in results:
        log.info(
            "%s %s (%s): %s",
            "PASS" if result.success else "FAIL",
            result.profile_name,
            result.mode,
            format_duration(result.duration),
        )
        if result.success and not verbose:
            continue

        for resource in result.results:
            log.info(
                "  %s %s [%s] %s",
                STATE_SYMBOLS[resource.state],
                resource.name,
                resource.type,
                resource.status_text or resource.state,
            )
            if resource.error_message:
                log.info("    Error: %s", resource.error_message)

    passed = sum(1 for r in results if r.success)
    log.info(
        "Results: %d passed, %d failed, %d total",
        passed,
        len(results) - passed,
        len(results),
    )


def format_output(results: Sequence[ExecutionResult]) -> dict[str, Any]:
    """Format execution results for JSON output."""
    profiles: list[dict[str, Any]] = []
    for result in results:
        profiles.append(
            {
                "profile": result.profile_name,
                "mode": str(result.mode),
                "success": result.success,
                "duration": result.duration.total_seconds(),
                "resources": [
                    {
                        "name": resource.name,
                        "type": resource.type,
                        "state": str(resource.state),
                        "status_text": resource.status_text,
                        "error_message": resource.error_message,
                        "duration": (
                            resource.duration.total_seconds()
                            if resource.duration is not None
                            else None
                        ),
                    }
                    for resource in result.results
                ],
            }
        )

    return {
        "total": len(profiles),
        "passed": sum(1 for p in profiles if p["success"]),
        "failed": sum(1 for p in profiles if not p["success"]),
        "results": profiles,
    }


@asynccontextmanager
async def open_repository(
    options: RunOptions,
) -> AsyncGenerator[ProfileRepository, None]:
    """Open the configured repository, wrapped in the file cache if enabled.

    Raises:
        RepositoryError: If the repository is unknown or its configuration
            does not validate

    """
    manifest = load_repository_manifest(options.repository_key)

    async with manifest.open(options.repository_config_json) as repository:
        if not options.use_cache:
            yield repository
            return

        cache_kwargs: dict[str, Any] = {"ttl": timedelta(seconds=options.cache_ttl)}
        if options.cache_dir is not None:
            cache_kwargs["cache_dir"] = options.cache_dir
        yield CachingProfileRepository(inner=repository, **cache_kwargs)


async def run_profile(
    client: DscClient, path: Path, mode: ExecutionMode
) -> ExecutionResult:
    """Run a staged or local profile file in ``mode``."""
    if mode is ExecutionMode.APPLY:
        return await client.apply(path)
    return await client.test(path)


async def execute_file(
    client: DscClient, path: Path, mode: ExecutionMode
) -> ExecutionResult:
    """Run a local profile file directly, bypassing the repository.

    Raises:
        ProfileNotFoundError: If ``path`` is not an existing file

    """
    full_path = path.resolve()
    if not full_path.is_file():
        raise ProfileNotFoundError(f"File not found: {path}")

    return await run_profile(client, full_path, mode)


async def execute_profiles(
    repository: ProfileRepository,
    client: DscClient,
    profiles: Sequence[str],
    mode: ExecutionMode,
    *,
    keep_going: bool = False,
    staging_dir: Path | None = None,
) -> Sequence[ExecutionResult]:
    """Stage and run each profile in order.

    Stops after the first unsuccessful profile unless ``keep_going`` is set.
    """
    log = logging.getLogger("dsc_runner")
    results: list[ExecutionResult] = []

    clear_staging_dir(staging_dir)

    for profile in profiles:
        file_name = resolve_profile_file_name(profile)
        log.info("Downloading %s...", profile)
        staged_path = await stage_profile(repository, file_name, staging_dir)

        result = await run_profile(client, staged_path, mode)
        results.append(result)

        if not result.success and not keep_going:
            break

    return results


def check_environment(
    log: logging.Logger, env: EnvironmentInfo, mode: ExecutionMode
) -> bool:
    """Return whether profiles can run in ``mode``, logging why not."""
    if not env.dsc_available:
        log.error("No DSC v3 CLI found: the 'dsc' command was not found on PATH")
        log.error("Install it with: winget install Microsoft.DSC.Preview")
        return False

    if mode is ExecutionMode.APPLY and not env.is_admin:
        log.error("Apply requires administrator privileges")
        log.error("Restart your terminal elevated, or use 'test' instead")
        return False

    log.info("Using DSC %s", env.dsc_version or "(unknown version)")
    return True


async def run(
    command: str,
    options: RunOptions,
    profiles: Sequence[str] = (),
    *,
    keep_going: bool = False,
    all_profiles: bool = False,
    profile_file: Path | None = None,
) -> int:
    """Run a CLI command and return exit code.

    For ``test`` and ``apply``, ``profile_file`` runs a local file without
    opening the repository, and ``all_profiles`` runs every listed profile
    instead of ``profiles``.
    """
    log = logging.getLogger("dsc_runner")

    if command == "doctor":
        env = await detect_environment(executable=options.executable)
        print(
            json.dumps(
                {
                    "is_admin": env.is_admin,
                    "dsc_available": env.dsc_available,
                    "dsc_version": env.dsc_version,
                },
                indent=2,
            )
        )
        return 0 if env.dsc_available else 1

    mode = ExecutionMode.APPLY if command == "apply" else ExecutionMode.TEST
    if command in {"test", "apply"}:
        env = await detect_environment(executable=options.executable)
        if not check_environment(log, env, mode):
            return 1

    client = DscClient(executable=options.executable)
    try:
        if command in {"test", "apply"} and profile_file is not None:
            results: Sequence[ExecutionResult] = [
                await execute_file(client, profile_file, mode)
            ]
        else:
            async with open_repository(options) as repository:
                match command:
                    case "list":
                        summaries = await repository.list_profiles()
                        if options.output_json:
                            print(
                                json.dumps(
                                    [summary.model_dump() for summary in summaries],
                                    indent=2,
                                )
                            )
                        else:
                            for summary in summaries:
                                print(f"{summary.name}\t{summary.file_name}")
                        return 0

                    case "show":
                        content = await repository.get_profile_content(
                            resolve_profile_file_name(profiles[0])
                        )
                        print(content)
                        return 0

                    case "update":
                        await repository.invalidate_cache()
                        summaries = await repository.list_profiles()
                        log.info("Refreshed %d profiles", len(summaries))
                        return 0

                    case _:
                        if all_profiles:
                            summaries = await repository.list_profiles()
                            profiles = [summary.file_name for summary in summaries]
                        if not profiles:
                            log.warning("No profiles to %s", command)
                            return 0

                        results = await execute_profiles(
                            repository,
                            client,
                            profiles,
                            mode,
                            keep_going=keep_going,
                            staging_dir=options.staging_dir,
                        )
    except RepositoryError as e:
        log.error("%s", e)
        return 1

    log_results_summary(log, results, verbose=options.verbose)
    if options.output_json:
        print(json.dumps(format_output(results), indent=2))

    return 0 if all(result.success for result in results) else 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dsc-runner",
        description="Test and apply DSC v3 configuration profiles",
    )
    parser.add_argument(
        "--repository",
        default="github",
        help=f"Profile repository key ({', '.join(available_repositories())})",
    )
    parser.add_argument(
        "--repository-config",
        default="{}",
        help="JSON configuration for the repository",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Directory for cached profiles",
    )
    parser.add_argument(
        "--cache-ttl",
        type=float,
        default=3600,
        help="Seconds cached profiles stay valid (default: 3600)",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Always fetch profiles from the repository",
    )
    parser.add_argument(
        "--dsc",
        default=DEFAULT_EXECUTABLE,
        help="DSC executable to run (default: dsc)",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON output")
    parser.add_argument("--verbose", action="store_true", help="Show details")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("list", help="List available profiles")
    show = subparsers.add_parser("show", help="Print a profile's YAML")
    show.add_argument("profile", help="Profile name or file name")
    subparsers.add_parser("update", help="Clear the cache and refetch profiles")
    subparsers.add_parser("doctor", help="Report DSC availability and elevation")

    for name, help_text in (
        ("test", "Test the system against profiles (read-only)"),
        ("apply", "Apply profiles to the system"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("profiles", nargs="*", help="Profile name(s)")
        selection = sub.add_mutually_exclusive_group()
        selection.add_argument(
            "--all",
            dest="all_profiles",
            action="store_true",
            help="Run every profile in the repository",
        )
        selection.add_argument(
            "--file",
            type=Path,
            default=None,
            help="Run a local profile file directly",
        )
        sub.add_argument(
            "--continue",
            dest="keep_going",
            action="store_true",
            help="Continue with remaining profiles after a failure",
        )

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse and validate command line arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command in {"test", "apply"}:
        if not args.profiles and not args.all_profiles and args.file is None:
            parser.error("specify profile(s), --all, or --file")
        if args.profiles and (args.all_profiles or args.file is not None):
            parser.error("profile names cannot be combined with --all or --file")

    return args


def main() -> None:
    """CLI entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    options = RunOptions(
        repository_key=args.repository,
        repository_config_json=args.repository_config,
        cache_dir=args.cache_dir,
        cache_ttl=args.cache_ttl,
        use_cache=not args.no_cache,
        executable=args.dsc,
        output_json=args.json,
        verbose=args.verbose,
    )
    profiles = getattr(args, "profiles", None) or (
        [args.profile] if args.command == "show" else []
    )

    exit_code = asyncio.run(
        run(
            args.command,
            options,
            profiles,
            keep_going=getattr(args, "keep_going", False),
            all_profiles=getattr(args, "all_profiles", False),
            profile_file=getattr(args, "file", None),
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
