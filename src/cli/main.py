"""broadcast-automation CLI: invite, setup, status, reset, cleanup, list-groups, serve."""

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

from core.config import get_environment_settings, get_settings
from core.exceptions import AppException
from core.logging import setup_logging
from domain.entities.environment import Environment
from domain.entities.result import BatchResult
from domain.services.state_store import StateStore
from infrastructure.database.session import create_engine, create_session_factory, init_database
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.config_files.loader import ConfigCatalog
from infrastructure.runner import OnboardingRunner

T = TypeVar("T")


def _run(action: Callable[[OnboardingRunner], Awaitable[T]]) -> T:
    """Open the state store, run one action, and always release the engine."""

    async def runner_main() -> T:
        settings = get_settings()
        engine = create_engine(settings.database_url, echo=settings.debug)
        await init_database(engine)
        session_factory = create_session_factory(engine)
        store = StateStore(lambda: SQLAlchemyUnitOfWork(session_factory), on_close=engine.dispose)
        try:
            return await action(OnboardingRunner(store))
        finally:
            await store.close()

    return asyncio.run(runner_main())


def _print_result(title: str, result: BatchResult) -> None:
    print(f"\n{title} ({result.environment.value})")
    print(f"  Succeeded:    {len(result.succeeded)}")
    for user_id in result.succeeded:
        print(f"    - {user_id}")
    print(f"  Already done: {len(result.already_done)}")
    for user_id in result.already_done:
        print(f"    - {user_id}")
    print(f"  Skipped:      {len(result.skipped)}")
    for user_id, reason in result.skipped.items():
        print(f"    - {user_id}: {reason}")
    print(f"  Failed:       {len(result.failed)}")
    for user_id, error in result.failed.items():
        print(f"    - {user_id}: {error}")


def _finish(title: str, result: BatchResult) -> None:
    _print_result(title, result)
    if not result.ok:
        sys.exit(1)


def cmd_invite(args: argparse.Namespace) -> None:
    result = _run(lambda runner: runner.invite(args.env, args.groups))
    _finish("Invitations", result)


def cmd_setup(args: argparse.Namespace) -> None:
    result = _run(lambda runner: runner.setup(args.env, args.groups))
    _finish("Setup", result)


def cmd_status(args: argparse.Namespace) -> None:
    views = _run(lambda runner: runner.statuses(args.env))
    if not views:
        print(f"No users recorded for {args.env.value}. Run 'invite' first.")
        return

    print(f"\nStatus ({args.env.value})")
    print(f"  {'USER':<24} {'INVITED':<8} {'GROUP':<6} {'SOURCE':<7} {'CREDENTIAL':<10} GROUP ID")
    for view in views:
        s = view.status
        print(
            f"  {s.user_id:<24} {_mark(s.invited):<8} {_mark(s.group_created):<6} "
            f"{_mark(s.source_created):<7} {_mark(view.has_credential):<10} {s.group_api_id or '-'}"
        )
    complete = sum(1 for view in views if view.status.is_complete)
    print(f"\n  Complete: {complete}/{len(views)}")


def _mark(flag: bool) -> str:
    return "yes" if flag else "no"


def cmd_reset(args: argparse.Namespace) -> None:
    """Forget local progress; requires --confirm and an explicit --groups."""
    if not args.confirm:
        print("Refusing to reset without --confirm", file=sys.stderr)
        sys.exit(1)
    result = _run(lambda runner: runner.reset(args.env, args.groups))
    _finish("Reset", result)


def cmd_cleanup(args: argparse.Namespace) -> None:
    """Delete upstream groups/sources; requires --confirm."""
    if not args.confirm:
        print("Refusing to delete upstream resources without --confirm", file=sys.stderr)
        sys.exit(1)
    result = _run(
        lambda runner: runner.cleanup(
            args.env,
            args.groups,
            sources_only=args.sources_only,
            groups_only=args.groups_only,
        )
    )
    _finish("Cleanup", result)


def cmd_list_groups(args: argparse.Namespace) -> None:
    groups = ConfigCatalog(get_environment_settings(args.env).config_dir).load_groups()
    print(f"\nConfigured groups ({len(groups)})")
    for group in groups:
        description = f" - {group.description}" if group.description else ""
        print(f"  {group.id:<24} {group.name}{description}")


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )


def _add_target_args(parser: argparse.ArgumentParser, groups_required: bool = False) -> None:
    parser.add_argument(
        "--env",
        type=Environment,
        choices=list(Environment),
        default=Environment.DEV,
        help="Target environment (default: dev)",
    )
    parser.add_argument(
        "--groups",
        required=groups_required,
        help="Comma-separated user/group ids, or 'all'",
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="broadcast-automation",
        description="Onboard partner accounts: invitations, groups and sources per environment",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: info)")
    sub = parser.add_subparsers(dest="command")

    # invite
    p_invite = sub.add_parser("invite", help="Send invitations to users not yet invited")
    _add_target_args(p_invite)

    # setup
    p_setup = sub.add_parser("setup", help="Create groups and sources for ready users")
    _add_target_args(p_setup)

    # status
    p_status = sub.add_parser("status", help="Show onboarding progress")
    _add_target_args(p_status)

    # reset
    p_reset = sub.add_parser("reset", help="Forget local progress (nothing is deleted upstream)")
    _add_target_args(p_reset, groups_required=True)
    p_reset.add_argument("--confirm", action="store_true", help="Required to actually reset")

    # cleanup
    p_cleanup = sub.add_parser("cleanup", help="Delete groups and sources upstream")
    _add_target_args(p_cleanup)
    p_cleanup.add_argument("--confirm", action="store_true", help="Required to actually delete")
    scope = p_cleanup.add_mutually_exclusive_group()
    scope.add_argument("--sources-only", action="store_true", help="Delete sources, keep groups")
    scope.add_argument("--groups-only", action="store_true", help="Delete groups, keep sources")

    # list-groups
    p_list = sub.add_parser("list-groups", help="List configured groups")
    p_list.add_argument(
        "--env", type=Environment, choices=list(Environment), default=Environment.DEV
    )

    # serve
    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", help="Bind address (default: settings.host)")
    p_serve.add_argument("--port", type=int, help="Port (default: settings.port)")
    p_serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(log_level=args.log_level)

    commands: dict[str, Callable[[argparse.Namespace], None]] = {
        "invite": cmd_invite,
        "setup": cmd_setup,
        "status": cmd_status,
        "reset": cmd_reset,
        "cleanup": cmd_cleanup,
        "list-groups": cmd_list_groups,
        "serve": cmd_serve,
    }

    try:
        commands[args.command](args)
    except AppException as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
