"""Command-line entry point for the autopilot template installer."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from autopilot_installer import __version__
from autopilot_installer.application.use_cases.post_install import finalize_installation
from autopilot_installer.application.use_cases.transactional_install import resolve_target
from autopilot_installer.domain.errors import ConfigError, TargetInvalid
from autopilot_installer.infrastructure.config_loader import (
    InstallerConfig,
    load_installer_config,
    parse_repo_slug,
)
from autopilot_installer.infrastructure.wiring import build_dependency_installer, build_installer
from autopilot_installer.presentation.console import (
    ConsoleReporter,
    eprint,
    render_backups,
    render_banner,
    render_failure,
    render_plan,
    render_report_json,
    render_success,
)

USAGE_EXAMPLES = """\
Usage:
  autopilot-install /path/to/target/project
  autopilot-install -y /path/to/target/project  # Skip confirmations"""


def is_interactive() -> bool:
    # conservative: require both stdin and stdout to be TTY
    return sys.stdin.isatty() and sys.stdout.isatty()


def confirm(prompt: str) -> bool:
    try:
        reply = input(prompt).strip().lower()
    except EOFError:
        return False
    return reply in ("y", "yes")


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="autopilot-install",
        description="Install the autopilot skills/agents/commands/hooks template into a project.",
    )
    p.add_argument("target", nargs="?", type=Path, default=None, help="Target project directory.")
    p.add_argument("-y", "--yes", action="store_true", help="Skip confirmations and create a missing target.")
    p.add_argument("--dry-run", action="store_true", help="Show the installation plan without changing anything.")
    p.add_argument(
        "--source-dir",
        type=Path,
        default=None,
        help="Install from a local template checkout instead of downloading from GitHub.",
    )
    p.add_argument("--ref", default=None, help="Branch or tag to download (default: main).")
    p.add_argument("--repo", default=None, help="Template repository as OWNER/NAME.")
    p.add_argument("--config", type=Path, default=None, help="YAML installer configuration file.")
    p.add_argument("--skip-deps", action="store_true", help="Do not run npm install for the hooks.")
    p.add_argument("--json", action="store_true", help="Print the installation report as JSON on stdout.")
    p.add_argument("--list-backups", action="store_true", help="List backups found in the target and exit.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> InstallerConfig:
    config = load_installer_config(args.config)
    overrides: dict[str, str | None] = {"ref": args.ref}
    if args.repo:
        overrides["repo_owner"], overrides["repo_name"] = parse_repo_slug(args.repo)
    return config.with_overrides(**overrides)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)

    if args.target is None:
        eprint("❌ Error: No target directory specified")
        eprint("")
        eprint(USAGE_EXAMPLES)
        return 1

    try:
        config = resolve_config(args)
    except ConfigError as exc:
        eprint(f"❌ {exc}")
        return exc.exit_code

    target = resolve_target(args.target)
    if args.list_backups:
        installer = build_installer(config, source_dir=args.source_dir)
        print(render_backups(installer.list_backups(target)))
        return 0

    # progress goes to stderr when stdout carries the JSON report
    out = sys.stderr if args.json else sys.stdout
    reporter = ConsoleReporter(out)

    try:
        return _install(args, config, target, reporter, out)
    except KeyboardInterrupt:
        eprint("")
        eprint("Installation cancelled.")
        return 130


def _install(args: argparse.Namespace, config: InstallerConfig, target: Path, reporter: ConsoleReporter, out) -> int:
    print(render_banner("Autopilot Template Installer"), file=out)
    print(f"Installer Version: {__version__} | Mode: {'DRY-RUN' if args.dry_run else 'LIVE'}", file=out)

    reporter.step("🔍 Running pre-flight checks...")
    deps = None if args.skip_deps else build_dependency_installer(config)
    if deps is None:
        reporter.info("Dependency installation skipped (--skip-deps)")
    elif deps.available():
        reporter.ok(f"{deps.command} available")
    else:
        reporter.warn(f"{deps.command} not found - hook dependencies won't be installed")
        reporter.info(f"Install Node.js later and run: cd {config.hooks_subdir} && {deps.command} install")

    installer = build_installer(config, source_dir=args.source_dir, reporter=reporter)

    create = False
    if target.exists() and not target.is_dir():
        eprint(f"❌ Target exists and is not a directory: {target}")
        return TargetInvalid.exit_code
    if not target.exists():
        if args.dry_run:
            reporter.info(f"Directory would be created: {target}")
        elif args.yes:
            create = True
        elif is_interactive():
            print("", file=out)
            print(f"Directory doesn't exist: {target}", file=out)
            if not confirm("Create it? (y/n) "):
                print("Installation cancelled.", file=out)
                return 1
            create = True
        else:
            eprint(f"❌ Target directory does not exist: {target}")
            eprint("   Re-run with -y to create it without prompting.")
            return TargetInvalid.exit_code

    print(render_plan(str(target), installer.plan(target)), file=out)

    if args.dry_run:
        print("", file=out)
        print("✅ DRY-RUN complete (no changes were made).", file=out)
        return 0

    if not args.yes:
        print("", file=out)
        if not is_interactive() or not confirm("Continue with installation? (y/n) "):
            print("Installation cancelled.", file=out)
            return 0

    outcome = installer.run(target, create=create)
    if not outcome.ok:
        eprint(render_failure(outcome.error, outcome.rollback))
        return outcome.error.exit_code

    report = finalize_installation(
        outcome.report,
        installer=deps,
        hooks_subdir=config.hooks_subdir,
        reporter=reporter,
    )
    if args.json:
        sys.stdout.write(render_report_json(report))
    else:
        print(render_success(report, issues_url=config.issues_url))
    return 0
