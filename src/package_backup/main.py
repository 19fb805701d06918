#!/usr/bin/env python3
"""
Package Backup Tool - command line front end
Lists packages and runs local and GitHub backups
"""

import sys
import argparse
import getpass
import logging
from pathlib import Path

from .core.config import settings
from .core.credentials import BackupConfig
from .core.errors import PackageBackupError, ConfigurationError, AuthError
from .backup.orchestrator import BackupOrchestrator, BackupRequest, BackupMode, BackupState
from .backup.packages import discover_packages, find_package, get_package_info

def setup_logging(log_level="INFO", log_file=None):
    """Setup logging configuration"""
    handlers = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Package Backup Tool")
    parser.add_argument("--log-level", help="Logging level")
    parser.add_argument("--config-dir", help="Settings directory")
    parser.add_argument("--credentials", help="Credentials file (default: .packagebackup.config)")

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("status", help="Show configuration status")

    packages_parser = subparsers.add_parser("packages", help="List packages available for backup")
    packages_parser.add_argument("--cache-dir", help="Folder to scan for packages")

    backup_parser = subparsers.add_parser("backup", help="Back up a package")
    backup_parser.add_argument("package", help="Package name")
    backup_parser.add_argument("--mode", choices=[m.value for m in BackupMode], default=BackupMode.LOCAL.value)
    backup_parser.add_argument("--cache-dir", help="Folder to scan for packages")
    backup_parser.add_argument("--name", default="", help="Backup name")
    backup_parser.add_argument("--destination", help="Local backup location")
    backup_parser.add_argument("--repo", default="", help="Repository name (default: <package>-backup)")
    backup_parser.add_argument("--branch", default="", help="Branch name (default: backup name)")
    backup_parser.add_argument("--message", default="", help="Commit message")

    subparsers.add_parser("test-connection", help="Test GitHub credentials")
    subparsers.add_parser("verify-git", help="Check that git is installed")

    setup_parser = subparsers.add_parser("setup", help="Store GitHub credentials")
    setup_parser.add_argument("--username", help="GitHub username")
    setup_parser.add_argument("--token", help="Personal access token (prompted if omitted)")
    setup_parser.add_argument("--default-branch", help="Branch prefix (default: backup)")
    setup_parser.add_argument("--skip-test", action="store_true", help="Don't test the connection before saving")

    return parser

def main(argv=None):
    """Main application entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config_dir:
        settings.config_dir = Path(args.config_dir).expanduser()
        settings.settings_file = settings.config_dir / "settings.yaml"
        settings.load_settings()

    setup_logging(args.log_level or settings.get('core.log_level', 'INFO'), settings.get('core.log_file'))
    logger = logging.getLogger(__name__)

    valid, problems = settings.validate_settings()
    if not valid:
        for problem in problems:
            logger.warning(f"Settings problem: {problem}")

    credentials_path = Path(args.credentials or settings.get('credentials.file'))
    config = BackupConfig.load(credentials_path)
    orchestrator = BackupOrchestrator(config, settings=settings)

    try:
        if args.command == "packages":
            return handle_packages(args)
        if args.command == "backup":
            return handle_backup(args, orchestrator)
        if args.command == "test-connection":
            return handle_test_connection(orchestrator)
        if args.command == "verify-git":
            return handle_verify_git(orchestrator)
        if args.command == "setup":
            return handle_setup(args, config, credentials_path, orchestrator)

        print_status_summary(config, credentials_path)
        return 0

    except PackageBackupError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\nExiting...")
        return 130

def print_status_summary(config: BackupConfig, credentials_path: Path):
    """Print configuration status summary"""
    print("\n📦 Package Backup Tool")
    print("=" * 50)

    for key, value in settings.get_settings_summary().items():
        print(f"  - {key}: {value}")

    print(f"🔑 Credentials: {credentials_path}")
    print(f"🐙 GitHub: {'✅ Configured as ' + config.username if config.is_configured() else '❌ Not configured'}")

    print("\n📖 Available Commands:")
    print("  package-backup packages                           # List packages")
    print("  package-backup backup <pkg> --name nightly --destination ~/backups")
    print("  package-backup backup <pkg> --mode remote         # Push to GitHub")
    print("  package-backup backup <pkg> --mode both ...       # Local copy, then GitHub")
    print("  package-backup setup                              # Configure GitHub")
    print("  package-backup test-connection                    # Check credentials")
    print("  package-backup verify-git                         # Check git install")

def handle_packages(args) -> int:
    cache_dir = args.cache_dir or settings.get('packages.cache_dir')
    packages = discover_packages(cache_dir)

    if not packages:
        print(f"⚠️  No packages found in {cache_dir}")
        return 0

    print(f"\n📦 Packages in {cache_dir} ({len(packages)}):")
    for package in packages:
        info = get_package_info(package)
        print(f"  - {package.name}: {info.size_display}, modified {info.last_modified:%Y-%m-%d %H:%M:%S}")
    return 0

def handle_backup(args, orchestrator: BackupOrchestrator) -> int:
    cache_dir = args.cache_dir or settings.get('packages.cache_dir')
    package = find_package(cache_dir, args.package)
    if package is None:
        raise ConfigurationError(f"Package '{args.package}' not found in {cache_dir}")

    destination = args.destination or settings.get('local.default_location') or None
    request = BackupRequest(
        package=package,
        mode=BackupMode(args.mode),
        local_destination=Path(destination).expanduser() if destination else None,
        backup_name=args.name,
        repository_name=args.repo,
        branch_name=args.branch,
        commit_message=args.message
    )

    def show(update):
        print(f"[{update.fraction * 100:5.1f}%] {update.message}")

    outcome = orchestrator.run(request, on_progress=show)

    icon = {BackupState.COMPLETE: "✅", BackupState.PARTIAL_SUCCESS: "⚠️ "}.get(outcome.state, "❌")
    print(f"\n{icon} {outcome.summary()}")
    return 0 if outcome.succeeded else 1

def handle_test_connection(orchestrator: BackupOrchestrator) -> int:
    config = orchestrator.config
    if not config.is_configured():
        print("❌ GitHub not configured. Run 'package-backup setup' first.")
        return 1

    print("🔍 Testing GitHub connection...")
    if orchestrator.test_connection():
        print(f"✅ Connected to GitHub as: {config.username}")
        return 0

    raise AuthError("Could not connect to GitHub. Please check your credentials.")

def handle_verify_git(orchestrator: BackupOrchestrator) -> int:
    path, version = orchestrator.verify_git()
    print(f"✅ Git is installed and accessible!\n\n   Path: {path}\n   Version: {version}")
    return 0

def handle_setup(args, config: BackupConfig, credentials_path: Path, orchestrator: BackupOrchestrator) -> int:
    username = args.username or input(f"GitHub Username [{config.username}]: ").strip() or config.username
    token = args.token or getpass.getpass("Personal Access Token (leave empty to keep): ").strip() or config.token
    default_branch = args.default_branch or config.default_branch

    new_config = BackupConfig(username=username, token=token, default_branch=default_branch)
    if not new_config.is_configured():
        print("❌ Both a username and a token are required.")
        return 1

    if not args.skip_test:
        print("🔍 Testing GitHub connection...")
        if orchestrator.test_connection(new_config):
            print("✅ Connection successful! Your credentials are valid.")
        else:
            print("⚠️  Connection failed. Saving anyway; check your credentials.")

    new_config.save(credentials_path, update_gitignore=settings.get('credentials.update_gitignore', True))
    print(f"✅ Configuration saved to {credentials_path}")
    print("⚠️  The token is stored in plain text; keep this file out of version control.")
    return 0

if __name__ == "__main__":
    sys.exit(main())
