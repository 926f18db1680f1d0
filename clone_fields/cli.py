# ==============================================
# CLI — Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Run detection, cloning and backup operations from a shell.
#   Every command prints the JSON response of the matching
#   CloneService handler and exits 0 on success, 1 otherwise.
#
# COMMANDS:
# ---------
# 1. Inspect fields:
#    python -m clone_fields.cli fields 12 [--target 34]
#    python -m clone_fields.cli stats 12
#
# 2. Check a selection, then clone it:
#    python -m clone_fields.cli validate 12 34 field_price field_gallery
#    python -m clone_fields.cli clone 12 34 field_price field_gallery --overwrite
#    python -m clone_fields.cli clone 12 34 field_price --no-backup
#
# 3. Backups:
#    python -m clone_fields.cli backups 34
#    python -m clone_fields.cli restore backup_34_1700000000_1a2b3c4d
#    python -m clone_fields.cli delete-backup backup_34_1700000000_1a2b3c4d
#    python -m clone_fields.cli cleanup
#
# Connection settings come from .env (see config.py).
#
# ==============================================

import argparse
import json
import sys
from typing import Callable, List, Optional

from clone_fields.clone_service import CloneService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clone-fields",
        description="Clone custom field values between records, with backups.",
    )
    sub = parser.add_subparsers(dest="command")

    p_fields = sub.add_parser("fields", help="List fields on a record")
    p_fields.add_argument("source", help="Source record id")
    p_fields.add_argument("--target", default=None, help="Mark fields that would overwrite this record")

    p_stats = sub.add_parser("stats", help="Field statistics for a record")
    p_stats.add_argument("record", help="Record id")

    p_validate = sub.add_parser("validate", help="Check a field selection before cloning")
    p_validate.add_argument("source", help="Source record id")
    p_validate.add_argument("target", help="Target record id")
    p_validate.add_argument("fields", nargs="+", help="Field keys")

    p_clone = sub.add_parser("clone", help="Clone fields from source to target")
    p_clone.add_argument("source", help="Source record id")
    p_clone.add_argument("target", help="Target record id")
    p_clone.add_argument("fields", nargs="+", help="Field keys")
    p_clone.add_argument(
        "--backup", action=argparse.BooleanOptionalAction, default=None,
        help="Snapshot the target first (default from CLONE_CREATE_BACKUP)",
    )
    p_clone.add_argument(
        "--overwrite", action=argparse.BooleanOptionalAction, default=None,
        help="Overwrite target fields that already hold a value",
    )
    p_clone.add_argument(
        "--validate", action=argparse.BooleanOptionalAction, default=None,
        help="Check values (email, url, number ranges) before writing",
    )
    p_clone.add_argument(
        "--attachments", action=argparse.BooleanOptionalAction, default=None,
        help="Check that referenced attachments exist, dropping missing ones",
    )
    p_clone.add_argument("--actor", default="cli", help="Actor id recorded on the backup")

    p_backups = sub.add_parser("backups", help="List backups of a record")
    p_backups.add_argument("record", help="Record id")

    p_restore = sub.add_parser("restore", help="Restore a backup")
    p_restore.add_argument("backup_id", help="Backup id")

    p_delete = sub.add_parser("delete-backup", help="Delete a backup")
    p_delete.add_argument("backup_id", help="Backup id")

    sub.add_parser("cleanup", help="Apply the retention policy to all backups")

    return parser


def clone_payload(args: argparse.Namespace) -> dict:
    """Request payload for the clone command; unset flags are left out."""
    options = {}
    if args.backup is not None:
        options["create_backup"] = args.backup
    if args.overwrite is not None:
        options["overwrite_existing"] = args.overwrite
    if args.validate is not None:
        options["validate_data"] = args.validate
    if args.attachments is not None:
        options["copy_attachments"] = args.attachments

    return {
        "source_record_id": args.source,
        "target_record_id": args.target,
        "field_keys": list(args.fields),
        "options": options,
    }


def dispatch(service: CloneService, args: argparse.Namespace) -> dict:
    if args.command == "fields":
        return service.get_source_fields(args.source, args.target)
    if args.command == "stats":
        return service.get_field_statistics(args.record)
    if args.command == "validate":
        return service.validate_selection(args.source, args.target, args.fields)
    if args.command == "clone":
        return service.execute_clone(clone_payload(args), actor_id=args.actor)
    if args.command == "backups":
        return service.list_backups(args.record)
    if args.command == "restore":
        return service.restore_backup(args.backup_id)
    if args.command == "delete-backup":
        return service.delete_backup(args.backup_id)
    if args.command == "cleanup":
        return service.cleanup_backups()
    raise ValueError(f"Unknown command: {args.command}")


def main(
    argv: Optional[List[str]] = None,
    service_factory: Callable[[], CloneService] = CloneService.from_config
) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    with service_factory() as service:
        response = dispatch(service, args)

    print(json.dumps(response, indent=2, default=str))
    return 0 if response.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
