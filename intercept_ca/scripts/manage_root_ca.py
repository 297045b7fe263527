#!/usr/bin/env python3
"""Manage the intercepting proxy's root CA: ensure, generate, import, export, publish."""

import argparse
import sys
from pathlib import Path

from intercept_ca.lib.authority_store import AuthorityStore, FileAuthorityStore
from intercept_ca.lib.certificate_service import CertificateService
from intercept_ca.lib.config import CAConfig
from intercept_ca.lib.logging_config import LOGGER
from intercept_ca.lib.models import AuthorityStatus
from intercept_ca.lib.root_ca_manager import RootCertificateManager
from intercept_ca.lib.s3_client import S3Client
from intercept_ca.lib.ssm_client import SSMAuthorityStore

PROJECT_NAME = "intercept-proxy"


class DetachedTransport:
    """Stands in for the proxy's TLS layer when running from the command line."""

    def __init__(self) -> None:
        self.service: CertificateService | None = None

    def set_certificate_service(self, service: CertificateService | None) -> None:
        self.service = service
        if service is not None:
            LOGGER.info("Certificate service ready (no transport layer attached)")


class ConsolePrompt:
    """Asks the operator on stdin/stdout."""

    def confirm(self, message: str) -> bool:
        answer = input(f"{message} [y/N] ")
        return answer.strip().lower() in ("y", "yes")

    def warn(self, message: str) -> None:
        print(message, file=sys.stderr)


def build_store(args: argparse.Namespace, config: CAConfig) -> AuthorityStore:
    """Return the root CA store selected on the command line."""
    if args.ssm_account:
        return SSMAuthorityStore(
            project_name=args.ssm_project,
            account=args.ssm_account,
            config=config,
        )
    return FileAuthorityStore(args.store_dir, config=config)


def run_command(manager: RootCertificateManager, args: argparse.Namespace) -> int:
    """Run the selected sub-command.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    if args.command == "ensure":
        status = manager.ensure_active_authority()
        return 1 if status is AuthorityStatus.UNAVAILABLE else 0

    if args.command == "generate":
        return 0 if manager.generate_root_certificate() else 1

    if args.command == "import":
        result = manager.import_root_certificate(args.pem_file)
        if not result.ok:
            LOGGER.error("Import failed: %s", result.message)
            return 1
        LOGGER.info("Imported root CA from %s", args.pem_file)
        return 0

    if args.command == "export":
        manager.write_root_ca_cert_as_pem(args.destination)
        LOGGER.info("Root CA certificate written to %s", args.destination)
        return 0

    if args.command == "publish":
        version_id = manager.publish_root_ca_cert(S3Client(), args.s3_bucket, args.s3_key)
        LOGGER.info("Published root CA certificate to s3://%s/%s", args.s3_bucket, args.s3_key)
        if version_id:
            LOGGER.info("  Version: %s", version_id)
        return 0

    raise ValueError(f"unknown command: {args.command}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the intercepting proxy root CA")
    parser.add_argument(
        "--store-dir",
        type=Path,
        default=Path("intercept_ca/output"),
        help="Directory holding root-ca/RootCA.pem (default: intercept_ca/output)",
    )
    parser.add_argument(
        "--ssm-account",
        help="Store the root CA in SSM under this account/environment instead of on disk",
    )
    parser.add_argument(
        "--ssm-project",
        default=PROJECT_NAME,
        help=f"Project name for SSM paths (default: {PROJECT_NAME})",
    )
    parser.add_argument(
        "--validity-days",
        type=int,
        default=CAConfig.root_validity_days,
        help=f"Validity of generated root CAs in days (default: {CAConfig.root_validity_days})",
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Offer to regenerate an expired root CA",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("ensure", help="Load or generate the root CA and check its expiry")
    commands.add_parser("generate", help="Generate a new root CA, replacing the current one")
    import_parser = commands.add_parser("import", help="Import a root CA from a PEM file")
    import_parser.add_argument("pem_file", type=Path, help="PEM with certificate and private key")
    export_parser = commands.add_parser("export", help="Write the root CA certificate as PEM")
    export_parser.add_argument("destination", type=Path, help="Output PEM file")
    publish_parser = commands.add_parser("publish", help="Upload the root CA certificate to S3")
    publish_parser.add_argument("--s3-bucket", required=True, help="S3 bucket for the certificate")
    publish_parser.add_argument(
        "--s3-key", default="root-ca.pem", help="S3 object key (default: root-ca.pem)"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Manage the root CA.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_args(argv)

    try:
        config = CAConfig(root_validity_days=args.validity_days)
        store = build_store(args, config)
        manager = RootCertificateManager.create(
            sink=DetachedTransport(),
            store=store,
            handle_server_certs=True,
            prompt=ConsolePrompt() if args.interactive else None,
        )
        return run_command(manager, args)

    except Exception as e:
        LOGGER.error("Root CA %s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
