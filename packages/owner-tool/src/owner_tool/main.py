# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
FDO Owner Tool - Main CLI Application

Prepares FIDO Device Onboard artifacts: initializes devices (ownership
voucher + device credential), extends vouchers for new owners and prints
their contents.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import Settings, load_settings
from .errors import OwnerToolError
from .inspector import inspect_credential, inspect_voucher
from .ownership import extend_voucher, verify_voucher
from .provisioning import initialize_device

logger = logging.getLogger(__name__)


def cmd_initialize_device(args: argparse.Namespace, settings: Settings) -> None:
    result = initialize_device(
        args.device_id,
        args.ownershipvoucher_out,
        args.device_credential_out,
        args.manufacturer_cert,
        args.device_cert_ca_private_key,
        args.device_cert_ca_chain,
        args.rendezvous_info,
        settings=settings,
    )
    print(f"Created ownership voucher for device {result.credential.guid}")


def cmd_dump_voucher(args: argparse.Namespace, settings: Settings) -> None:
    for line in inspect_voucher(args.path):
        print(line)


def cmd_dump_credential(args: argparse.Namespace, settings: Settings) -> None:
    for line in inspect_credential(args.path):
        print(line)


def cmd_extend_voucher(args: argparse.Namespace, settings: Settings) -> None:
    voucher = extend_voucher(
        args.path,
        args.current_owner_private_key,
        args.new_owner_cert,
        settings=settings,
    )
    print(f"Ownership voucher extended, now {len(voucher.entries)} entries")


def cmd_verify_voucher(args: argparse.Namespace, settings: Settings) -> None:
    count = verify_voucher(args.path)
    print(f"Ownership chain valid ({count} entries)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="owner-tool",
        description="FIDO Device Onboard ownership voucher tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Initialize a device
  owner-tool initialize-device dev-1 dev-1.ov dev-1.dc \\
      --manufacturer-cert manufacturer.pem \\
      --device-cert-ca-private-key device-ca.der \\
      --device-cert-ca-chain device-ca-chain.pem \\
      --rendezvous-info rendezvous.yml

  # Transfer to a new owner
  owner-tool extend-ownership-voucher dev-1.ov \\
      --current-owner-private-key manufacturer.der --new-owner-cert owner.pem

  # Show contents
  owner-tool dump-ownership-voucher dev-1.ov
  owner-tool dump-device-credential dev-1.dc
        """
    )
    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("initialize-device", help="Initializes device token")
    init.add_argument("device_id", help="Identifier of the device")
    init.add_argument("ownershipvoucher_out", help="Output path for ownership voucher")
    init.add_argument("device_credential_out", help="Output path for device credential")
    init.add_argument(
        "--manufacturer-cert",
        required=True,
        help="Path to the certificate for the manufacturer",
    )
    init.add_argument(
        "--device-cert-ca-private-key",
        required=True,
        help="Private key for the device certificate CA",
    )
    init.add_argument(
        "--device-cert-ca-chain",
        required=True,
        help="Chain with CA certificates for device certificate",
    )
    init.add_argument(
        "--rendezvous-info",
        required=True,
        help="Path to a YAML file containing the rendezvous information",
    )
    init.set_defaults(func=cmd_initialize_device)

    dump_ov = sub.add_parser("dump-ownership-voucher", help="Prints ownership voucher contents")
    dump_ov.add_argument("path", help="Path to the ownership voucher")
    dump_ov.set_defaults(func=cmd_dump_voucher)

    dump_dc = sub.add_parser("dump-device-credential", help="Prints device credential contents")
    dump_dc.add_argument("path", help="Path to the device credential")
    dump_dc.set_defaults(func=cmd_dump_credential)

    extend = sub.add_parser("extend-ownership-voucher", help="Extends an ownership voucher for a new owner")
    extend.add_argument("path", help="Path to the ownership voucher")
    extend.add_argument(
        "--current-owner-private-key",
        required=True,
        help="Path to the current owner private key",
    )
    extend.add_argument(
        "--new-owner-cert",
        required=True,
        help="Path to the new owner certificate",
    )
    extend.set_defaults(func=cmd_extend_voucher)

    verify = sub.add_parser("verify-ownership-voucher", help="Verifies the ownership chain of a voucher")
    verify.add_argument("path", help="Path to the ownership voucher")
    verify.set_defaults(func=cmd_verify_voucher)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()

        logging.basicConfig(
            level=settings.log_level.upper(),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        )

        args.func(args, settings)
    except OwnerToolError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
