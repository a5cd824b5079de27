# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Command line entry point.

    module-resolver resolve housing --catalog configs/modules.yaml
    module-resolver check housing --catalog configs/modules.yaml --installed payments=1.2.0
"""

import argparse
import json
import sys
from dataclasses import replace
from typing import Dict, List, Optional

from module_resolver.core.config import TIE_BREAK_MODES, get_config, load_config
from module_resolver.core.errors import ModuleResolverError
from module_resolver.core.logging import get_service_logger
from module_resolver.service import ModuleInstallationService


def _parse_installed(pairs: List[str]) -> Dict[str, str]:
    installed = {}
    for pair in pairs:
        name, sep, version = pair.partition("=")
        if not sep or not name or not version:
            raise argparse.ArgumentTypeError(f"Expected name=version, got '{pair}'")
        installed[name.strip()] = version.strip()
    return installed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="module-resolver",
        description="Resolve module dependencies and installation order"
    )
    parser.add_argument(
        "--config",
        help="Resolver config file (default: $MODULE_RESOLVER_CONFIG_PATH or configs/resolver.yaml)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Print the installation order of a module")
    resolve.add_argument("module", help="Module to install")
    resolve.add_argument("--catalog", help="Module catalog file or directory")
    resolve.add_argument("--tie-break", choices=TIE_BREAK_MODES, help="Order within a generation")

    check = subparsers.add_parser("check", help="Check whether a module can be installed")
    check.add_argument("module", help="Module to install")
    check.add_argument("--catalog", help="Module catalog file or directory")
    check.add_argument(
        "--installed",
        nargs="*",
        default=[],
        metavar="NAME=VERSION",
        help="Modules already installed"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else get_config()
        overrides = {}
        if args.catalog:
            overrides["catalog_path"] = args.catalog
        if getattr(args, "tie_break", None):
            overrides["tie_break"] = args.tie_break
        if overrides:
            config = replace(config, **overrides)

        logger = get_service_logger("cli", config)
        logger.debug(f"Running {args.command} for {args.module}")
        service = ModuleInstallationService.from_config(config)

        if args.command == "resolve":
            result = service.resolve_only(args.module)
            print(json.dumps(result.model_dump(mode="json"), indent=2))
            return 0

        try:
            installed = _parse_installed(args.installed)
        except argparse.ArgumentTypeError as e:
            parser.error(str(e))
        report = service.check_installable(args.module, installed)
        print(json.dumps(report.model_dump(mode="json"), indent=2))
        return 0 if report.can_install else 1

    except ModuleResolverError as e:
        print(json.dumps(e.to_dict(), indent=2, default=str))
        return 1


if __name__ == "__main__":
    sys.exit(main())
