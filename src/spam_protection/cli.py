# =============================================================================
# Command-Line Interface
# =============================================================================
# Thin wrapper around SpamProtection for shell use and scripting:
#
#   spam-protection ip 8.8.8.8
#   spam-protection check email spammer@example.com
#   spam-protection report --username bob --ip 1.2.3.4 --email bob@x.com \
#                          --evidence-file message.eml
#   spam-protection set-key YOUR_KEY
#
# Exit codes:
#   0 - clean (or command succeeded)
#   1 - spam
#   2 - error (bad arguments, network failure, service error)
# =============================================================================

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from spam_protection import __app_name__, __version__
from spam_protection.api.response import classify
from spam_protection.client import SpamProtection
from spam_protection.config import Config, ConfigError, print_paths
from spam_protection.core import ClassificationPolicy, SpamProtectionError, SubjectType

logger = logging.getLogger(__name__)

EXIT_CLEAN = 0
EXIT_SPAM = 1
EXIT_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Arguments to parse. Uses sys.argv if None.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="Check IPs, emails and usernames against StopForumSpam",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--paths",
        action="store_true",
        help="Print configuration paths and exit",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: XDG config location)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose logging)",
    )

    parser.add_argument(
        "--threshold",
        type=int,
        help="Frequency threshold (1=strict, 3=high, 5=medium, 10=low)",
    )

    parser.add_argument(
        "--confidence",
        type=float,
        help="Also require this confidence score (0-100) for a spam verdict",
    )

    parser.add_argument(
        "--allow-tor",
        action="store_true",
        help="Don't flag Tor exit nodes as spam",
    )

    parser.add_argument(
        "--api-key",
        help="API key for reports (default: from keyring)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Request timeout in seconds",
    )

    subparsers = parser.add_subparsers(dest="command")

    # check TYPE VALUE
    check = subparsers.add_parser("check", help="Check a subject of any type")
    check.add_argument("type", help="ip, email or username")
    check.add_argument("value", help="The subject to check")
    check.add_argument("-v", "--verbose", action="store_true", help="Show the service's numbers")

    # ip / email / username VALUE
    for subject_type in SubjectType:
        sub = subparsers.add_parser(subject_type.value, help=f"Check a {subject_type.value}")
        sub.add_argument("value", help=f"The {subject_type.value} to check")
        sub.add_argument("-v", "--verbose", action="store_true", help="Show the service's numbers")
        sub.set_defaults(type=subject_type.value)

    # report
    report = subparsers.add_parser("report", help="Submit a spam report (needs an API key)")
    report.add_argument("--username", required=True, help="Username of the spammer")
    report.add_argument("--ip", required=True, help="IP address of the spammer")
    report.add_argument("--email", required=True, help="Email address of the spammer")
    evidence = report.add_mutually_exclusive_group(required=True)
    evidence.add_argument("--evidence", help="Evidence text")
    evidence.add_argument("--evidence-file", type=Path, help="File holding the evidence (e.g. a raw message)")

    # set-key KEY
    set_key = subparsers.add_parser("set-key", help="Store the API key in the system keyring")
    set_key.add_argument("key", help="Your StopForumSpam API key")

    return parser.parse_args(argv)


def build_client(args: argparse.Namespace, config: Config) -> SpamProtection:
    """
    Create a client from the config file, the keyring and CLI overrides.

    CLI flags win over config.toml, which wins over the defaults.
    """
    # Lookups never need the key, so only reports touch the keyring
    api_key = args.api_key
    if api_key is None and args.command == "report":
        api_key = Config.load_api_key()
    options = config.to_options(api_key=api_key)

    if args.threshold is not None or args.confidence is not None:
        policy = ClassificationPolicy(
            frequency_threshold=(
                args.threshold if args.threshold is not None
                else options.policy.frequency_threshold
            ),
            confidence_threshold=(
                args.confidence if args.confidence is not None
                else options.policy.confidence_threshold
            ),
        )
        options = replace(options, policy=policy)

    if args.allow_tor:
        options = replace(options, allow_tor_nodes=True)

    if args.timeout is not None:
        options = replace(options, timeout=args.timeout)

    return SpamProtection(options=options)


def run_check(client: SpamProtection, args: argparse.Namespace) -> int:
    """Look up one subject and print the verdict."""
    if args.verbose:
        # One round trip: fetch the record, then classify it locally
        record = client.lookup(args.type, args.value)
        is_spam = classify(record, client.options.policy)
        print(
            f"{'spam' if is_spam else 'clean'}\t"
            f"appears={int(record.appears)} frequency={record.frequency} "
            f"confidence={record.confidence if record.confidence is not None else '-'}"
        )
    else:
        is_spam = client.check(args.type, args.value)
        print("spam" if is_spam else "clean")

    return EXIT_SPAM if is_spam else EXIT_CLEAN


def run_report(client: SpamProtection, args: argparse.Namespace) -> int:
    """Submit a spam report."""
    if args.evidence_file is not None:
        try:
            evidence = args.evidence_file.read_text(errors="replace")
        except OSError as e:
            print(f"error: cannot read {args.evidence_file}: {e}", file=sys.stderr)
            return EXIT_ERROR
    else:
        evidence = args.evidence

    client.submit_report(args.username, args.ip, evidence, args.email)
    print("Report submitted")
    return EXIT_CLEAN


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for spam-protection.

    This function:
        1. Parses command-line arguments
        2. Handles special commands (--paths, set-key)
        3. Loads configuration
        4. Runs the requested check or report

    Returns:
        Exit code (see module header).
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Handle --paths flag
    if args.paths:
        print_paths()
        return EXIT_CLEAN

    if args.command is None:
        print("error: no command given (try --help)", file=sys.stderr)
        return EXIT_ERROR

    try:
        if args.command == "set-key":
            Config.save_api_key(args.key)
            print("API key stored in keyring")
            return EXIT_CLEAN

        config = Config.load(args.config)

        with build_client(args, config) as client:
            if args.command == "report":
                return run_report(client, args)
            return run_check(client, args)

    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except SpamProtectionError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
