"""
Command-line interface for SigV4 Python SDK
Produces presigned object URLs and Authorization headers from local credentials
"""

import argparse
import sys
from typing import Optional, Dict, List

from .version import __version__
from .config import ClientConfig, LoggingConfig, configure_logging
from .exceptions import SigV4SDKError, ConfigurationError
from .services import s3
from .signing import (
    SignableRequest,
    SigningContext,
    SigV4Signer,
    UNSIGNED_PAYLOAD,
    generate_timestamp,
)


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='sigv4-cli',
        description='Sign requests with AWS Signature Version 4'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'SigV4 Python SDK {__version__}'
    )

    parser.add_argument(
        '--config',
        help='JSON configuration file (credentials are read from the environment otherwise)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log signing details to stderr'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_presign_parser(subparsers)
    setup_auth_header_parser(subparsers)

    return parser


def setup_presign_parser(subparsers):
    """Setup presigned URL subcommand."""
    presign_parser = subparsers.add_parser('presign', help='Create a presigned GET URL for an object')
    presign_parser.add_argument('--bucket', required=True, help='Bucket name')
    presign_parser.add_argument('--key', required=True, help='Object key, starting with /')
    presign_parser.add_argument(
        '--expires',
        type=int,
        default=3600,
        help='Seconds the URL stays valid (default: 3600)'
    )
    presign_parser.add_argument('--region', help='Region (defaults to the configured region)')
    presign_parser.add_argument('--timestamp', help='Pin the signing time (YYYYMMDDThhmmssZ)')
    presign_parser.add_argument(
        '--virtual-host',
        action='store_true',
        help='Put the bucket in the host name'
    )


def setup_auth_header_parser(subparsers):
    """Setup Authorization header subcommand."""
    header_parser = subparsers.add_parser('auth-header', help='Compute the Authorization header for a request')
    header_parser.add_argument('--method', default='GET', help='HTTP method (default: GET)')
    header_parser.add_argument('--host', required=True, help='Request host')
    header_parser.add_argument('--path', default='/', help='Unescaped request path (default: /)')
    header_parser.add_argument('--service', required=True, help='Service identifier, e.g. s3')
    header_parser.add_argument('--region', help='Region (defaults to the configured region)')
    header_parser.add_argument(
        '--header',
        action='append',
        default=[],
        metavar='NAME:VALUE',
        help='Request header to sign (repeatable)'
    )
    header_parser.add_argument(
        '--arg',
        action='append',
        default=[],
        metavar='NAME[=VALUE]',
        help='Query argument; without =VALUE it is a flag argument (repeatable)'
    )
    header_parser.add_argument('--body', help='Request body to hash')
    header_parser.add_argument(
        '--unsigned-payload',
        action='store_true',
        help='Sign with UNSIGNED-PAYLOAD instead of the body hash'
    )
    header_parser.add_argument('--timestamp', help='Pin the signing time (YYYYMMDDThhmmssZ)')


def load_config(args) -> ClientConfig:
    """Load client configuration from --config or the environment."""
    if args.config:
        return ClientConfig.from_file(args.config)
    return ClientConfig.from_env()


def parse_headers(values: List[str]) -> Dict[str, str]:
    """Parse NAME:VALUE header options."""
    headers = {}
    for value in values:
        name, sep, header_value = value.partition(':')
        if not sep or not name.strip():
            raise ValueError(f"Invalid header '{value}', expected NAME:VALUE")
        headers[name.strip()] = header_value.strip()
    return headers


def parse_query_args(values: List[str]) -> Dict[str, object]:
    """Parse NAME[=VALUE] query argument options."""
    query_args: Dict[str, object] = {}
    for value in values:
        name, sep, arg_value = value.partition('=')
        if not name:
            raise ValueError(f"Invalid query argument '{value}'")
        query_args[name] = arg_value if sep else True
    return query_args


def handle_presign_command(args, config: ClientConfig) -> int:
    """Handle presigned URL generation."""
    url = s3.new_signed_url(
        path=args.key,
        expires=args.expires,
        region=args.region or config.region,
        access_key_id=config.access_key_id,
        secret_access_key=config.secret_access_key,
        bucket=args.bucket,
        use_virtual_host=args.virtual_host or config.use_virtual_host,
        timestamp=args.timestamp,
    )
    print(url)
    return 0


def handle_auth_header_command(args, config: ClientConfig) -> int:
    """Handle Authorization header generation."""
    try:
        headers = parse_headers(args.header)
        query_args = parse_query_args(args.arg)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    timestamp = args.timestamp or generate_timestamp()
    # The date header must carry the same time the signature is scoped to
    if not any(name.lower() == 'x-amz-date' for name in headers):
        headers['x-amz-date'] = timestamp

    request = SignableRequest(
        method=args.method.upper(),
        host=args.host,
        path=args.path,
        args=query_args or None,
        headers=headers,
        body=args.body,
        payload_hash=UNSIGNED_PAYLOAD if args.unsigned_payload else None,
    )
    context = SigningContext(
        service=args.service,
        region=args.region or config.region,
        access_key_id=config.access_key_id,
        secret_access_key=config.secret_access_key,
        timestamp=timestamp,
    )

    authorization = SigV4Signer(request, context).to_auth_header()

    for name, value in sorted(headers.items()):
        print(f"{name}: {value}")
    print(f"Authorization: {authorization}")
    return 0


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args)
        if args.verbose:
            configure_logging(LoggingConfig(level='DEBUG'))
        else:
            configure_logging(config.logging)

        if args.command == 'presign':
            return handle_presign_command(args, config)
        elif args.command == 'auth-header':
            return handle_auth_header_command(args, config)
        else:
            parser.print_help()
            return 1

    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except SigV4SDKError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130


if __name__ == '__main__':
    sys.exit(main())
