"""
s3artifacts CLI Entrypoint

Commands:
    s3artifacts check                  Verify credentials and connectivity
    s3artifacts upload FILE ...        Upload artifacts for a build
    s3artifacts list                   List a build's managed artifacts
    s3artifacts download NAME ...      Download managed artifacts
    s3artifacts sign NAME              Print a presigned download URL
    s3artifacts delete NAME            Delete a managed artifact

The profile is loaded from S3ARTIFACTS_* environment variables.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional, Sequence

from s3artifacts import __version__
from s3artifacts.core.config import ProfileConfig
from s3artifacts.core.types import ArtifactRef, BuildIdentity, FingerprintRecord
from s3artifacts.execution.agents import LocalAgent
from s3artifacts.observability.logging import LogLevel, setup_logging
from s3artifacts.storage.profile import ArtifactProfile
from s3artifacts.storage.session import StorageSession


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3artifacts",
        description="Publish and manage build artifacts on S3",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    build_args = argparse.ArgumentParser(add_help=False)
    build_args.add_argument("--job", required=True, help="Build display name")
    build_args.add_argument("--build-number", type=int, required=True, help="Build number")
    build_args.add_argument("--bucket", required=True, help="Target bucket")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("check", help="Verify credentials and connectivity")

    upload = subparsers.add_parser("upload", parents=[build_args], help="Upload artifacts")
    upload.add_argument("files", nargs="+", help="Files to upload")
    upload.add_argument("--search-path-length", type=int, default=0,
                        help="Prefix length stripped from unmanaged keys")
    upload.add_argument("--build-start-ms", type=int, default=0,
                        help="Build start time in ms since the epoch")
    upload.add_argument("--storage-class", default="", help="S3 storage class")
    upload.add_argument("--region", default="", help="Region selector")
    upload.add_argument("--metadata", action="append", default=[], metavar="KEY=VALUE",
                        help="User metadata (repeatable)")
    upload.add_argument("--managed", action="store_true", help="Namespace keys by build")
    upload.add_argument("--sse", action="store_true", help="Server-side encryption")
    upload.add_argument("--flatten", action="store_true", help="Drop directory structure")
    upload.add_argument("--gzip", action="store_true", help="Compress before upload")

    subparsers.add_parser("list", parents=[build_args], help="List managed artifacts")

    download = subparsers.add_parser("download", parents=[build_args], help="Download artifacts")
    download.add_argument("names", nargs="+", help="Artifact names")
    download.add_argument("--filter", default="*", help="Glob over artifact base names")
    download.add_argument("--target-dir", default=".", help="Directory to download into")

    sign = subparsers.add_parser("sign", parents=[build_args], help="Presigned download URL")
    sign.add_argument("name", help="Artifact name")

    delete = subparsers.add_parser("delete", parents=[build_args], help="Delete an artifact")
    delete.add_argument("name", help="Artifact name")

    return parser


def _parse_metadata(pairs: Sequence[str]) -> dict[str, str]:
    metadata: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"metadata must be KEY=VALUE, got {pair!r}")
        metadata[key] = value
    return metadata


def _record(bucket: str, name: str) -> FingerprintRecord:
    return FingerprintRecord(produced=False, artifact=ArtifactRef(bucket=bucket, name=name), md5sum="")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entrypoint."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    setup_logging(LogLevel.DEBUG if args.debug else LogLevel.INFO, json_output=args.json_logs)

    config_result = ProfileConfig.from_env()
    if config_result.is_err():
        print(f"Configuration error: {config_result.error}", file=sys.stderr)
        return 1

    session_result = StorageSession.open(config_result.unwrap())
    if session_result.is_err():
        print(f"Session error: {session_result.error}", file=sys.stderr)
        return 1

    profile = ArtifactProfile(session_result.unwrap(), agent=LocalAgent())

    if args.command == "check":
        result = profile.check()
        if result.is_err():
            print(result.error, file=sys.stderr)
            return 1
        print(f"Profile {profile.name}: OK")
        return 0

    build = BuildIdentity(
        display_name=args.job,
        number=args.build_number,
        start_time_ms=getattr(args, "build_start_ms", 0),
    )

    if args.command == "upload":
        try:
            metadata = _parse_metadata(args.metadata)
        except ValueError as e:
            print(e, file=sys.stderr)
            return 2
        status = 0
        for path in args.files:
            result = profile.upload(
                build,
                args.bucket,
                path,
                args.search_path_length,
                metadata,
                args.storage_class,
                args.region,
                managed_artifacts=args.managed,
                server_side_encryption=args.sse,
                flatten=args.flatten,
                gzip_files=args.gzip,
            )
            if result.is_err():
                print(result.error, file=sys.stderr)
                status = 1
            else:
                print(json.dumps(result.unwrap().to_dict()))
        return status

    if args.command == "list":
        result = profile.list(build, args.bucket, "")
        if result.is_err():
            print(result.error, file=sys.stderr)
            return 1
        for key in result.unwrap():
            print(key)
        return 0

    if args.command == "download":
        records = [_record(args.bucket, name) for name in args.names]
        report = profile.download_all(build, records, args.filter, args.target_dir, console=sys.stderr)
        for record in report.records:
            print(json.dumps(record.to_dict()))
        return 0 if report.complete else 1

    if args.command == "sign":
        result = profile.get_download_url(build, _record(args.bucket, args.name))
        if result.is_err():
            print(result.error, file=sys.stderr)
            return 1
        print(result.unwrap())
        return 0

    if args.command == "delete":
        result = profile.delete(build, _record(args.bucket, args.name))
        if result.is_err():
            print(result.error, file=sys.stderr)
            return 1
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
