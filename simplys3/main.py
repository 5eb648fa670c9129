"""simplys3 command-line entry point."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .config import Settings, settings as default_settings
from .core.exceptions import InvalidArgumentError
from .repositories.storage_repo import StorageRepository
from .schemas.upload import UploadResult
from .services.credential_service import CredentialService
from .services.upload_service import UploadService
from .utils.logger import configure_logging, get_logger
from .utils.validators import split_bucket_path, validate_chunk_size, validate_concurrency

logger = get_logger(__name__)

DESCRIPTION = """\
Upload a local directory to S3, sending large files in parts.

Environment variables:
  AWS_ACCESS_KEY_ID       Your AWS Access Key ID
  AWS_SECRET_ACCESS_KEY   Your AWS Secret Access Key
  AWS_DEFAULT_REGION      The region being accessed

Missing variables are asked for on the terminal unless --nocli is given.
"""

UPLOAD_EPILOG = """\
example:
  simplys3 upload mybucket/my/sub/directory
  uploads the current directory to the "my/sub/directory" path of "mybucket"
"""


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    """Create the argument parser for all actions."""
    parser = argparse.ArgumentParser(
        prog="simplys3",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {settings.app_version}"
    )
    actions = parser.add_subparsers(dest="action", metavar="<action>")

    upload = actions.add_parser(
        "upload",
        help="upload a directory to a bucket",
        epilog=UPLOAD_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    upload.add_argument(
        "bucket_path",
        help='bucket to upload to, optionally followed by a unix style path ("bucket/some/path")',
    )
    upload.add_argument(
        "--region",
        help="region to upload data to (default: AWS_DEFAULT_REGION)",
    )
    upload.add_argument(
        "--max",
        type=int,
        dest="max_bytes",
        default=settings.max_chunk_bytes,
        help="part size in bytes; larger files are uploaded in parts "
        f"(default: {settings.max_chunk_bytes})",
    )
    upload.add_argument(
        "--concurrency",
        type=int,
        default=settings.max_concurrent,
        help=f"parts uploaded at once per file (default: {settings.max_concurrent})",
    )
    upload.add_argument(
        "--source",
        default=".",
        help="directory to upload (default: the current directory)",
    )
    upload.add_argument(
        "-n",
        "--nocli",
        action="store_true",
        help="fail instead of asking when an environment variable is missing",
    )

    actions.add_parser("help", help="show this help text")
    return parser


async def run_upload(args: argparse.Namespace, settings: Settings) -> List[UploadResult]:
    """Run the upload action."""
    bucket, bucket_path = split_bucket_path(args.bucket_path)
    settings = settings.model_copy(
        update={
            "max_chunk_bytes": validate_chunk_size(args.max_bytes),
            "max_concurrent": validate_concurrency(args.concurrency),
        }
    )
    source_dir = Path(args.source).resolve()
    if not source_dir.is_dir():
        raise InvalidArgumentError(f"Source is not a directory: {source_dir}")

    credentials = CredentialService(settings).resolve(region=args.region, no_prompt=args.nocli)

    logger.info(
        "Configuration complete",
        source=str(source_dir),
        region=credentials.region,
        bucket=bucket,
        path=bucket_path,
        max_bytes=settings.max_chunk_bytes,
        concurrency=settings.max_concurrent,
    )

    storage_repo = StorageRepository(credentials=credentials, settings=settings)
    service = UploadService(storage_repo, settings)
    return await service.upload_directory(source_dir, bucket, bucket_path)


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    """Parse arguments, run the action and return the exit code."""
    settings = settings or default_settings
    configure_logging(settings)
    parser = build_parser(settings)

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        if e.code not in (0, None):
            print("\nINVALID ARGUMENTS", file=sys.stderr)
        return int(e.code or 0)

    if args.action in (None, "help"):
        parser.print_help()
        return 0

    try:
        results = asyncio.run(run_upload(args, settings))
    except InvalidArgumentError as e:
        print(f"\nINVALID ARGUMENTS:\n  {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error("Error running upload", error=str(e), exc_info=e)
        return 1

    logger.info("Upload complete", files=len(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
