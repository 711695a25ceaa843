import argparse
import mimetypes
import sys
from datetime import date
from pathlib import Path

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.imaging.models import ExtractedLocation, PhotoMetadata, UploadCandidate
from app.logging.logger import Log
from app.tree_images.factory import build_image_cache
from app.verification.auth import StaticAuthProvider
from app.verification.exceptions import RecordCreationError, VerificationError
from app.verification.listener import UploadListener
from app.verification.models import VerificationDetails
from app.verification.orchestrator import build_orchestrator


class ConsoleUploadListener(UploadListener):
    """Prints orchestrator progress for command-line uploads."""

    def on_progress(self, progress: int) -> None:
        print(f"{progress:3d}%")

    def on_location(self, location: ExtractedLocation | None) -> None:
        if location is None:
            print("No GPS data found. You can enter the location manually.")
        else:
            print(f"GPS coordinates detected: {location.latitude:.4f}, {location.longitude:.4f}")

    def on_metadata(self, metadata: PhotoMetadata) -> None:
        if metadata.taken_at is not None:
            print(f"Photo taken {metadata.taken_at:%Y-%m-%d %H:%M}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="planting-verification")
    commands = parser.add_subparsers(dest="command", required=True)

    upload = commands.add_parser("upload", help="Upload a planting verification photo")
    upload.add_argument("path", type=Path)
    upload.add_argument("--owner-id", required=True)
    upload.add_argument("--tree", required=True, dest="tree_name")
    upload.add_argument("--match-id")
    upload.add_argument("--notes")
    upload.add_argument("--planting-date", type=date.fromisoformat, default=None)

    resolve = commands.add_parser("resolve", help="Resolve display images for trees")
    resolve.add_argument("names", nargs="+")
    return parser


def run_upload(args: argparse.Namespace, settings: Settings) -> int:
    content_type = mimetypes.guess_type(args.path.name)[0] or "application/octet-stream"
    candidate = UploadCandidate(
        data=args.path.read_bytes(),
        content_type=content_type,
        file_name=args.path.name,
    )
    orchestrator = build_orchestrator(
        settings,
        auth=StaticAuthProvider(args.owner_id),
        listener=ConsoleUploadListener(),
    )
    details = VerificationDetails(
        tree_name=args.tree_name,
        match_id=args.match_id,
        notes=args.notes,
        planting_date=args.planting_date or date.today(),
    )
    orchestrator.select(candidate)
    try:
        record = orchestrator.start(details)
    except RecordCreationError as exc:
        print(f"{exc}. Retrying record creation for {exc.image_url}", file=sys.stderr)
        try:
            record = orchestrator.retry_record_creation()
        except VerificationError as retry_exc:
            print(str(retry_exc), file=sys.stderr)
            return 1
    except VerificationError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        orchestrator.clear()
    print(f"Planting verified! Awaiting review: {record.id} {record.image_url}")
    return 0


def run_resolve(args: argparse.Namespace, settings: Settings) -> int:
    cache = build_image_cache(settings)
    for name, url in cache.resolve_all(args.names).items():
        print(f"{name}\t{url}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> initialize pool if needed -> run command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    needs_database = args.command == "upload" or settings.image_cache_backend == "postgres"
    if needs_database:
        init_pool(settings)
    try:
        if args.command == "upload":
            return run_upload(args, settings)
        return run_resolve(args, settings)
    finally:
        if needs_database:
            close_pool()


if __name__ == "__main__":
    sys.exit(main())
