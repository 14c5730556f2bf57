"""
Main Entry Point - logshare-cli

Fetch request logs from the Enterprise Log Share API and stream them to
stdout, a local file and/or a Google Cloud Storage object.
"""

import argparse
import logging
import sys
from typing import List, Optional

from logshare.coreutils.env import env_get, load_env
from logshare.coreutils.logging import setup_logging
from logshare.coreutils.request import new_session
from logshare.coreutils.time import dt_fromtimestamp, unix_minutes_ago
from logshare.extract.config import (
    API_URL,
    LogSource,
    RetrievalConfig,
    TimestampFormat,
    validate_sample,
)
from logshare.extract.errors import (
    ConfigurationError,
    EmptyResultError,
    LogShareError,
    ResponseError,
)
from logshare.extract.fanout import FanOutSink
from logshare.extract.logshare_api import LogShareAPIClient, ResponseMeta
from logshare.extract.query import ByRayID, ByTimestamp, FieldDiscovery
from logshare.extract.zones import resolve_zone_id
from logshare.load.gcs_storage import gcs_object_name, open_gcs_writer
from logshare.load.sinks import open_file_sink

logger = logging.getLogger(__name__)

# Credentials fall back to these environment (or .env) variables
API_KEY_VAR = "LOGSHARE_API_KEY"
API_EMAIL_VAR = "LOGSHARE_API_EMAIL"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logshare-cli",
        description="Fetch request logs from Cloudflare's Enterprise Log Share API",
    )
    parser.add_argument(
        "--api-key",
        default=env_get(API_KEY_VAR),
        help=f"Your Cloudflare API key (env: {API_KEY_VAR})",
    )
    parser.add_argument(
        "--api-email",
        default=env_get(API_EMAIL_VAR),
        help=f"The email address associated with your API key (env: {API_EMAIL_VAR})",
    )
    parser.add_argument(
        "--zone-id", help="The zone ID of the zone you are requesting logs for"
    )
    parser.add_argument(
        "--zone-name",
        help="The name of the zone you are requesting logs for; its ID is looked up",
    )
    parser.add_argument(
        "--ray-id", help="The ray ID to request logs from (instead of a timestamp)"
    )
    parser.add_argument(
        "--start-time",
        type=int,
        help="UNIX timestamp to request logs from. Defaults to 30 minutes ago",
    )
    parser.add_argument(
        "--end-time",
        type=int,
        help="UNIX timestamp to request logs to. Defaults to 20 minutes ago",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=1,
        help="The number of logs to retrieve. Pass -1 to retrieve all logs in the window",
    )
    parser.add_argument(
        "--sample",
        type=float,
        default=0.0,
        help="Sampling rate from 0.1 (10%%) to 0.9 (90%%)",
    )
    parser.add_argument(
        "--timestamp-format",
        choices=[f.value for f in TimestampFormat],
        default=TimestampFormat.UNIXNANO.value,
        help="The timestamp format to use in logs",
    )
    parser.add_argument(
        "--fields",
        action="append",
        default=[],
        help="Comma-separated list of fields to retrieve (repeatable)",
    )
    parser.add_argument(
        "--list-fields",
        action="store_true",
        help="List the available log fields for use with --fields",
    )
    parser.add_argument(
        "--by-request-time",
        action="store_true",
        help="Query the 'requests' endpoint (by request timestamp) instead of 'received'",
    )
    parser.add_argument("--output-file", help="Also write logs to this local file")
    parser.add_argument(
        "--google-storage-bucket",
        help="Google Cloud Storage bucket to upload logs to",
    )
    parser.add_argument(
        "--google-project-id",
        help="Project ID of the Google Cloud Storage bucket",
    )
    parser.add_argument(
        "--skip-create-bucket",
        action="store_true",
        help="Do not attempt to create the bucket given by --google-storage-bucket",
    )
    parser.add_argument("--api-url", default=API_URL, help=argparse.SUPPRESS)
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    return parser


def parse_fields(values: List[str]) -> List[str]:
    """Flatten repeated and comma-separated --fields values"""
    fields = []
    for value in values or []:
        fields.extend(f.strip() for f in value.split(",") if f.strip())
    return fields


def validate_args(args: argparse.Namespace):
    """Reject inconsistent flag combinations before any request is made"""
    if not args.api_key or not args.api_email:
        raise ConfigurationError("Must provide both api-key and api-email")

    if not args.zone_id and not args.zone_name:
        raise ConfigurationError("zone-name OR zone-id must be set")

    validate_sample(args.sample)

    if bool(args.google_storage_bucket) != bool(args.google_project_id):
        raise ConfigurationError(
            "Both google-storage-bucket and google-project-id must be provided "
            "to upload to Google Storage"
        )

    if parse_fields(args.fields) and args.by_request_time:
        raise ConfigurationError(
            "--fields can only be used with the 'received' endpoint"
        )


def open_sinks(args: argparse.Namespace, zone_id: str) -> list:
    """Open the optional file and GCS sinks; stdout is used when none are set"""
    sinks = []
    try:
        if args.output_file:
            sinks.append(open_file_sink(args.output_file))
        if args.google_storage_bucket:
            sinks.append(
                open_gcs_writer(
                    args.google_project_id,
                    args.google_storage_bucket,
                    gcs_object_name(zone_id),
                    skip_create_bucket=args.skip_create_bucket,
                )
            )
    except Exception:
        FanOutSink(sinks).close(raise_errors=False)
        raise
    return sinks


def run(args: argparse.Namespace) -> ResponseMeta:
    """Resolve the zone, open sinks and fetch one page of logs"""
    validate_args(args)

    start = args.start_time if args.start_time is not None else unix_minutes_ago(30)
    end = args.end_time if args.end_time is not None else unix_minutes_ago(20)

    session = new_session()
    sinks = []
    try:
        zone_id = args.zone_id or resolve_zone_id(
            args.api_key,
            args.api_email,
            args.zone_name,
            session=session,
            base_url=args.api_url,
        )

        sinks = open_sinks(args, zone_id)
        config = RetrievalConfig.build(
            args.api_key,
            args.api_email,
            sinks=sinks,
            api_url=args.api_url,
            source=LogSource.REQUESTS if args.by_request_time else LogSource.RECEIVED,
            fields=parse_fields(args.fields),
            sample=args.sample,
            timestamp_format=args.timestamp_format,
        )
        client = LogShareAPIClient(config, session=session)

        if args.list_fields:
            request = FieldDiscovery(zone_id)
        elif args.ray_id:
            request = ByRayID(zone_id, args.ray_id, end, args.count)
        else:
            logger.info(
                f"Fetching logs from {dt_fromtimestamp(start)} to {dt_fromtimestamp(end)}"
            )
            request = ByTimestamp(zone_id, start, end, args.count)

        meta = client.fetch(request)
    except BaseException:
        # the fetch error wins; close failures are only logged
        FanOutSink(sinks).close(raise_errors=False)
        raise
    else:
        FanOutSink(sinks).close()
    finally:
        session.close()

    return meta


def log_meta(meta: ResponseMeta):
    logger.info(f"HTTP status {meta.status_code} | {meta.duration}ms | {meta.url}")
    logger.info(f"Retrieved {meta.count} logs")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code"""
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        meta = run(args)
    except EmptyResultError as e:
        log_meta(e.meta)
        logger.warning(str(e))
        return 0
    except ConfigurationError as e:
        parser.print_usage(sys.stderr)
        logger.error(str(e))
        return 1
    except ResponseError as e:
        if e.meta is not None:
            log_meta(e.meta)
        logger.error(str(e))
        return 1
    except LogShareError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.error(f"Log retrieval failed: {e}")
        return 1

    log_meta(meta)
    return 0


if __name__ == "__main__":
    sys.exit(main())
