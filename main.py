"""
Pulse Command Line Client

This is the main entry point for the Pulse client. It creates posts,
watches a map region for posts entering and leaving it, deletes or hides
posts, and formats timestamps as relative "time ago" strings.
"""

import sys
import time
import uuid
import argparse
import logging
from datetime import datetime, timezone
from typing import Optional

from config import settings
from data.models import Region, Location
from services.notification_service import ADD_POST, REMOVE_POST
from services.pulse_service import PulseService
from utils.exceptions import PulseError, ConfigurationError
from utils.logger import get_logger, setup_file_logging
from utils.time_ago import time_ago_since_date, time_ago_since_unix

# Set up logging
logger = get_logger(__name__)


def create_pulse_service(validate: bool = True, **kwargs) -> PulseService:
    """
    Build a PulseService from settings.

    Args:
        validate: Validate settings before touching Firebase.
        **kwargs: Collaborators to inject into PulseService.
    """
    if validate:
        settings.validate_settings()
    return PulseService(**kwargs)


def run_post(service: PulseService, args) -> bool:
    key = args.key or uuid.uuid4().hex
    created_at = args.time if args.time is not None else time.time()
    location = Location(args.lat, args.lon)

    success = service.new_post(key, location, args.image, args.message, created_at)
    if success:
        logger.info(f"Post {key} created")
        print(key)
    else:
        logger.warning(f"Post {key} was not created")
    return success


def run_watch(service: PulseService, args) -> bool:
    def _log_notification(name, user_info):
        if name == ADD_POST:
            location = user_info.get("location")
            logger.info(f"+ {user_info['key']} at ({location.latitude:.5f}, {location.longitude:.5f})")
        else:
            logger.info(f"- {user_info['key']}")

    tokens = [
        service.notifications.add_observer(ADD_POST, _log_notification),
        service.notifications.add_observer(REMOVE_POST, _log_notification),
    ]
    region = Region(args.lat, args.lon, args.lat_delta, args.lon_delta)

    try:
        service.update(region)
        logger.info(f"Watching region for {args.duration} seconds")
        time.sleep(args.duration)
        logger.info(f"{len(service.visible_post_keys())} posts visible")
        return True
    finally:
        for token in tokens:
            service.notifications.remove_observer(token)
        service.stop()


def run_delete(service: PulseService, args) -> bool:
    return service.delete_post(args.key)


def run_hide(service: PulseService, args) -> bool:
    service.preferences.hide_post(args.key)
    return True


def run_ago(args) -> bool:
    if args.words:
        print(time_ago_since_date(datetime.fromtimestamp(args.unix, tz=timezone.utc), numeric_dates=False))
    else:
        print(time_ago_since_unix(args.unix))
    return True


def parse_arguments(argv: Optional[list] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Pulse Client')
    parser.add_argument('--log-file', type=str, default='pulse.log', help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Logging level')
    subparsers = parser.add_subparsers(dest='command', required=True)

    post = subparsers.add_parser('post', help='Upload an image and create a post')
    post.add_argument('--image', required=True, help='Path to the image file')
    post.add_argument('--message', required=True, help='Post message')
    post.add_argument('--lat', type=float, required=True, help='Latitude')
    post.add_argument('--lon', type=float, required=True, help='Longitude')
    post.add_argument('--key', type=str, default=None, help='Post key (default: random)')
    post.add_argument('--time', type=float, default=None, help='Creation time, seconds since epoch')

    watch = subparsers.add_parser('watch', help='Report posts entering and leaving a region')
    watch.add_argument('--lat', type=float, required=True, help='Region centre latitude')
    watch.add_argument('--lon', type=float, required=True, help='Region centre longitude')
    watch.add_argument('--lat-delta', type=float, default=0.05, help='Region height in degrees')
    watch.add_argument('--lon-delta', type=float, default=0.05, help='Region width in degrees')
    watch.add_argument('--duration', type=float, default=60, help='Seconds to watch')

    delete = subparsers.add_parser('delete', help='Delete a post')
    delete.add_argument('key', help='Post key')

    hide = subparsers.add_parser('hide', help='Hide a post on this device')
    hide.add_argument('key', help='Post key')

    ago = subparsers.add_parser('ago', help='Format a timestamp as "time ago"')
    ago.add_argument('unix', type=float, help='Seconds since epoch')
    ago.add_argument('--words', action='store_true', help='Use "Yesterday" style wording')

    return parser.parse_args(argv)


COMMANDS = {
    'post': run_post,
    'watch': run_watch,
    'delete': run_delete,
    'hide': run_hide,
}


def main(argv: Optional[list] = None):
    """Main entry point for the application."""
    # Parse command line arguments
    args = parse_arguments(argv)

    if args.command == 'ago':
        return 0 if run_ago(args) else 1

    # Set up logging
    log_level = getattr(logging, args.log_level)
    setup_file_logging(args.log_file, log_level)

    logger.info(f"Starting Pulse client: {args.command}")

    try:
        service = create_pulse_service(validate=args.command != 'hide')
        success = COMMANDS[args.command](service, args)

        if success:
            logger.info(f"Pulse {args.command} completed successfully")
            exit_code = 0
        else:
            logger.warning(f"Pulse {args.command} completed with warnings or errors")
            exit_code = 1

    except ConfigurationError as e:
        logger.error(str(e))
        exit_code = 1
    except PulseError as e:
        logger.error(f"Pulse error: {e}", exc_info=True)
        exit_code = 1
    except Exception as e:
        logger.error(f"Unhandled exception in Pulse client: {e}", exc_info=True)
        exit_code = 2

    logger.info(f"Pulse client finished with exit code {exit_code}")
    return exit_code

if __name__ == "__main__":
    sys.exit(main())
