"""Command-line interface for visionsnap.

Provides the main entry point for running the relay server, taking a
single snapshot, or running an interactive capture session.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from visionsnap.domain.models import Facing

logger = logging.getLogger(__name__)

SHOOT_HELP = "[Enter] capture  [text] capture with prompt  [s] switch camera  [x] cancel  [q] quit"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="visionsnap",
        description="Capture a photo and stream a vision model's description of it",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/visionsnap.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("serve", help="Start the analyze relay server")

    snap_parser = subparsers.add_parser("snap", help="Capture once and print the description")
    _add_capture_args(snap_parser)
    snap_parser.add_argument("--prompt", type=str, default=None, help="Instruction sent with the image")

    shoot_parser = subparsers.add_parser("shoot", help="Interactive capture session")
    _add_capture_args(shoot_parser)

    test_parser = subparsers.add_parser("capture-test", help="Capture a frame and save the encoded JPEG")
    _add_capture_args(test_parser)
    test_parser.add_argument(
        "-o", "--output", type=Path, default=Path("capture_test.jpg"),
        help="Where to write the encoded image",
    )

    return parser.parse_args(argv)


def _add_capture_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--facing", choices=[f.value for f in Facing], default=None,
        help="Camera to open (default from config)",
    )
    parser.add_argument(
        "--image", type=Path, default=None,
        help="Use an image file instead of a webcam",
    )
    parser.add_argument(
        "--server", type=str, default=None,
        help="Relay base URL (default from config)",
    )


def _build_camera(settings, args):
    if args.image is not None:
        from visionsnap.capture.still import StillImageCapture
        return StillImageCapture(args.image)

    from visionsnap.capture.webcam import WebcamCapture

    cap = settings.capture
    resolution = None
    if cap.resolution_width and cap.resolution_height:
        resolution = (cap.resolution_width, cap.resolution_height)
    return WebcamCapture(
        devices={
            Facing.USER: cap.user_device_index,
            Facing.ENVIRONMENT: cap.environment_device_index,
        },
        resolution=resolution,
    )


def _build_controller(settings, args, renderer):
    from visionsnap.capture.encoder import FrameEncoder
    from visionsnap.client.analyzer import AnalyzeClient
    from visionsnap.ui.controller import CaptureController

    client = AnalyzeClient(
        base_url=args.server or settings.client.server_url,
        timeout=settings.client.timeout,
    )
    logger.info("Using relay at %s", client.base_url)
    controller = CaptureController(
        camera=_build_camera(settings, args),
        encoder=FrameEncoder(
            max_dimension=settings.capture.max_dimension,
            quality=settings.capture.jpeg_quality,
        ),
        client=client,
        renderer=renderer,
        default_facing=Facing(args.facing) if args.facing else settings.capture.default_facing,
        default_prompt=settings.client.prompt,
        error_display_seconds=settings.client.error_display_seconds,
    )
    return controller, client


async def _snap(settings, args) -> int:
    """Capture one frame, stream the answer to stdout. Returns an exit code."""
    from visionsnap.ui.console import ConsoleRenderer

    errors: list[str] = []
    renderer = ConsoleRenderer(show_status=False)

    def record(view) -> None:
        if view.error and view.error not in errors:
            errors.append(view.error)
        renderer(view)

    controller, client = _build_controller(settings, args, record)
    async with client:
        async with controller:
            if not controller.camera_ready:
                return 1
            task = await controller.capture(args.prompt)
            if task is None:
                return 1
            await task
    return 1 if errors else 0


async def _shoot(settings, args) -> None:
    """Interactive session: one line of input per command."""
    from visionsnap.ui.console import ConsoleRenderer

    controller, client = _build_controller(settings, args, ConsoleRenderer())
    loop = asyncio.get_running_loop()
    print(SHOOT_HELP)
    async with client:
        async with controller:
            while True:
                line = await loop.run_in_executor(None, sys.stdin.readline)
                if not line:
                    break
                command = line.strip()
                if command == "q":
                    break
                if command == "s":
                    await controller.switch_camera()
                elif command == "x":
                    controller.cancel()
                elif command == "?":
                    print(SHOOT_HELP)
                else:
                    await controller.capture(command or None)


async def _capture_test(settings, args) -> None:
    """Capture a single frame and save the encoded JPEG."""
    from visionsnap.capture.encoder import FrameEncoder

    camera = _build_camera(settings, args)
    encoder = FrameEncoder(
        max_dimension=settings.capture.max_dimension,
        quality=settings.capture.jpeg_quality,
    )
    facing = Facing(args.facing) if args.facing else settings.capture.default_facing
    async with camera.session(facing):
        image = await encoder.capture(camera)
    args.output.write_bytes(image.data)
    print(f"Saved frame to {args.output} ({image.width}x{image.height}, {len(image.data)} bytes)")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the visionsnap CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from visionsnap.config.settings import load_settings
    from visionsnap.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        logger.info("Starting relay server")
        from visionsnap.relay.server import create_app
        import uvicorn
        uvicorn.run(
            create_app(settings=settings),
            host=settings.server.host,
            port=settings.server.port,
        )

    elif args.command == "snap":
        sys.exit(asyncio.run(_snap(settings, args)))

    elif args.command == "shoot":
        try:
            asyncio.run(_shoot(settings, args))
        except KeyboardInterrupt:
            pass

    elif args.command == "capture-test":
        logger.info("Running capture test")
        asyncio.run(_capture_test(settings, args))


if __name__ == "__main__":
    main()
