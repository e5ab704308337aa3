"""
BikePark Monitor: bicycle parking occupancy dashboard.

Loads the detector in the background, then serves the dashboard and its API.

Usage:
    python src/main.py --config config/config.yaml

Arguments:
    --config: Path to configuration file
    --host / --port: Override web.host / web.port
    --log-level: Override log_level
"""

import argparse
import logging
import sys

import uvicorn

from detection.scheduler import RefreshScheduler
from inference.cpu_backend import CpuYoloConfig, UltralyticsCpuBackend
from inference.loader import ModelLoader
from models.config import Config
from observation.frame_source import FrameSource
from observation.opencv_source import OpenCVSource, OpenCVSourceConfig
from ops.config import load_config, validate_config
from ops.logging import setup_logging
from session.dashboard import DashboardSession
from web.app import create_app


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="BikePark Monitor dashboard")
    parser.add_argument("--config", default="config/config.yaml", help="Path to configuration file")
    parser.add_argument("--host", default=None, help="Bind address (overrides web.host)")
    parser.add_argument("--port", type=int, default=None, help="Port (overrides web.port)")
    parser.add_argument("--log-level", default=None, help="Log level (overrides log_level)")
    return parser.parse_args(argv)


def build_session(cfg: Config, scheduler: RefreshScheduler) -> DashboardSession:
    """Wire detector loader, camera acquisition and scheduler into a session."""
    yolo_cfg = CpuYoloConfig.from_detection_config(cfg.detection)
    loader = ModelLoader(lambda: UltralyticsCpuBackend(yolo_cfg))

    camera_cfg = OpenCVSourceConfig.from_camera_config(cfg.camera)
    frame_source = FrameSource(acquire_stream=lambda: OpenCVSource(camera_cfg))

    return DashboardSession(loader, frame_source, scheduler, config=cfg)


def main(argv=None) -> int:
    args = parse_args(argv)

    raw_cfg = load_config(args.config)
    if args.log_level:
        raw_cfg["log_level"] = args.log_level
    is_valid, error = validate_config(raw_cfg)
    if not is_valid:
        print(f"Configuration error: {error}", file=sys.stderr)
        return 1

    cfg = Config.from_dict(raw_cfg)
    if args.host:
        cfg.web.host = args.host
    if args.port:
        cfg.web.port = args.port

    setup_logging(cfg.log_path, cfg.log_level)
    logging.info("Starting BikePark Monitor")

    scheduler = RefreshScheduler(fps=cfg.detection.refresh_fps)
    session = build_session(cfg, scheduler)
    session.loader.start()

    app = create_app(session, cfg)
    try:
        uvicorn.run(app, host=cfg.web.host, port=cfg.web.port, log_level=cfg.log_level.lower())
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    finally:
        session.reset()
        scheduler.shutdown()
        logging.info("BikePark Monitor stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
