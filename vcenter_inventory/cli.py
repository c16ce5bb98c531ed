import argparse
import logging
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from vcenter_inventory.config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_RETRY_COUNT,
    DEFAULT_RETRY_DELAY,
    RunConfig,
    RunContext,
    env_disable_ssl,
    env_port,
    load_credentials,
)
from vcenter_inventory.errors import ConfigurationError
from vcenter_inventory.logs import configure_logging, release_logging
from vcenter_inventory.pipeline import InventoryPipeline
from vcenter_inventory.vsphere import VSphereSource

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="vcenter-inventory",
        description="Collect a vCenter inventory of VMs, hosts and datastores and write CSV/HTML reports.",
    )
    parser.add_argument("--endpoint", required=True, help="vCenter or ESXi address")
    parser.add_argument("--output-dir", required=True, help="Root folder for timestamped run folders")
    parser.add_argument("--credential-path", required=True,
                        help="dotenv file defining VCENTER_USER and VCENTER_PASSWORD")
    parser.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE,
                        help="Entities per collection batch (default: %(default)s)")
    parser.add_argument("--retry-count", type=int, default=DEFAULT_RETRY_COUNT,
                        help="Connection retries after the first attempt (default: %(default)s)")
    parser.add_argument("--retry-delay", type=float, default=DEFAULT_RETRY_DELAY,
                        help="Seconds between connection attempts (default: %(default)s)")
    parser.add_argument("--port", type=int, default=None, help="vCenter port (default: $VCENTER_PORT or 443)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Batches collected concurrently (default: %(default)s)")
    parser.add_argument("--disable-ssl-verification", action="store_true", default=None,
                        help="Skip certificate checks (default: $VMWARE_DISABLE_SSL_VERIFICATION)")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def config_from_args(args):
    return RunConfig(
        endpoint=args.endpoint,
        output_dir=Path(args.output_dir),
        credential_path=Path(args.credential_path),
        batch_size=args.batch_size,
        retry_count=args.retry_count,
        retry_delay=args.retry_delay,
        port=args.port if args.port is not None else env_port(),
        disable_ssl=args.disable_ssl_verification if args.disable_ssl_verification is not None
        else env_disable_ssl(),
        workers=args.workers,
    )


def main(argv=None, source_factory=VSphereSource):
    args = build_parser().parse_args(argv)
    load_dotenv(find_dotenv(usecwd=True))
    level = getattr(logging, args.log_level)

    try:
        config = config_from_args(args).validate()
        credentials = load_credentials(config.credential_path)
        context = RunContext.create(config.output_dir, config.endpoint)
    except ConfigurationError as e:
        handlers = configure_logging(level=level)
        logger.error(f"Configuration error: {e}")
        release_logging(handlers)
        return 1

    try:
        handlers = configure_logging(context.log_path, level=level)
    except OSError as e:
        handlers = configure_logging(level=level)
        logger.error(f"Could not open log file {context.log_path}: {e}")
        release_logging(handlers)
        return 1

    try:
        logger.info(f"Starting vCenter inventory collection for {config.endpoint} (run {context.timestamp})")
        if config.disable_ssl:
            logger.warning("VMware SSL CERTIFICATE VERIFICATION IS DISABLED. "
                           "This is a security risk and NOT recommended for production.")
        pipeline = InventoryPipeline(config, context, source_factory(config, credentials))
        ok = pipeline.run()
        logger.info("Script finished." if ok else "Script finished with errors.")
        return 0 if ok else 1
    finally:
        release_logging(handlers)


if __name__ == "__main__":
    sys.exit(main())
