"""
castroutes CLI.

Entry point for the ``castroutes`` command.
"""

import logging
import os
import sys

from .parser import create_parser

logger = logging.getLogger("castroutes")


def _configure_logging(debug: bool):
    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        if debug:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
            )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(logging.DEBUG if debug else logging.INFO)


def main(argv: list[str] | None = None):
    parser = create_parser()
    args_ns = parser.parse_args(argv)

    debug = args_ns.debug or bool(os.getenv("CASTROUTES_DEBUG"))
    _configure_logging(debug)
    if debug:
        os.environ["CASTROUTES_DEBUG"] = "1"
        logger.debug("Debug logging enabled.")

    args_ns.func(args_ns)


if __name__ == "__main__":
    main()
