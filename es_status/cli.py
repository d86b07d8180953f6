import argparse
import logging
import subprocess
import sys

from es_status.config import DEFAULT_HOST, DEFAULT_PORT, CheckName, Config, select_checks
from es_status.dispatch import run
from es_status.output import OutputSink
from es_status.stats import HttpStatsSource

logger = logging.getLogger(__name__)

DESCRIPTION = "Get information about the state of the Elasticsearch cluster in a hurry."

EPILOG = """examples:
  es-status --health --verbose --color
  es-status --all -vv
  es-status --settings --csv --host es01
"""


def build_parser():
    parser = argparse.ArgumentParser(
        prog="es-status",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    target = parser.add_argument_group("data gathering")
    target.add_argument("--host", default=DEFAULT_HOST, help="the host to query, default is localhost")
    target.add_argument("--port", type=int, default=DEFAULT_PORT, help="the http port, default is 9200")

    modes = parser.add_argument_group("query modes")
    modes.add_argument("--health", action="store_true", help="display overall cluster health (--verbose shows more detail)")
    modes.add_argument("--node", action="store_true", help="display node details (--verbose shows more detail)")
    modes.add_argument("--segments", action="store_true", help="display segmentation details (--verbose shows more detail)")
    modes.add_argument("--settings", action="store_true", help="display index settings (--verbose shows more detail)")
    modes.add_argument("--all", action="store_true", help="run all the checks")

    output = parser.add_argument_group("output modifiers")
    output.add_argument("--csv", action="store_true", help="separate key/value pairs with a comma instead of a colon")
    output.add_argument("--color", action="store_true", default=None, help="use coloring in the report")
    output.add_argument("--nicolai", action="store_true", help="rainbow colors, one per character")
    output.add_argument("-v", "--verbose", action="count", default=0, help="show more detail, repeat for even more (-vv)")
    output.add_argument("-d", "--debug", action="store_true", help="show everything, including internal diagnostics")
    output.add_argument("--progress", action="store_true", help="show a progress bar on stderr while checks run")
    return parser


def git_color_check():
    """follow the user's git color.ui preference when --color isn't given"""
    cmd = ["git", "config", "--global", "--get", "color.ui"]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        logger.debug("git_color_check error: {}".format(e))
        return False
    if result.stderr:
        logger.debug("git_color_check error: {}".format(result.stderr.strip()))
        return False
    logger.debug("git_color_check out: {}".format(result.stdout.strip()))
    return "auto" in result.stdout or "true" in result.stdout


def build_config(args):
    requested = [check.value for check in CheckName if getattr(args, check.value)]
    color = args.color if args.color is not None else git_color_check()
    return Config(
        checks=select_checks(requested, run_all=args.all),
        color=color,
        nicolai=args.nicolai,
        verbose=args.verbose,
        debug=args.debug,
        kv_separator="," if args.csv else ":",
        host=args.host,
        port=args.port,
        progress=args.progress,
    )


def setup_logging(debug):
    # debug diagnostics go to the same stream as the report
    logging.basicConfig(
        stream=sys.stdout if debug else sys.stderr,
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        force=True,
    )


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    config = build_config(args)
    logger.debug("Starting status check for cluster: {}".format(config.base_url))

    sink = OutputSink(config)
    source = HttpStatsSource(config.base_url)
    return run(config, source, sink)


if __name__ == "__main__":
    sys.exit(main())
