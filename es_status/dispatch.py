import json
import logging

from tqdm import tqdm

from es_status.checks import CHECKS, header
from es_status.output import Color
from es_status.stats import StatsError

logger = logging.getLogger(__name__)


def run(config, source, sink):
    """
    run every selected check, in CheckName order, against the source

    returns the process exit status: 0 when all checks ran, 1 as soon as
    one of them could not get its stats (later checks are skipped)
    """
    sink.debug("### Definitions ###", json.dumps(config.as_dict(), indent=4, sort_keys=True))

    selected = [CHECKS[name] for name in CHECKS if name in config.checks]
    with tqdm(total=len(selected), desc="Overall Progress", disable=not config.progress) as pbar:
        for check in selected:
            logger.debug("running {} check against {}".format(check.name.value, check.path))
            try:
                stats = source.fetch(check.path)
                lines = check.handler(stats)
            except StatsError as e:
                logger.debug("{} check failed".format(check.name.value), exc_info=True)
                sink.emit("Encountered error: {}".format(e), color=Color.RED)
                return 1

            sink.clear(1)
            sink.render(header(check.title))
            sink.render(lines)
            pbar.update(1)
    return 0
