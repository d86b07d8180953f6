import logging

import requests
from curlify import to_curl

logger = logging.getLogger(__name__)


class StatsError(Exception):
    """anything that stops a check from getting its stats; always fatal"""


class FetchError(StatsError):
    pass


class DecodeError(FetchError):
    pass


class NoLocalNodeError(StatsError):
    pass


class StatsSource:
    """
    where checks get their data from

    fetch() takes a resource path relative to the cluster, e.g. '_cluster/health',
    and returns the decoded json (dicts, lists, strings, numbers, None) or raises FetchError
    """

    def fetch(self, path):
        raise NotImplementedError


class HttpStatsSource(StatsSource):
    def __init__(self, base_url, session=None):
        self.base_url = base_url.rstrip("/")
        if session is None:
            session = requests.Session()
            # talk to the cluster directly, never through http_proxy/https_proxy
            session.trust_env = False
        self.session = session

    def url_for(self, path):
        return "{}/{}".format(self.base_url, path.lstrip("/"))

    def fetch(self, path):
        url = self.url_for(path)
        logger.debug("fetching {}".format(url))
        try:
            response = self.session.get(url)
        except requests.RequestException as e:
            raise FetchError("retrieval of {} failed: {}".format(url, e)) from e

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(to_curl(response.request))
        if response.status_code != 200 or not response.content:
            logger.debug("{} answered {} with {} bytes".format(url, response.status_code, len(response.content)))
            raise FetchError("retrieval of {} failed to return data".format(url))

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError("response from {} is not valid json: {}".format(url, e)) from e


def dig(tree, *path, default=None):
    """
    walk nested dicts without caring whether the keys are there

    dig(stats, 'jvm', 'mem', 'heap_used') -> value, or default when any
    step is missing or not a dict
    """
    node = tree
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node
