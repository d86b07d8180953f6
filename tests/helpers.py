import io

from es_status.config import Config
from es_status.output import OutputSink
from es_status.stats import FetchError, StatsSource


def make_sink(**kwargs):
    stream = io.StringIO()
    return OutputSink(Config(**kwargs), stream=stream), stream


def render(lines, **kwargs):
    sink, stream = make_sink(**kwargs)
    sink.render(lines)
    return stream.getvalue()


class FakeSource(StatsSource):
    """answers from a dict of path -> tree, anything else fails like a dead cluster"""

    def __init__(self, responses):
        self.responses = responses
        self.fetched = []

    def fetch(self, path):
        self.fetched.append(path)
        if path not in self.responses:
            raise FetchError("retrieval of http://localhost:9200/{} failed to return data".format(path))
        return self.responses[path]
