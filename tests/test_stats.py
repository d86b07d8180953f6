from unittest import TestCase, main, mock

import requests

from es_status import stats
from es_status.stats import DecodeError, FetchError, HttpStatsSource, StatsError, dig

BASE = "http://localhost:9200"


def _response(status, body, path="_cluster/health"):
    response = requests.Response()
    response.status_code = status
    response._content = body
    response.request = requests.Request("GET", "{}/{}".format(BASE, path)).prepare()
    return response


class TestHttpStatsSource(TestCase):
    def _source(self, response=None, error=None):
        session = mock.Mock()
        if error is not None:
            session.get.side_effect = error
        else:
            session.get.return_value = response
        return HttpStatsSource(BASE, session=session), session

    def test_decodes_json(self):
        source, session = self._source(_response(200, b'{"status": "green"}'))
        self.assertEqual(source.fetch("_cluster/health"), {"status": "green"})
        session.get.assert_called_once_with("http://localhost:9200/_cluster/health")

    def test_url_joining(self):
        source = HttpStatsSource("http://es01:9201/", session=mock.Mock())
        self.assertEqual(source.url_for("/_segments"), "http://es01:9201/_segments")

    def test_bad_status(self):
        source, _ = self._source(_response(500, b'{"error": "boom"}'))
        with self.assertRaises(FetchError) as ctx:
            source.fetch("_cluster/health")
        self.assertEqual(
            str(ctx.exception),
            "retrieval of http://localhost:9200/_cluster/health failed to return data",
        )

    def test_empty_body(self):
        source, _ = self._source(_response(200, b""))
        with self.assertRaises(FetchError):
            source.fetch("_cluster/health")

    def test_not_json(self):
        source, _ = self._source(_response(200, b"<html>nope</html>"))
        with self.assertRaises(DecodeError):
            source.fetch("_cluster/health")

    def test_decode_error_is_a_fetch_error(self):
        self.assertTrue(issubclass(DecodeError, FetchError))
        self.assertTrue(issubclass(FetchError, StatsError))

    def test_connection_refused(self):
        source, _ = self._source(error=requests.ConnectionError("refused"))
        with self.assertRaises(FetchError) as ctx:
            source.fetch("_segments")
        self.assertIn("refused", str(ctx.exception))

    def test_curl_line_only_built_for_debug(self):
        source, _ = self._source(_response(200, b"{}"))
        with mock.patch("es_status.stats.to_curl") as curl, \
                mock.patch.object(stats.logger, "isEnabledFor", return_value=False):
            source.fetch("_cluster/health")
        curl.assert_not_called()

    def test_curl_line_logged_in_debug(self):
        source, _ = self._source(_response(200, b"{}"))
        with mock.patch("es_status.stats.to_curl", return_value="curl -X GET ...") as curl, \
                self.assertLogs("es_status.stats", level="DEBUG") as logs:
            source.fetch("_cluster/health")
        curl.assert_called_once()
        self.assertIn("DEBUG:es_status.stats:curl -X GET ...", logs.output)

    def test_ignores_proxy_environment(self):
        source = HttpStatsSource(BASE)
        self.assertFalse(source.session.trust_env)


class TestDig(TestCase):
    TREE = {"jvm": {"mem": {"heap_used": "1gb", "empty": None}}, "list": [1, 2]}

    def test_found(self):
        self.assertEqual(dig(self.TREE, "jvm", "mem", "heap_used"), "1gb")

    def test_missing(self):
        self.assertIsNone(dig(self.TREE, "jvm", "gc", "collectors"))
        self.assertEqual(dig(self.TREE, "nope", default={}), {})

    def test_through_non_dict(self):
        self.assertIsNone(dig(self.TREE, "list", "0"))
        self.assertIsNone(dig(None, "anything"))

    def test_no_path(self):
        self.assertIs(dig(self.TREE), self.TREE)


if __name__ == "__main__":
    main()
