import unittest
from unittest.mock import MagicMock
import sys
import os

import requests

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api_clients.ostium_subgraph_client import OstiumSubgraphClient, SubgraphTrade


def make_response(body):
    response = MagicMock()
    response.json.return_value = body
    return response


def raw_trade(trade_id, notional="1000000", trade_notional=None, is_open=False):
    return {
        "id": f"0x{trade_id}",
        "tradeID": trade_id,
        "notional": notional,
        "tradeNotional": trade_notional,
        "timestamp": "1704067200",
        "isOpen": is_open,
    }


class TestSubgraphTrade(unittest.TestCase):

    def test_from_json(self):
        trade = SubgraphTrade.from_json(raw_trade("42", "4857350", "0", True))
        self.assertEqual(trade.trade_id, "42")
        self.assertEqual(trade.notional, "4857350")
        self.assertEqual(trade.trade_notional, "0")
        self.assertEqual(trade.timestamp, 1704067200)
        self.assertTrue(trade.is_open)

    def test_bad_timestamp_and_missing_notional(self):
        trade = SubgraphTrade.from_json({"tradeID": 7, "timestamp": "soon"})
        self.assertEqual(trade.trade_id, "7")
        self.assertEqual(trade.notional, "0")
        self.assertIsNone(trade.timestamp)
        self.assertFalse(trade.is_open)


class TestOstiumSubgraphClient(unittest.TestCase):

    def setUp(self):
        self.client = OstiumSubgraphClient("http://subgraph.test", timeout=5, chunk_size=100, page_size=2)
        self.client.session = MagicMock()

    def test_trades_by_ids_are_chunked(self):
        ids = [str(i) for i in range(250)]
        self.client.session.post.side_effect = [
            make_response({"data": {"trades": [raw_trade("0"), raw_trade("99")]}}),
            make_response({"errors": [{"message": "indexer unavailable"}]}),
            make_response({"data": {"trades": [raw_trade("249")]}}),
        ]

        trades = self.client.get_trades_by_ids(ids)

        self.assertEqual(self.client.session.post.call_count, 3)
        self.assertEqual(sorted(trades), ["0", "249", "99"])
        chunks = [c.kwargs["json"]["variables"]["tradeIds"] for c in self.client.session.post.call_args_list]
        self.assertEqual([len(c) for c in chunks], [100, 100, 50])

    def test_trades_by_ids_skips_duplicates_and_blanks(self):
        self.client.session.post.return_value = make_response({"data": {"trades": []}})
        self.assertEqual(self.client.get_trades_by_ids([]), {})
        self.client.session.post.assert_not_called()

        self.client.get_trades_by_ids(["1", "1", None, "", "2"])
        self.assertEqual(self.client.session.post.call_args.kwargs["json"]["variables"]["tradeIds"], ["1", "2"])

    def test_transport_failure_skips_chunk(self):
        self.client.session.post.side_effect = requests.exceptions.Timeout("slow")
        self.assertEqual(self.client.get_trades_by_ids(["1"]), {})

    def test_trades_by_trader_pages(self):
        self.client.session.post.side_effect = [
            make_response({"data": {"trades": [raw_trade("1"), raw_trade("2")]}}),
            make_response({"data": {"trades": [raw_trade("3", is_open=True)]}}),
        ]

        trades = self.client.get_trades_by_trader("0xABCDEF")

        self.assertEqual([t.trade_id for t in trades], ["1", "2", "3"])
        variables = [c.kwargs["json"]["variables"] for c in self.client.session.post.call_args_list]
        self.assertEqual(variables[0], {"trader": "0xabcdef", "first": 2, "lastId": ""})
        self.assertEqual(variables[1]["lastId"], "0x2")

    def test_trades_by_trader_failure_discards_partial_history(self):
        self.client.session.post.side_effect = [
            make_response({"data": {"trades": [raw_trade("1"), raw_trade("2")]}}),
            make_response({"errors": [{"message": "boom"}]}),
        ]
        self.assertEqual(self.client.get_trades_by_trader("0xabc"), [])

    def test_busy_trader_is_read_past_the_skip_limit(self):
        history = [raw_trade(f"{i:05d}", notional="2000000") for i in range(7000)]

        def graph_endpoint(url, json, timeout):
            variables = json["variables"]
            if variables.get("skip", 0) > 5000:
                return make_response({"errors": [{"message": "The `skip` argument must be between 0 and 5000"}]})
            newer = [t for t in history if t["id"] > variables["lastId"]]
            return make_response({"data": {"trades": newer[:variables["first"]]}})

        self.client.page_size = 1000
        self.client.session.post.side_effect = graph_endpoint

        trades = self.client.get_trades_by_trader("0xbusy")

        self.assertEqual(len(trades), 7000)
        self.assertEqual(len({t.trade_id for t in trades}), 7000)
        self.assertEqual(self.client.session.post.call_count, 8)

    def test_stalled_cursor_discards_history(self):
        self.client.session.post.return_value = make_response(
            {"data": {"trades": [raw_trade("1"), {"tradeID": "2", "notional": "1"}]}}
        )
        self.assertEqual(self.client.get_trades_by_trader("0xabc"), [])

    def test_http_error_returns_none(self):
        response = make_response({})
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500")
        self.client.session.post.return_value = response
        self.assertIsNone(self.client._query("query {}", {}))


if __name__ == '__main__':
    unittest.main()
