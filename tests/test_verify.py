"""
Tests for the conformance checker
=================================
Local stream reproduction, mismatch detection and the full check run
against the oracle app (HTTP calls routed into Flask's test client).
"""

from unittest.mock import MagicMock, patch
from urllib.parse import urlparse

import pytest

from isaac64.checker import verify
from isaac64.oracle import app as oracle_app
from isaac64.oracle import config

SEED1_FIRST = [0xe19ed5d2ca98af2d, 0xa7a18d07cab39b52, 0xa0ab0232d180af14, 0x72b36dcf1af5e46f]


class _Response:
    def __init__(self, flask_response):
        self._r = flask_response
        self.status_code = flask_response.status_code

    def json(self):
        return self._r.get_json()

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError(f"HTTP {self.status_code}")


class _OracleRequests:
    """Stands in for the ``requests`` module, forwarding calls to the Flask app."""

    def __init__(self, client):
        self.client = client

    def get(self, url, timeout=None):
        return _Response(self.client.get(urlparse(url).path))

    def post(self, url, json=None, timeout=None):
        return _Response(self.client.post(urlparse(url).path, json=json))


@pytest.fixture
def oracle(monkeypatch):
    monkeypatch.setattr(config, 'OUTPUT_BITS', 64)
    monkeypatch.setattr(config, 'OUTPUT_SELECT', 'high')
    oracle_app.reset_rng(1)
    with oracle_app.app.test_client() as c:
        with patch.object(verify, 'requests', _OracleRequests(c)):
            yield


class TestLocalStream:

    def test_expected_outputs_full_width(self):
        assert verify.expected_outputs(1, 4) == SEED1_FIRST

    def test_expected_outputs_truncated(self):
        assert verify.expected_outputs(1, 2, 16, 'high') == [0xe19e, 0xa7a1]
        assert verify.expected_outputs(1, 2, 16, 'low') == [0xaf2d, 0x9b52]

    def test_predict_next(self):
        assert verify.predict_next(1, 3) == SEED1_FIRST[3]
        assert verify.predict_next(1, 0, 8) == 0xe1

    def test_to_hex_width(self):
        assert verify.to_hex(0xab, 12) == '0ab'
        assert verify.to_hex(SEED1_FIRST[0], 64) == 'e19ed5d2ca98af2d'


class TestFirstMismatch:

    @pytest.mark.parametrize("observed, expected, idx", [
        ([1, 2, 3], [1, 2, 3], None),
        ([1, 9, 3], [1, 2, 3], 1),
        ([1, 2], [1, 2, 3], 2),
        ([], [], None),
    ])
    def test_cases(self, observed, expected, idx):
        assert verify.first_mismatch(observed, expected) == idx


class TestQueryOracle:

    def test_parses_hex_and_sets_timeout(self):
        fake = MagicMock()
        fake.get.return_value.json.return_value = {'output': 'ff'}
        with patch.object(verify, 'requests', fake):
            assert verify.query_oracle(2, oracle='http://x') == [255, 255]
        fake.get.assert_called_with('http://x/get_output', timeout=verify.TIMEOUT)
        assert fake.get.call_count == 2


class TestRunCheck:

    def test_passes_against_matching_oracle(self, oracle, capsys):
        assert verify.run_check(1, 4) is True
        assert "All 4 outputs match" in capsys.readouterr().out

    def test_reseed_before_check(self, oracle):
        oracle_app.reset_rng(77)
        assert verify.run_check(1, 3, reseed=True) is True

    def test_fails_on_wrong_seed(self, oracle, capsys):
        assert verify.run_check(2, 4) is False
        assert "Mismatch at output 0" in capsys.readouterr().out

    def test_truncated_oracle(self, oracle, monkeypatch):
        monkeypatch.setattr(config, 'OUTPUT_BITS', 24)
        monkeypatch.setattr(config, 'OUTPUT_SELECT', 'low')
        assert verify.run_check(1, 3, output_bits=24, select='low') is True
