"""Tests for RetrievalConfig validation."""

import io
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from logshare.extract.config import (
    API_URL,
    DEFAULT_MAX_RECORD_SIZE,
    LogSource,
    RetrievalConfig,
    TimestampFormat,
)
from logshare.extract.errors import ConfigurationError

API_KEY = "test-api-key"
API_EMAIL = "test@email.io"


class TestCredentials:
    def test_empty_key(self):
        with pytest.raises(ConfigurationError, match="api_key cannot be empty"):
            RetrievalConfig("", "")

    def test_empty_email(self):
        with pytest.raises(ConfigurationError, match="api_email cannot be empty"):
            RetrievalConfig(API_KEY, "")

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            RetrievalConfig("", API_EMAIL)


class TestDefaults:
    def test_defaults(self):
        cfg = RetrievalConfig(API_KEY, API_EMAIL)
        assert cfg.api_url == API_URL
        assert cfg.source is LogSource.RECEIVED
        assert cfg.fields == ()
        assert cfg.sample == 0.0
        assert cfg.timestamp_format is None
        assert cfg.sinks == ()
        assert cfg.headers == ()
        assert cfg.max_record_size == DEFAULT_MAX_RECORD_SIZE

    def test_frozen(self):
        cfg = RetrievalConfig(API_KEY, API_EMAIL)
        with pytest.raises(AttributeError):
            cfg.sample = 0.5

    def test_trailing_slash_stripped(self):
        cfg = RetrievalConfig(API_KEY, API_EMAIL, api_url="https://api.test/v4/")
        assert cfg.api_url == "https://api.test/v4"


class TestSample:
    @pytest.mark.parametrize("sample", [0.0, 0.1, 0.5, 0.9])
    def test_valid(self, sample):
        assert RetrievalConfig(API_KEY, API_EMAIL, sample=sample).sample == sample

    @pytest.mark.parametrize("sample", [0.05, 0.95, 1.0, -0.5, 2])
    def test_out_of_range(self, sample):
        with pytest.raises(ConfigurationError, match="sample"):
            RetrievalConfig(API_KEY, API_EMAIL, sample=sample)


class TestTimestampFormat:
    @pytest.mark.parametrize("value", ["unix", "unixnano", "rfc3339", "UNIX"])
    def test_strings_accepted(self, value):
        cfg = RetrievalConfig(API_KEY, API_EMAIL, timestamp_format=value)
        assert cfg.timestamp_format is TimestampFormat(value.lower())

    def test_enum_accepted(self):
        cfg = RetrievalConfig(
            API_KEY, API_EMAIL, timestamp_format=TimestampFormat.RFC3339
        )
        assert cfg.timestamp_format is TimestampFormat.RFC3339

    def test_empty_means_unset(self):
        assert RetrievalConfig(API_KEY, API_EMAIL, timestamp_format="").timestamp_format is None

    @pytest.mark.parametrize("value", ["iso8601", "unixmilli", "epoch"])
    def test_unknown_rejected(self, value):
        with pytest.raises(ConfigurationError, match="timestamp format"):
            RetrievalConfig(API_KEY, API_EMAIL, timestamp_format=value)


class TestFieldsAndSource:
    def test_fields_with_received(self):
        cfg = RetrievalConfig(API_KEY, API_EMAIL, fields=["RayID", "ClientIP"])
        assert cfg.fields == ("RayID", "ClientIP")

    def test_fields_with_requests_rejected(self):
        with pytest.raises(ConfigurationError, match="received"):
            RetrievalConfig(
                API_KEY, API_EMAIL, source=LogSource.REQUESTS, fields=("RayID",)
            )

    def test_empty_field_names_dropped(self):
        cfg = RetrievalConfig(
            API_KEY, API_EMAIL, source=LogSource.REQUESTS, fields=("", "")
        )
        assert cfg.fields == ()

    def test_source_from_string(self):
        cfg = RetrievalConfig(API_KEY, API_EMAIL, source="requests")
        assert cfg.source is LogSource.REQUESTS

    def test_unknown_source(self):
        with pytest.raises(ConfigurationError, match="log source"):
            RetrievalConfig(API_KEY, API_EMAIL, source="events")


class TestMisc:
    @pytest.mark.parametrize("url", ["", "api.cloudflare.com/client/v4", "ftp://x/y", "https://"])
    def test_bad_api_url(self, url):
        with pytest.raises(ConfigurationError, match="API URL"):
            RetrievalConfig(API_KEY, API_EMAIL, api_url=url)

    def test_max_record_size_positive(self):
        with pytest.raises(ConfigurationError):
            RetrievalConfig(API_KEY, API_EMAIL, max_record_size=0)

    def test_headers_copied(self):
        headers = {"X-Custom": "1"}
        cfg = RetrievalConfig(API_KEY, API_EMAIL, headers=headers)
        headers["X-Custom"] = "2"
        assert cfg.headers == (("X-Custom", "1"),)

    def test_build_accepts_lists(self):
        sink = io.BytesIO()
        cfg = RetrievalConfig.build(
            API_KEY, API_EMAIL, sinks=[sink], fields=["RayID"], sample=0.3
        )
        assert cfg.sinks == (sink,)
        assert cfg.fields == ("RayID",)
        assert cfg.sample == 0.3

    def test_fields_from_comma_string(self):
        cfg = RetrievalConfig(API_KEY, API_EMAIL, fields="RayID, ClientIP")
        assert cfg.fields == ("RayID", "ClientIP")

    def test_headers_from_pairs(self):
        cfg = RetrievalConfig(API_KEY, API_EMAIL, headers=[("X-Trace", "abc")])
        assert cfg.headers == (("X-Trace", "abc"),)

    def test_hashable(self):
        sink = io.BytesIO()
        first = RetrievalConfig(API_KEY, API_EMAIL, sinks=(sink,), headers={"X-Custom": "1"})
        second = RetrievalConfig(API_KEY, API_EMAIL, sinks=(sink,), headers={"X-Custom": "1"})
        assert hash(first) == hash(second)
        assert len({first, second}) == 1
