"""Tests for the tracking payload schema."""

import pytest
from pydantic import ValidationError

from minilytics.schemas.site import SiteCreate
from minilytics.schemas.track import MAX_PROPERTIES, TrackPayload


# ---------------------------------------------------------------------------
# TrackPayload
# ---------------------------------------------------------------------------


class TestTrackPayload:
    def test_minimal(self):
        payload = TrackPayload(domain="example.com", path="/")
        assert payload.has_location()
        assert payload.site_id is None

    def test_missing_location(self):
        assert not TrackPayload(domain="example.com").has_location()
        assert not TrackPayload(path="/").has_location()
        assert not TrackPayload(domain="", path="/").has_location()

    def test_extra_fields_ignored(self):
        payload = TrackPayload.model_validate({"domain": "a.com", "path": "/", "utm": "x"})
        assert not hasattr(payload, "utm")

    def test_long_domain_is_clipped(self):
        assert TrackPayload(domain="a" * 256, path="/").domain == "a" * 255

    def test_long_optional_fields_are_clipped(self):
        payload = TrackPayload(
            domain="a.com",
            path="/",
            referrer="https://r.example/?q=" + "x" * 2100,
            title="T" * 600,
            site_id="s" * 40,
            event="e" * 200,
        )
        assert len(payload.referrer) == 2048
        assert payload.title == "T" * 512
        assert len(payload.site_id) == 36
        assert len(payload.event) == 128

    def test_clipping_keeps_type_checks(self):
        with pytest.raises(ValidationError):
            TrackPayload(domain=["a.com"], path="/")

    def test_path_must_be_string(self):
        with pytest.raises(ValidationError):
            TrackPayload(domain="a.com", path=123)


class TestProperties:
    def test_scalars_accepted(self):
        props = {"s": "x", "i": 1, "f": 1.5, "b": True, "n": None}
        assert TrackPayload(domain="a.com", path="/", properties=props).properties == props

    def test_empty_map_becomes_none(self):
        assert TrackPayload(domain="a.com", path="/", properties={}).properties is None

    def test_too_many(self):
        props = {f"k{i}": i for i in range(MAX_PROPERTIES + 1)}
        with pytest.raises(ValidationError):
            TrackPayload(domain="a.com", path="/", properties=props)

    def test_at_limit(self):
        props = {f"k{i}": i for i in range(MAX_PROPERTIES)}
        assert len(TrackPayload(domain="a.com", path="/", properties=props).properties) == 20

    def test_long_key(self):
        with pytest.raises(ValidationError):
            TrackPayload(domain="a.com", path="/", properties={"k" * 65: 1})

    def test_long_value(self):
        with pytest.raises(ValidationError):
            TrackPayload(domain="a.com", path="/", properties={"k": "v" * 513})

    def test_nested_value(self):
        with pytest.raises(ValidationError):
            TrackPayload(domain="a.com", path="/", properties={"k": [1, 2]})


# ---------------------------------------------------------------------------
# SiteCreate
# ---------------------------------------------------------------------------


class TestSiteCreate:
    def test_normalizes(self):
        assert SiteCreate(domain="  WWW.Example.com ").domain == "www.example.com"

    def test_none_becomes_empty(self):
        assert SiteCreate.model_validate({"domain": None}).domain == ""

    def test_default_empty(self):
        assert SiteCreate().domain == ""

    def test_non_string_rejected(self):
        with pytest.raises(ValidationError):
            SiteCreate.model_validate({"domain": 42})
