"""Tests for the page context and navigation history."""

from minilytics.tracker.context import PageContext


class TestPageContext:
    def test_no_flags_means_tracking_allowed(self):
        assert PageContext("https://a.com/").do_not_track() is False

    def test_any_vendor_flag_enables_dnt(self):
        assert PageContext("https://a.com/", window_do_not_track="1").do_not_track()
        assert PageContext("https://a.com/", ms_do_not_track="1").do_not_track()
        assert PageContext("https://a.com/", navigator_do_not_track="yes").do_not_track()

    def test_unspecified_is_not_dnt(self):
        assert not PageContext("https://a.com/", navigator_do_not_track="unspecified").do_not_track()


class TestHistory:
    def setup_method(self):
        self.context = PageContext.with_history("https://a.com/start")
        self.history = self.context.history

    def test_push_resolves_relative_urls(self):
        self.history.push_state(None, "", "next?x=1")
        assert self.context.href == "https://a.com/next?x=1"
        assert len(self.history) == 2

    def test_replace_keeps_length(self):
        self.history.replace_state(None, "", "/other")
        assert self.context.href == "https://a.com/other"
        assert len(self.history) == 1

    def test_push_without_url_keeps_location(self):
        self.history.push_state({"step": 2})
        assert self.context.href == "https://a.com/start"

    def test_back_dispatches_popstate(self):
        seen = []
        self.history.add_listener("popstate", seen.append)
        self.history.push_state(None, "", "/b")
        self.history.back()
        assert self.context.href == "https://a.com/start"
        assert seen == [{"href": "https://a.com/start"}]

    def test_back_at_first_entry_is_noop(self):
        seen = []
        self.history.add_listener("popstate", seen.append)
        self.history.back()
        assert seen == []
