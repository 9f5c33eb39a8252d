"""Tests for dot-path helpers."""

from form_runtime.paths import deep_merge, get_path, set_path


class TestPaths:
    """Tests for get_path and set_path."""

    def test_get_nested(self):
        data = {"user": {"name": "ann", "tags": ["a", "b"]}}
        assert get_path(data, "user.name") == "ann"
        assert get_path(data, "user.tags.1") == "b"
        assert get_path(data, "user.age") is None
        assert get_path(data, "user.name.first", "n/a") == "n/a"

    def test_set_creates_parents(self):
        data = {}
        set_path(data, "user.address.city", "Oslo")
        assert data == {"user": {"address": {"city": "Oslo"}}}

    def test_set_replaces_scalar_parent(self):
        data = {"user": "ann"}
        set_path(data, "user.name", "ann")
        assert data == {"user": {"name": "ann"}}


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_later_sources_win(self):
        merged = deep_merge({"a": 1, "n": {"x": 1, "y": 1}}, {"n": {"y": 2}}, {"a": 3})
        assert merged == {"a": 3, "n": {"x": 1, "y": 2}}

    def test_none_does_not_overwrite(self):
        assert deep_merge({"a": 1}, {"a": None, "b": None}) == {"a": 1, "b": None}

    def test_sources_untouched(self):
        source = {"n": {"x": [1]}}
        merged = deep_merge(source, None)
        merged["n"]["x"].append(2)
        assert source == {"n": {"x": [1]}}
