"""Tests for trellis.core.factory — building components from configuration."""

import pytest

from trellis.core.component import Component
from trellis.core.errors import ClassNotFoundError, MissingClassError
from trellis.core.factory import class_name_of, create_component, split_config


class Widget(Component):
    def __init__(self, label="plain", *, context=None):
        super().__init__(context=context)
        self.label = label
        self.size = 1
        self.except_ = None


class Plain:
    def __init__(self, *args):
        self.args = args


class TestSplitConfig:
    def test_string(self):
        assert split_config("Logger") == ("Logger", {})

    def test_mapping(self):
        assert split_config({"class": "Logger", "auto_flush": 5}) == ("Logger", {"auto_flush": 5})

    def test_input_not_mutated(self):
        config = {"class": "Logger", "auto_flush": 5}
        split_config(config)
        assert config == {"class": "Logger", "auto_flush": 5}

    def test_mapping_without_class(self):
        with pytest.raises(MissingClassError):
            split_config({"auto_flush": 5})

    def test_unsupported_type(self):
        with pytest.raises(MissingClassError):
            split_config(42)


class TestCreateComponent:
    def test_properties_assigned(self, context):
        widget = create_component(context, {"class": Widget, "size": 3})
        assert isinstance(widget, Widget)
        assert widget.size == 3

    def test_receives_context(self, context):
        assert create_component(context, Widget).context is context

    def test_extra_args_forwarded(self, context):
        widget = create_component(context, {"class": Widget}, "fancy")
        assert widget.label == "fancy"

    def test_keyword_keys_map_to_underscore(self, context):
        widget = create_component(context, {"class": Widget, "except": "system.*"})
        assert widget.except_ == "system.*"

    def test_init_not_called(self, context):
        assert create_component(context, Widget).is_initialized is False

    def test_non_component_class(self, context):
        obj = create_component(context, {"class": Plain, "flag": True}, 1, 2)
        assert obj.args == (1, 2)
        assert obj.flag is True

    def test_core_class_by_name(self, context):
        from trellis.framework.logging.logger import Logger

        log = create_component(context, {"class": "Logger", "auto_flush": 7})
        assert isinstance(log, Logger)
        assert log.auto_flush == 7

    def test_unknown_class(self, context):
        with pytest.raises(ClassNotFoundError):
            create_component(context, "NoSuchComponent")


class TestClassNameOf:
    @pytest.mark.parametrize(
        ("spec", "expected"),
        [
            ("Logger", "Logger"),
            ("application.models.User", "User"),
            ("myapp.routes:SlackRoute", "SlackRoute"),
            (Widget, "Widget"),
        ],
    )
    def test_short_name(self, spec, expected):
        assert class_name_of(spec) == expected
