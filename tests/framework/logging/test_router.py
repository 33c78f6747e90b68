"""Tests for trellis.framework.logging.router — wiring routes to logger and application."""

import pytest

from trellis.framework.logging.router import LogRouter
from trellis.framework.logging.routes.base import LogRoute
from tests._support import DummyApplication


class RecordingRoute(LogRoute):
    def __init__(self, *, context=None):
        super().__init__(context=context)
        self.batches = []

    def process_logs(self, logs):
        self.batches.append([e.message for e in logs])


@pytest.fixture
def routed_app(context, base_path):
    return DummyApplication(
        {
            "base_path": str(base_path),
            "components": {
                "log": {
                    "class": "LogRouter",
                    "routes": [
                        {"class": RecordingRoute, "levels": "error"},
                        {"class": RecordingRoute, "categories": "app.*"},
                        {"class": RecordingRoute, "enabled": False},
                    ],
                },
            },
            "preload": ["log"],
        },
        context=context,
    )


def _routes(application):
    return application.get_component("log").routes


class TestLogRouterInit:
    def test_routes_built_and_initialized(self, routed_app):
        routes = _routes(routed_app)
        assert [type(r) for r in routes] == [RecordingRoute] * 3
        assert all(r.is_initialized for r in routes)
        assert routes[0].levels == ["error"]

    def test_accepts_route_instances(self, context):
        route = RecordingRoute()
        router = LogRouter(context=context)
        router.routes = [route]
        router.init()
        assert router.routes == [route]
        assert route.is_initialized


class TestLogRouterPhases:
    def test_flush_only_buffers(self, routed_app, context):
        context.log("boom", "error", "db")
        context.log("hello", "info", "app.web")
        context.logger.flush()

        errors, app_only, disabled = _routes(routed_app)
        assert [e.message for e in errors.logs] == ["boom"]
        assert [e.message for e in app_only.logs] == ["hello"]
        assert errors.batches == [] and app_only.batches == []
        assert disabled.logs == []

    def test_flush_with_dump_writes(self, routed_app, context):
        context.log("boom", "error", "db")
        context.logger.flush(dump=True)
        errors, _, _ = _routes(routed_app)
        assert errors.batches == [["boom"]]

    def test_application_end_writes_everything(self, routed_app, context):
        context.log("early", "error", "db")
        context.logger.flush()
        context.log("late", "error", "db")

        routed_app.on_end()

        errors, app_only, disabled = _routes(routed_app)
        assert errors.batches == [["early", "late"]]
        assert app_only.batches == []
        assert disabled.batches == []

    def test_auto_flush_threshold_feeds_routes(self, routed_app, context):
        context.logger.auto_flush = 2
        context.log("one", "error", "db")
        context.log("two", "error", "db")
        assert context.logger.get_logs() == []
        errors, _, _ = _routes(routed_app)
        assert [e.message for e in errors.logs] == ["one", "two"]

    def test_detach(self, routed_app, context):
        router = routed_app.get_component("log")
        router.detach()
        context.log("boom", "error", "db")
        context.logger.flush(dump=True)
        assert router.routes[0].batches == []


class TestFileRouteEndToEnd:
    def test_end_of_application_writes_file(self, context, base_path):
        application = DummyApplication(
            {
                "base_path": str(base_path),
                "components": {
                    "log": {"class": "LogRouter", "routes": [{"class": "FileLogRoute", "levels": "error, warning"}]},
                },
                "preload": "log",
            },
            context=context,
        )
        context.log("disk almost full", "warning", "ops.disk")
        context.log("ignored", "info", "ops.disk")

        application.on_end()

        lines = (base_path / "runtime" / "application.log").read_text().splitlines()
        assert len(lines) == 1
        assert lines[0].endswith("[warning] [ops.disk] disk almost full")
