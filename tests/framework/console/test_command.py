"""Tests for trellis.framework.console.command — option parsing and action dispatch."""

import pytest

from trellis.core.errors import UsageError
from trellis.framework.console.command import ConsoleCommand
from trellis.framework.console.runner import CommandRunner


class BackupCommand(ConsoleCommand):
    compress = False

    def action_index(self, target="backups", args=None):
        return ("index", target, args, self.compress)

    def action_restore(self, snapshot, args=None):
        return ("restore", snapshot, args)

    def action_tag(self, labels=[]):  # noqa: B006
        return ("tag", labels)


@pytest.fixture
def command(context):
    runner = CommandRunner(context=context)
    cmd = BackupCommand("backup", runner, context=context)
    cmd.init()
    return cmd


class TestResolveRequest:
    def test_options_and_positionals(self):
        options, args = ConsoleCommand.resolve_request(["restore", "--snapshot=s1", "--force", "extra", "--empty="])
        assert options == {"snapshot": "s1", "force": True, "empty": ""}
        assert args == ["restore", "extra"]

    def test_repeated_options_collect(self):
        options, _ = ConsoleCommand.resolve_request(["--tag=a", "--tag=b", "--tag=c"])
        assert options == {"tag": ["a", "b", "c"]}

    def test_value_may_contain_equals(self):
        options, _ = ConsoleCommand.resolve_request(["--filter=a=b"])
        assert options == {"filter": "a=b"}


class TestRun:
    def test_default_action(self, command):
        assert command.run([]) == ("index", "backups", [], False)

    def test_parameter_bound_from_option(self, command):
        assert command.run(["index", "--target=/srv/bak", "a", "b"]) == ("index", "/srv/bak", ["a", "b"], False)

    def test_missing_required_parameter_is_none(self, command):
        assert command.run(["restore"]) == ("restore", None, [])

    def test_list_parameter(self, command):
        assert command.run(["tag", "--labels=a", "--labels=b"]) == ("tag", ["a", "b"])
        assert command.run(["tag", "--labels=solo"]) == ("tag", ["solo"])

    def test_single_value_parameter_rejects_repeats(self, command):
        with pytest.raises(UsageError, match="requires a single value"):
            command.run(["index", "--target=a", "--target=b"])

    def test_leftover_option_sets_attribute(self, command):
        assert command.run(["index", "--compress"])[3] is True

    def test_unknown_option(self, command):
        with pytest.raises(UsageError, match="Unknown options: bogus"):
            command.run(["index", "--bogus=1"])

    def test_read_only_property_is_unknown_option(self, command):
        with pytest.raises(UsageError, match="Unknown options: name"):
            command.run(["index", "--name=x"])

    def test_unknown_action(self, command):
        with pytest.raises(UsageError, match='Unknown action "nope"'):
            command.run(["nope"])

    def test_usage_error_carries_command(self, command):
        with pytest.raises(UsageError) as exc_info:
            command.run(["nope"])
        assert exc_info.value.context == {"command": "backup"}


class TestHelp:
    def test_actions(self, command):
        assert command.actions == ["index", "restore", "tag"]

    def test_help_lists_actions_with_hints(self, command):
        assert command.help.splitlines() == [
            "Usage:",
            "   trellis backup [--target=value]",
            "   trellis backup restore --snapshot=value",
            "   trellis backup tag [--labels=value --labels=value ...]",
        ]

    def test_single_action_help(self, context):
        class PingCommand(ConsoleCommand):
            def action_index(self):
                return 0

        runner = CommandRunner(context=context)
        assert PingCommand("ping", runner).help == "Usage: trellis ping"
