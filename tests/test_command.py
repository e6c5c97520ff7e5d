"""Tests for commands and corrected commands."""

import dataclasses

import pytest

from cmdfix.core.command import Command
from cmdfix.core.corrected import CorrectedCommand
from cmdfix.errors import SideEffectError


class TestCommand:
    """Test the failed command value."""

    def test_script_parts(self) -> None:
        """Scripts are split like a shell would."""
        assert Command("git commit -m 'first commit'").script_parts == ("git", "commit", "-m", "first commit")

    def test_unbalanced_quotes(self) -> None:
        """Bad quoting falls back to whitespace splitting."""
        assert Command("echo 'oops").script_parts == ("echo", "'oops")

    def test_empty(self) -> None:
        """Empty scripts have no parts."""
        assert Command("").script_parts == ()

    def test_immutable(self) -> None:
        """Commands cannot be changed in place."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            Command("ls").script = "rm"

    def test_update(self) -> None:
        """update returns a modified copy."""
        original = Command("ls", "error")
        updated = original.update(output="")

        assert updated == Command("ls", "")
        assert original.output == "error"


class TestCorrectedCommand:
    """Test correction candidates."""

    def test_identity_ignores_side_effect(self) -> None:
        """Side effect and rule name do not affect equality."""
        a = CorrectedCommand("ls", 100, side_effect=lambda c, s: None, rule_name="one")
        b = CorrectedCommand("ls", 100, rule_name="two")

        assert a == b
        assert CorrectedCommand("ls", 200) != b

    def test_run_side_effect(self) -> None:
        """The side effect receives the failed command and the chosen script."""
        calls = []
        command = Command("ssh host", "error")
        candidate = CorrectedCommand("ssh host", 0, side_effect=lambda c, s: calls.append((c, s)))

        assert candidate.run_side_effect(command) is True
        assert calls == [(command, "ssh host")]
        assert CorrectedCommand("ls", 0).run_side_effect(command) is False


class TestSideEffectError:
    """Test side effect errors."""

    def test_message(self) -> None:
        """The rule name prefixes the message."""
        assert str(SideEffectError("ssh_known_hosts", "timed out")) == "ssh_known_hosts: timed out"
        assert str(SideEffectError(None, "boom")) == "<unknown>: boom"
