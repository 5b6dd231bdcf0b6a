"""Tests for shell argv construction."""

import pytest

from native_shell import (
    Bash,
    Cmd,
    Executable,
    LaunchError,
    NativeShell,
    TokenizeError,
    create_shell,
)


class TestBuildCommand:
    """Each mode turns script text into argv."""

    def test_bash(self):
        assert Bash().build_command("echo $x; ls", {}, {}) == ["bash", "-c", "echo $x; ls"]

    def test_bash_custom_binary(self):
        assert Bash("/opt/bash/bin/bash").build_command("true", {}, {})[0] == "/opt/bash/bin/bash"

    def test_cmd(self):
        assert Cmd().build_command("echo %x%", {}, {}) == ["cmd.exe", "/c", "echo %x%"]

    def test_executable_with_path(self):
        argv = Executable().build_command("./tool --name $who", {"who": "me"}, {})
        assert argv == ["./tool", "--name", "me"]

    def test_executable_ignores_inherited_variables(self):
        """Only bindings are substituted; the child environment is for PATH lookup."""
        argv = Executable().build_command(
            "./tool $HOME ${who}",
            {"who": "me"},
            {"HOME": "/home/user", "who": "me"},
        )
        assert argv == ["./tool", "$HOME", "me"]

    def test_executable_not_found(self):
        with pytest.raises(LaunchError) as exc_info:
            Executable().build_command("blawhhhhhh arg", {}, {"PATH": ""})
        assert exc_info.value.argv == ["blawhhhhhh", "arg"]

    def test_error_position_counts_leading_whitespace(self):
        with pytest.raises(TokenizeError) as exc_info:
            Executable().build_command('  echo "abc', {}, {})
        assert exc_info.value.position == 7


class TestRegistry:
    """Shells can be created by name."""

    @pytest.mark.parametrize("name, cls", [("bash", Bash), ("cmd", Cmd), ("executable", Executable)])
    def test_create(self, name, cls):
        shell = create_shell(name)
        assert isinstance(shell, cls)
        assert isinstance(shell, NativeShell)

    def test_unknown(self):
        with pytest.raises(ValueError, match="unknown shell"):
            create_shell("zsh")
