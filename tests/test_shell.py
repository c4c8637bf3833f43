"""
Tests for interpreter selection.
"""

from pathlib import Path

from betterrun.model import Settings
from betterrun.shell import (
    NATIVE_SHELL,
    POSIX_SHELL,
    ShellKind,
    command_for,
    is_windows,
    override_argv,
    select_shell,
)


class TestSelectShell:
    def test_posix_default(self):
        shell = select_shell("linux")
        assert shell.kind is ShellKind.POSIX
        assert (shell.program,) + shell.args == POSIX_SHELL

    def test_native_default_on_windows(self):
        shell = select_shell("win32")
        assert shell.kind is ShellKind.NATIVE
        assert (shell.program,) + shell.args == NATIVE_SHELL

    def test_windows_shell_setting(self):
        settings = Settings(windows_shell=("powershell.exe", "-NoLogo", "-Command"))
        shell = select_shell("win32", settings)
        assert shell.kind is ShellKind.NATIVE
        assert shell.program == "powershell.exe"
        assert shell.args == ("-NoLogo", "-Command")

    def test_windows_shell_ignored_elsewhere(self):
        settings = Settings(windows_shell=("powershell.exe", "-Command"))
        assert select_shell("darwin", settings).program == "sh"

    def test_shell_setting(self):
        settings = Settings(shell=("bash", "-euc"))
        shell = select_shell("linux", settings)
        assert shell.kind is ShellKind.POSIX
        assert shell.describe() == "bash -euc"

    def test_shell_setting_used_on_windows_without_windows_shell(self):
        settings = Settings(shell=("bash", "-c"))
        shell = select_shell("win32", settings)
        assert shell.program == "bash"
        assert shell.kind is ShellKind.NATIVE

    def test_configured_shells_tagged_by_host(self):
        settings = Settings(shell=("bash", "-c"), windows_shell=("pwsh", "-c"))
        assert select_shell("linux", settings).kind is ShellKind.POSIX
        assert select_shell("win32", settings).kind is ShellKind.NATIVE
        assert select_shell("win32", settings).program == "pwsh"

    def test_override_wins(self):
        settings = Settings(shell=("bash", "-c"), windows_shell=("pwsh", "-c"))
        for platform in ("linux", "win32"):
            shell = select_shell(platform, settings, override=["zsh", "-c"])
            assert shell.kind is ShellKind.OVERRIDE
            assert shell.program == "zsh"
            assert shell.args == ("-c",)


class TestInvocation:
    def test_command_for_appends_line(self):
        shell = select_shell("linux")
        inv = command_for(shell, "cargo build --release", Path("/src"))
        assert inv.argv == ("sh", "-cu", "cargo build --release")
        assert inv.cwd == Path("/src")

    def test_line_is_one_argument(self):
        shell = select_shell("win32", Settings(windows_shell=("powershell.exe", "-NoLogo", "-Command")))
        inv = command_for(shell, "cp target/release/dzsm.exe C:/dzsm/dzsm.exe")
        assert inv.argv[-1] == "cp target/release/dzsm.exe C:/dzsm/dzsm.exe"
        assert len(inv.argv) == 4

    def test_override_argv_defaults(self):
        assert override_argv("bash") == ("bash", "-c")
        assert override_argv("cmd.exe") == ("cmd.exe", "/c")
        assert override_argv("pwsh", ["-NoLogo", "-Command"]) == ("pwsh", "-NoLogo", "-Command")

    def test_is_windows(self):
        assert is_windows("win32")
        assert is_windows("cygwin")
        assert not is_windows("linux")
        assert not is_windows("darwin")
