"""Pre-built commands for common tools."""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum

from shellout.arguments import Quoted, Verbatim, quoted, verbatim
from shellout.command import ShellOutCommand

QUIET_FLAG = Verbatim("--quiet")


def _git(*, allowing_prompt: bool) -> ShellOutCommand:
    if allowing_prompt:
        return ShellOutCommand.safe("git")
    return ShellOutCommand.safe("env", verbatim("GIT_TERMINAL_PROMPT=0", "git"))


def _quiet(command: ShellOutCommand, quiet: bool) -> ShellOutCommand:
    return command.appending(QUIET_FLAG) if quiet else command


# git


def git_init() -> ShellOutCommand:
    return ShellOutCommand.safe("git", verbatim("init"))


def git_clone(
    url: str, to: str | None = None, *, allowing_prompt: bool = True, quiet: bool = True
) -> ShellOutCommand:
    """Clone the repository at ``url``, optionally into ``to``."""
    command = _git(allowing_prompt=allowing_prompt).appending(*quoted("clone", url))
    if to is not None:
        command = command.appending(Quoted(to))
    return _quiet(command, quiet)


def git_commit(message: str, *, allowing_prompt: bool = True, quiet: bool = True) -> ShellOutCommand:
    """Stage everything, including untracked files, and commit it."""
    command = _git(allowing_prompt=allowing_prompt).appending(Verbatim("add . && git commit -a -m"), Quoted(message))
    return _quiet(command, quiet)


def git_push(
    remote: str | None = None, branch: str | None = None, *, allowing_prompt: bool = True, quiet: bool = True
) -> ShellOutCommand:
    command = _git(allowing_prompt=allowing_prompt).appending(Verbatim("push"))
    if remote is not None:
        command = command.appending(Verbatim(remote))
    if branch is not None:
        command = command.appending(Verbatim(branch))
    return _quiet(command, quiet)


def git_pull(
    remote: str | None = None, branch: str | None = None, *, allowing_prompt: bool = True, quiet: bool = True
) -> ShellOutCommand:
    command = _git(allowing_prompt=allowing_prompt).appending(Verbatim("pull"))
    if remote is not None:
        command = command.appending(Quoted(remote))
    if branch is not None:
        command = command.appending(Quoted(branch))
    return _quiet(command, quiet)


def git_submodule_update(
    *, initialize_if_needed: bool = True, recursive: bool = True, allowing_prompt: bool = True, quiet: bool = True
) -> ShellOutCommand:
    command = _git(allowing_prompt=allowing_prompt).appending(Verbatim("submodule update"))
    if initialize_if_needed:
        command = command.appending(Verbatim("--init"))
    if recursive:
        command = command.appending(Verbatim("--recursive"))
    return _quiet(command, quiet)


def git_checkout(branch: str, *, quiet: bool = True) -> ShellOutCommand:
    command = ShellOutCommand.safe("git", [Verbatim("checkout"), Quoted(branch)])
    return _quiet(command, quiet)


# file system


def create_folder(named: str) -> ShellOutCommand:
    return ShellOutCommand.safe("mkdir", quoted(named))


def create_file(named: str, contents: str) -> ShellOutCommand:
    """Write ``contents`` to ``named``, replacing any existing file."""
    return ShellOutCommand.safe("echo", quoted(contents)).appending(Verbatim(">"), Quoted(named))


def move_file(origin: str, target: str) -> ShellOutCommand:
    return ShellOutCommand.safe("mv", quoted(origin, target))


def copy_file(origin: str, target: str) -> ShellOutCommand:
    return ShellOutCommand.safe("cp", quoted(origin, target))


def remove_file(path: str, arguments: Sequence[str] = ("-f",)) -> ShellOutCommand:
    return ShellOutCommand.safe("rm", [*quoted(*arguments), Quoted(path)])


def open_file(path: str) -> ShellOutCommand:
    return ShellOutCommand.safe("open", quoted(path))


def read_file(path: str) -> ShellOutCommand:
    return ShellOutCommand.safe("cat", quoted(path))


def create_symlink(target: str, at: str) -> ShellOutCommand:
    return ShellOutCommand.safe("ln", quoted("-s", target, at))


def expand_symlink(path: str) -> ShellOutCommand:
    """Print the target of the symlink at ``path``."""
    return ShellOutCommand.safe("readlink", quoted(path))


# Marathon


def run_marathon_script(path: str, arguments: Sequence[str] = ()) -> ShellOutCommand:
    return ShellOutCommand.safe("marathon", quoted("run", path, *arguments))


def update_marathon_packages() -> ShellOutCommand:
    return ShellOutCommand.safe("marathon", verbatim("update"))


# Swift Package Manager


class SwiftPackageType(StrEnum):
    LIBRARY = "library"
    EXECUTABLE = "executable"


class SwiftBuildConfiguration(StrEnum):
    DEBUG = "debug"
    RELEASE = "release"


def create_swift_package(package_type: SwiftPackageType = SwiftPackageType.LIBRARY) -> ShellOutCommand:
    return ShellOutCommand.safe("swift", verbatim(f"package init --type {package_type}"))


def update_swift_packages() -> ShellOutCommand:
    return ShellOutCommand.safe("swift", verbatim("package", "update"))


def generate_swift_package_xcode_project() -> ShellOutCommand:
    return ShellOutCommand.safe("swift", verbatim("package", "generate-xcodeproj"))


def build_swift_package(configuration: SwiftBuildConfiguration = SwiftBuildConfiguration.DEBUG) -> ShellOutCommand:
    return ShellOutCommand.safe("swift", verbatim(f"build -c {configuration}"))


def test_swift_package(configuration: SwiftBuildConfiguration = SwiftBuildConfiguration.DEBUG) -> ShellOutCommand:
    return ShellOutCommand.safe("swift", verbatim(f"test -c {configuration}"))


# Fastlane


def run_fastlane(lane: str) -> ShellOutCommand:
    return ShellOutCommand.safe("fastlane", quoted(lane))


# CocoaPods


def update_cocoapods() -> ShellOutCommand:
    return ShellOutCommand.safe("pod", verbatim("update"))


def install_cocoapods() -> ShellOutCommand:
    return ShellOutCommand.safe("pod", verbatim("install"))
