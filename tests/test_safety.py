import pytest

from pycowork.tools.safety import find_blocked_pattern, is_blocked


@pytest.mark.parametrize(
    "command",
    [
        "rm -rf /",
        "rm -fr ~/projects",
        "rm -r build",
        "rm --force a.txt",
        "rm --recursive dir",
        "sudo   RM -rf /",
        "sudo rm file",
        "mkfs.ext4 /dev/sdb1",
        "dd if=/dev/zero of=/dev/sda bs=1M",
        ":(){ :|:& };:",
        "chmod 777 /etc/passwd",
        "chmod -R 000 /",
        "chown root /etc",
        "echo hi > /dev/sda",
        "cat x > /dev/null",
    ],
)
def test_destructive_commands_are_blocked(command):
    assert is_blocked(command)


@pytest.mark.parametrize(
    "command",
    [
        "ls -la",
        "git status",
        "rm notes.txt",
        "git add . && git commit -m wip",
        "npm run build",
        "chmod 644 file.txt",
        "python script.py",
    ],
)
def test_ordinary_commands_pass(command):
    assert not is_blocked(command)


def test_find_blocked_pattern_returns_the_matching_rule():
    rx = find_blocked_pattern("sudo rm thing")
    assert rx is not None
    assert rx.search("SUDO RM x")
    assert find_blocked_pattern("echo ok") is None
