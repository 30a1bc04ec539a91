"""
Safety filter for task-sh.

Classifies a generated command as SAFE, RISKY or BLOCKED against an ordered
list of pattern rules. Every rule is evaluated; the verdict is the worst
severity that matched and names the first rule of that severity.

Blocked commands are never shown as runnable suggestions. Risky commands are
shown with a warning. The filter is fail-closed: an empty or untokenizable
command is at least RISKY.
"""

import logging
import re
import shlex
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from task_sh.models.command_models import Classification, SafetyVerdict

logger = logging.getLogger(__name__)

# Paths whose recursive removal wipes the system or the user's home
_ROOT_OR_HOME = (
    r"""["']?(?:/\*?|(?:~|\$HOME|\$\{HOME\}|/home|/root|/home/[\w.-]+"""
    r"""|/Users/[\w.-]+)["']?(?:/\*?)?)["']?"""
)
_RM_FLAGS = r"(?:-{1,2}[\w-]+\s+)*?"
_RM_RECURSIVE = r"(?:-[a-z]*r[a-z]*|--recursive)\b(?:\s+-{1,2}[\w-]+)*"
_END = r"(?=\s|$|;|&|\|)"

_BLOCK_DEVICE = r"/dev/(?:sd[a-z]|hd[a-z]|vd[a-z]|xvd[a-z]|nvme\d|mmcblk\d|disk\d)"
_SECRET_FILES = (
    r"(?:\.ssh/id_\w+\b(?!\.pub)|\.ssh/\w*_key\b(?!\.pub)|/etc/shadow\b"
    r"|(?<![\w-])\.aws\b|\.netrc\b|(?<![\w-])\.gnupg\b|\.kube/config\b"
    r"""|\.ssh/?(?=["']?(?:\s|$|;|&|\|)))"""
)
_NETWORK_TOOLS = (
    r"\b(?:curl|wget|nc|ncat|netcat|socat|scp|sftp|rsync|ftp|telnet|mail|sendmail)\b"
)


@dataclass(frozen=True)
class SafetyRule:
    """
    A single pattern rule.

    Attributes:
        rule_id: Stable identifier reported in verdicts.
        severity: ``Classification.RISKY`` or ``Classification.BLOCKED``.
        pattern: Regular expression searched case-insensitively.
        description: Human-readable reason shown to the user.
    """

    rule_id: str
    severity: Classification
    pattern: str
    description: str
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.severity is Classification.SAFE:
            raise ValueError(f"Rule {self.rule_id} cannot have SAFE severity")
        object.__setattr__(
            self, "compiled", re.compile(self.pattern, re.IGNORECASE)
        )

    def matches(self, command: str) -> bool:
        return self.compiled.search(command) is not None


@dataclass(frozen=True)
class UnparseableCommandRule(SafetyRule):
    """Matches commands whose quoting cannot be tokenized."""

    def matches(self, command: str) -> bool:
        if not command.strip():
            return False
        try:
            shlex.split(command, comments=True)
        except ValueError:
            return True
        return False


BLOCKED = Classification.BLOCKED
RISKY = Classification.RISKY

DEFAULT_RULES: List[SafetyRule] = [
    # Blocked: destructive or exfiltrating
    SafetyRule(
        "recursive-delete-root-or-home",
        BLOCKED,
        rf"\brm\s+{_RM_FLAGS}{_RM_RECURSIVE}\s+{_ROOT_OR_HOME}{_END}",
        "Recursive deletion of the root filesystem or a home directory",
    ),
    SafetyRule(
        "find-delete-root-or-home",
        BLOCKED,
        rf"\bfind\s+(?:-[HLP]\s+)*{_ROOT_OR_HOME}{_END}.*\s-(?:delete|exec\s+rm)\b",
        "Deletes files across the root filesystem or a home directory",
    ),
    SafetyRule(
        "filesystem-format",
        BLOCKED,
        r"\b(?:mkfs(?:\.\w+)?|mke2fs|mkswap|wipefs)\b",
        "Disk formatting or filesystem creation",
    ),
    SafetyRule(
        "block-device-overwrite",
        BLOCKED,
        rf"(?:\bdd\b[^|;&]*\bof={_BLOCK_DEVICE}|>{{1,2}}\s*{_BLOCK_DEVICE}"
        rf"|\bshred\b[^|;&]*{_BLOCK_DEVICE})",
        "Raw overwrite of a disk or partition",
    ),
    SafetyRule(
        "fork-bomb",
        BLOCKED,
        r"(?P<fn>[\w:]+)\s*\(\s*\)\s*\{\s*(?P=fn)\s*\|\s*(?P=fn)\s*&\s*\}",
        "Fork bomb that exhausts system processes",
    ),
    SafetyRule(
        "secret-exfiltration",
        BLOCKED,
        rf"(?=.*{_SECRET_FILES})(?=.*{_NETWORK_TOOLS})",
        "Reads private keys or credentials and sends them over the network",
    ),
    SafetyRule(
        "recursive-chmod-root",
        BLOCKED,
        rf"\bchmod\s+(?:-\w+\s+)*(?:-\w*R\w*|--recursive)\s+(?:-\w+\s+)*"
        rf"(?:0?777|a\+rwx)\s+/{_END}",
        "Recursive world-writable permissions on the root filesystem",
    ),
    # Risky: surfaced with a warning
    SafetyRule(
        "remote-script-execution",
        RISKY,
        r"(?:\b(?:curl|wget|fetch)\b[^|]*\|\s*(?:sudo\s+)?(?:env\s+)?"
        r"(?:ba|z|da|k|fi)?sh\b"
        r"|\b(?:curl|wget|fetch)\b[^|]*\|\s*(?:sudo\s+)?(?:python[\d.]*|perl|ruby|node)\b"
        r"|\b(?:ba|z)?sh\s+<\(\s*(?:curl|wget)\b"
        r"|\beval\s+[\"']?\$\(\s*(?:curl|wget)\b)",
        "Runs a script downloaded from the network without inspection",
    ),
    SafetyRule(
        "recursive-delete",
        RISKY,
        rf"\brm\s+{_RM_FLAGS}{_RM_RECURSIVE}",
        "Recursive file deletion",
    ),
    SafetyRule(
        "privilege-escalation",
        RISKY,
        r"(?:^|[;&|(]\s*)(?:sudo|doas|su|pkexec)(?=\s|$)",
        "Runs with elevated privileges",
    ),
    SafetyRule(
        "raw-disk-write",
        RISKY,
        r"\bdd\b[^|;&]*\bof=",
        "Low-level write with dd",
    ),
    SafetyRule(
        "world-writable-permissions",
        RISKY,
        r"\bchmod\s+(?:-\w+\s+)*(?:0?777|a\+rwx|o\+w)\b",
        "Makes files writable by every user",
    ),
    SafetyRule(
        "power-state-change",
        RISKY,
        r"(?:\b(?:shutdown|reboot|poweroff|halt)\b|\binit\s+[06]\b"
        r"|\bsystemctl\s+(?:poweroff|reboot|halt)\b)",
        "Shuts down or restarts the machine",
    ),
    SafetyRule(
        "partition-table-edit",
        RISKY,
        r"\b(?:fdisk|sfdisk|cfdisk|gdisk|parted)\b",
        "Edits disk partition tables",
    ),
    SafetyRule(
        "recursive-remote-copy",
        RISKY,
        r"\bscp\s+(?:-\w+\s+)*-\w*r",
        "Recursively copies files to or from a remote host",
    ),
    SafetyRule(
        "system-file-write",
        RISKY,
        r"(?:>{1,2}\s*|\btee\s+(?:-a\s+)?)/(?:etc|proc|sys|boot)/",
        "Writes into system configuration or kernel interfaces",
    ),
    SafetyRule(
        "find-delete",
        RISKY,
        r"\bfind\b.*\s-(?:delete|exec\s+rm)\b",
        "Deletes every file matched by find",
    ),
    SafetyRule(
        "kill-all-processes",
        RISKY,
        r"(?:\bkill\s+(?:-\w+\s+)*-1\b|\bkillall5\b|\bpkill\s+(?:-\w+\s+)*-u\b)",
        "Kills many processes at once",
    ),
    # Fail-closed checks
    SafetyRule(
        "empty-command",
        RISKY,
        r"\A\s*\Z",
        "The command is empty",
    ),
    UnparseableCommandRule(
        "unparseable-command",
        RISKY,
        r"(?!)",
        "The command has unbalanced quoting and could not be analyzed",
    ),
]


class SafetyFilter:
    """
    Rule-based command classifier.

    Rules are plain data; ``classify`` maps every rule over the command and
    reduces the matches to the most severe one.
    """

    def __init__(self, rules: Optional[Sequence[SafetyRule]] = None):
        """
        Initialize the filter.

        Args:
            rules (Optional[Sequence[SafetyRule]]): Ordered rules; defaults to
                ``DEFAULT_RULES``.
        """
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)

    def matching_rules(self, command: str) -> List[SafetyRule]:
        return [rule for rule in self.rules if rule.matches(command)]

    def classify(self, command: Optional[str]) -> SafetyVerdict:
        """
        Classify a command.

        Args:
            command (Optional[str]): The command text; ``None`` is treated as
                empty.

        Returns:
            SafetyVerdict: The verdict with the first rule of the worst
            matched severity.
        """
        text = command or ""
        matches = self.matching_rules(text)

        if not text.strip() and not matches:
            # Fail closed even with a custom rule set
            return SafetyVerdict(
                classification=RISKY,
                matched_rule="empty-command",
                reason="The command is empty",
            )

        if not matches:
            return SafetyVerdict(classification=Classification.SAFE)

        # max() keeps the first rule among equal severities
        worst = max(matches, key=lambda rule: rule.severity.rank)
        if worst.severity is BLOCKED:
            logger.warning(f"Blocked unsafe command (rule {worst.rule_id})")
        else:
            logger.info(f"Flagged risky command (rule {worst.rule_id})")

        return SafetyVerdict(
            classification=worst.severity,
            matched_rule=worst.rule_id,
            reason=worst.description,
        )

    def classify_all(self, commands: Iterable[str]) -> List[SafetyVerdict]:
        return [self.classify(command) for command in commands]


# Global instance with the default rule set
safety_filter = SafetyFilter()


def classify(command: Optional[str]) -> SafetyVerdict:
    """Classify a command with the default rule set."""
    return safety_filter.classify(command)
