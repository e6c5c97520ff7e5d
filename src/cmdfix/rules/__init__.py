"""Built-in correction rules, in catalog order."""

from .cd import CdMkdir, CdParent
from .git import GitNotCommand
from .no_command import NoCommand
from .ssh import SshKnownHosts
from .sudo import Sudo
from .typo import SlLs

BUILTIN_RULES = (
    Sudo,
    CdParent,
    SlLs,
    CdMkdir,
    GitNotCommand,
    NoCommand,
    SshKnownHosts,
)

__all__ = [
    "BUILTIN_RULES",
    "CdMkdir",
    "CdParent",
    "GitNotCommand",
    "NoCommand",
    "SlLs",
    "SshKnownHosts",
    "Sudo",
]
