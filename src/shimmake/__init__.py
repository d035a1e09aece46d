"""shimmake - idempotent build orchestration for the rhboot/shim UEFI bootloader."""

from .blueprints import Blueprint as Blueprint
from .config import ShimConfig as ShimConfig
from .config import load_config as load_config
from .context import Context as Context
from .errors import CommandError as CommandError
from .errors import ConfigError as ConfigError
from .errors import PreconditionError as PreconditionError
from .errors import ShimMakeError as ShimMakeError
from .errors import UsageError as UsageError
from .host import Host as Host
from .projects import Project as Project
from .requirement import Requirement as Requirement
from .requirement import requirement as requirement
from .runner import CommandRunner as CommandRunner
from .runner import LocalRunner as LocalRunner
from .runner import MultipassRunner as MultipassRunner
from .strategy import Absent as Absent
from .strategy import Ensure as Ensure
from .strategy import Present as Present
from .strategy import Strategy as Strategy
from .workspace import Workspace as Workspace
