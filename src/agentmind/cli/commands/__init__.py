# agentmind/cli/commands: Command modules for the AgentMind CLI.
#
# Each module in this package provides one or more CLI commands.

from .analysis import analyze, decay, feedback
from .context import context
from .instincts import evolve_candidates, list_instincts, pending, search
from .status import status
from .transfer import export, import_instincts

__all__ = [
    # analysis.py
    "analyze",
    "feedback",
    "decay",
    # context.py
    "context",
    # instincts.py
    "list_instincts",
    "pending",
    "search",
    "evolve_candidates",
    # status.py
    "status",
    # transfer.py
    "export",
    "import_instincts",
]
