from .base import Node, run_resources
from .reasoner import STEP_LIMIT_REASON, ReasonerNode
from .tools import ToolsNode

__all__ = ["STEP_LIMIT_REASON", "Node", "ReasonerNode", "ToolsNode", "run_resources"]
