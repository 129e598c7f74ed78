from .service import ClaudeService, create_service
from .process_manager import ProcessManager
from .stream_parser import StreamParser, OpenFileOperation
from .context_builder import ContextBuilder
from .relay import relay
from .errors import ClaudeServiceError
from .context import ProjectContext, RequirementSummary, DecisionSummary, SpecSummary
from .models import (
    ServiceOptions,
    SendMessageOptions,
    ServiceStatus,
    AvailabilityResult,
    ContextBuilderOptions,
)
from .events import (
    StreamEvent,
    StartEvent,
    TextEvent,
    ThinkingEvent,
    ToolUseEvent,
    FileStartEvent,
    FileContentEvent,
    FileEndEvent,
    CompleteEvent,
    ErrorEvent,
    FileChange,
    collect_file_changes,
)
from .constants import ErrorCode, GenerationMode, ServiceState
from .logging_config import set_cliagent_log_level, get_cliagent_loggers

__all__ = [
    "ClaudeService", "create_service",
    "ProcessManager",
    "StreamParser", "OpenFileOperation",
    "ContextBuilder",
    "relay",
    "ClaudeServiceError",
    "ProjectContext", "RequirementSummary", "DecisionSummary", "SpecSummary",
    "ServiceOptions", "SendMessageOptions", "ServiceStatus", "AvailabilityResult",
    "ContextBuilderOptions",
    "StreamEvent", "StartEvent", "TextEvent", "ThinkingEvent", "ToolUseEvent",
    "FileStartEvent", "FileContentEvent", "FileEndEvent", "CompleteEvent", "ErrorEvent",
    "FileChange", "collect_file_changes",
    "ErrorCode", "GenerationMode", "ServiceState",
    "set_cliagent_log_level", "get_cliagent_loggers",
]
