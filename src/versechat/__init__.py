"""versechat - streaming AI chat about a passage of text.

Quick Start:
    ```python
    from versechat import ChatSession

    session = ChatSession(
        ["John 1:1 In the beginning was the Word..."],
        sink=my_sink,
    )
    await session.handle_line("What does 'the Word' mean here?")
    await session.handle_line("/provider anthropic")
    ```

Module structure:
    - llm/: Providers, request translators, stream decoders
    - chat/: Sessions, history retention, control commands
    - config: versechat.toml and .env loading
    - tracing: OpenTelemetry setup
    - cli/: Command line interface and terminal rendering
"""

__version__ = "0.1.0"

# Chat
from .chat import ChatHistory, ChatSession, SessionState, reflect

# Config
from .config import ChatConfig, ProjectConfig, load_project_config

# Errors
from .errors import (
    ConfigurationError,
    DecodeError,
    SessionError,
    TransportError,
    VersechatError,
)

# LLM
from .llm import (
    LLMConfig,
    LLMProvider,
    Message,
    ProviderRequest,
    StreamDelta,
    StreamDone,
    StreamEvent,
    StreamStart,
)

__all__ = [
    "__version__",
    # Chat
    "ChatSession",
    "ChatHistory",
    "SessionState",
    "reflect",
    # Config
    "ChatConfig",
    "ProjectConfig",
    "load_project_config",
    # Errors
    "VersechatError",
    "ConfigurationError",
    "TransportError",
    "DecodeError",
    "SessionError",
    # LLM
    "LLMProvider",
    "LLMConfig",
    "Message",
    "ProviderRequest",
    "StreamEvent",
    "StreamStart",
    "StreamDelta",
    "StreamDone",
]
