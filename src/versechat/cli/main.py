from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from ..config import ChatConfig, ProjectConfig, load_project_config
from ..errors import ConfigurationError, VersechatError
from ..llm.provider import LLMProvider
from ..tracing import TRACE_TARGETS, init_telemetry, shutdown_telemetry
from .chat import Colors, run_ask_cli, run_chat_cli


def make_provider_factory(project: ProjectConfig):
    """Provider factory that applies [llm.<name>] overrides from the project config."""

    def factory(name: str) -> LLMProvider:
        return LLMProvider.from_name(name, project.llm_config(name))

    return factory


def _load_config(args) -> ProjectConfig:
    if args.config:
        path = Path(args.config)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        return ProjectConfig.load(path)
    return load_project_config(Path.cwd())


def _chat_config(args, project: ProjectConfig) -> ChatConfig:
    """Project [chat] settings with command line flags applied on top."""
    overrides = {
        "provider": args.provider,
        "model": args.model,
        "max_tokens": args.max_tokens,
        "temperature": args.temperature,
        "max_history": args.max_history,
        "timeout_sec": args.timeout,
    }
    chat = dataclasses.replace(
        project.chat, **{k: v for k, v in overrides.items() if v is not None}
    )
    if not chat.model:
        llm_config = project.llm_config(chat.provider)
        if llm_config is not None:
            chat = dataclasses.replace(chat, model=llm_config.model)
    chat.validate()
    return chat


def _collect_passages(args, allow_stdin: bool) -> list[str]:
    passages = [p for p in args.passage if p.strip()]
    if args.passage_file:
        text = Path(args.passage_file).read_text(encoding="utf-8")
        passages.extend(line for line in text.splitlines() if line.strip())
    if not passages and allow_stdin and not sys.stdin.isatty():
        passages.extend(line for line in sys.stdin.read().splitlines() if line.strip())
    return passages


def _run(args, runner, allow_stdin: bool) -> int:
    try:
        project = _load_config(args)
        chat = _chat_config(args, project)
        passages = _collect_passages(args, allow_stdin)
    except (ConfigurationError, OSError) as e:
        print(f"[versechat] {e}", file=sys.stderr)
        return 2

    if not passages:
        print("[versechat] No passage given (pass text, --passage-file, or pipe stdin)")
        return 2

    color = not args.no_color and sys.stdout.isatty()
    if args.trace:
        init_telemetry(args.trace)
    try:
        return asyncio.run(
            runner(
                passages,
                chat,
                provider_factory=make_provider_factory(project),
                color=color,
            )
        )
    except VersechatError as e:
        red, reset = (Colors.RED, Colors.RESET) if color else ("", "")
        print(f"{red}Error: {e}{reset}")
        return 1
    except KeyboardInterrupt:
        return 130
    finally:
        shutdown_telemetry()


def cmd_chat(args) -> int:
    """Interactive multi-turn chat seeded with the passage."""
    return _run(args, run_chat_cli, allow_stdin=False)


def cmd_ask(args) -> int:
    """Single streamed reflection on the passage."""
    return _run(args, run_ask_cli, allow_stdin=True)


def _add_common(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("passage", nargs="*", default=[], help="Passage text, one argument per line")
    sp.add_argument("--passage-file", help="Read passage lines from a file")
    sp.add_argument("--provider", help="openai or anthropic (default: from config, else openai)")
    sp.add_argument("--model", help="Model name (default: provider preset)")
    sp.add_argument("--max-tokens", type=int, help="Response token limit (default: 256)")
    sp.add_argument("--temperature", type=float, help="Sampling temperature (default: 0.7)")
    sp.add_argument("--config", help="Path to versechat.toml (default: search upwards)")
    sp.add_argument("--no-color", action="store_true", help="Plain output")
    sp.add_argument(
        "--trace",
        nargs="?",
        const="otlp",
        choices=TRACE_TARGETS,
        help="Export OpenTelemetry spans (otlp, the default, or console)",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="versechat", description="Streaming AI chat about a passage")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sc = sub.add_parser("chat", help="Interactive chat seeded with the passage")
    _add_common(sc)
    sc.add_argument(
        "--max-history", type=int, help="Recent messages kept after the passage (default: 16)"
    )
    sc.add_argument("--timeout", type=float, help="Per-turn response limit in seconds")
    sc.set_defaults(func=cmd_chat)

    sa = sub.add_parser("ask", help="One streamed reflection on the passage")
    _add_common(sa)
    sa.set_defaults(func=cmd_ask, max_history=None, timeout=None)

    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
