#!/usr/bin/env python3
"""
Cozy Companion - Main Entry Point
=================================

This is the main entry point for the chat companion. It provides a
command-line interface for running the companion in various modes.

Usage:
    python main.py --tui              # Start terminal UI
    python main.py --web              # Start web UI
    python main.py --chat             # Chat in the plain console
    python main.py --reply "Hello"    # Show a single reply
    python main.py --status           # Show configuration and rule bank
    python main.py --init             # Write default config and rules
"""

import sys
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from core.config import load_config, create_default_config, Config
from core.logging import setup_logging, get_logger, set_log_context, clear_log_context
from core.exceptions import CompanionError

logger = get_logger("main")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Cozy Companion - a laid-back scripted chat companion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --tui                  Start terminal UI
  python main.py --web --port 9000      Start web UI on port 9000
  python main.py --chat                 Chat in the plain console
  python main.py --reply "I'm so tired" Show the reply and typing delay
  python main.py --init                 Write default config.yaml and rules.yaml
        """
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--tui",
        action="store_true",
        help="Start terminal UI"
    )
    mode_group.add_argument(
        "--web",
        action="store_true",
        help="Start web UI server"
    )
    mode_group.add_argument(
        "--chat",
        action="store_true",
        help="Chat in the plain console"
    )
    mode_group.add_argument(
        "--reply",
        type=str,
        metavar="MESSAGE",
        help="Print the reply to a single message on an empty conversation"
    )
    mode_group.add_argument(
        "--status",
        action="store_true",
        help="Show configuration and rule bank"
    )
    mode_group.add_argument(
        "--init",
        action="store_true",
        help="Write default config.yaml and rules.yaml to the config directory"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--rules",
        type=str,
        metavar="PATH",
        help="Path to a YAML rule bank"
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for repeated-reply selection"
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port for web UI (default: from config, 8080)"
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Host for web UI (default: from config, 127.0.0.1)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    return parser.parse_args(argv)


def run_init() -> None:
    """Write default configuration and rule bank files."""
    from rules.bank import default_rule_bank

    config = create_default_config()
    rules_path = Path(config.config_dir) / "rules.yaml"

    if rules_path.exists():
        print(f"✓ Keeping existing rules: {rules_path}")
    else:
        default_rule_bank().save_yaml(str(rules_path))
        print(f"✓ Wrote rules: {rules_path}")

    print(f"✓ Wrote configuration: {Path(config.config_dir) / 'config.yaml'}")
    print("\nTo use the rules file, set responder.rules_file in config.yaml")
    print("or pass --rules PATH.")


def run_status_check(config: Config) -> None:
    """Display configuration and rule bank."""
    from rules.bank import load_rule_bank

    print("\n" + "=" * 50)
    print(f"{config.app_name} - Status")
    print("=" * 50 + "\n")

    print("Responder")
    print("-" * 30)
    print(f"  Length guard: more than {config.responder.length_guard_threshold} messages")
    print(f"  Gratitude marker: '{config.responder.gratitude_marker}'")
    print(f"  Rules file: {config.responder.rules_file or '(built-in)'}")
    print(f"  Seed: {config.responder.seed if config.responder.seed is not None else '(random)'}")

    print("\nTyping Delay")
    print("-" * 30)
    print(f"  {config.typing.ms_per_char}ms per character, "
          f"{config.typing.min_delay_ms}-{config.typing.max_delay_ms}ms")

    print("\nRule Bank")
    print("-" * 30)
    for index, rule in enumerate(load_rule_bank(config.responder.rules_file), start=1):
        print(f"  {index}. {rule.name:<12} {rule.match_type.value:<9} {len(rule.replies)} replies")

    print("\nPaths")
    print("-" * 30)
    print(f"  Config: {config.config_dir}")
    print(f"  Logs:   {config.log_dir}")

    print("\n" + "=" * 50 + "\n")


def run_reply(config: Config, message: str) -> None:
    """Show the reply to one message on a fresh conversation."""
    from services.conversation import Conversation, Sender
    from services.responder import CompanionResponder

    responder = CompanionResponder.from_config(config)
    conversation = Conversation(intro=config.responder.intro_messages)
    set_log_context(conversation=conversation.id)

    trimmed = message.strip()
    if not trimmed:
        print("Nothing to reply to.")
        return

    conversation.append(Sender.USER, trimmed)
    result = responder.respond(trimmed, conversation.messages)

    print(f"\nYou:       {trimmed}")
    print(f"Companion: {result.response}")
    print("-" * 50)
    print(f"Source: {result.source}" + (f" ({result.rule})" if result.rule else ""))
    print(f"Typing delay: {result.typing_delay_ms}ms")


def run_console_chat(config: Config) -> None:
    """Chat in the console; each reply appears after its typing delay."""
    from services.conversation import Conversation
    from services.responder import CompanionResponder
    from services.scheduler import TurnScheduler, blocking_timer

    responder = CompanionResponder.from_config(config)
    conversation = Conversation(intro=config.responder.intro_messages)
    set_log_context(conversation=conversation.id)
    scheduler = TurnScheduler(conversation, responder, timer=blocking_timer)
    scheduler.on_reply_delivered(lambda message: print(f"Companion: {message.text}\n"))

    for message in conversation:
        print(f"Companion: {message.text}")
    print("\n(Ctrl+D or Ctrl+C to leave)\n")

    while True:
        try:
            text = input("You: ")
        except EOFError:
            print()
            break

        scheduler.submit(text)


def run_web_ui(config: Config, host: str, port: int, debug: bool) -> None:
    """Start the web UI server."""
    from ui.web.app import run_app

    print(f"\nStarting web UI on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")

    run_app(host=host, port=port, debug=debug, config=config)


def run_terminal_ui(config: Config) -> None:
    """Start the terminal UI."""
    from ui.terminal.app import run_tui

    run_tui(config=config)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        if args.init:
            run_init()
            return 0

        config = load_config(args.config)

        if args.rules:
            config.responder.rules_file = args.rules
        if args.seed is not None:
            config.responder.seed = args.seed
        if args.debug:
            config.debug = True

        setup_logging(
            log_dir=config.log_dir,
            log_level="DEBUG" if args.debug else "INFO",
            json_format=config.log_json,
            # the console and terminal modes own the screen
            console_output=args.web or args.debug
        )
        logger.debug(f"Configuration loaded from {args.config or config.config_dir}")

        if args.web:
            run_web_ui(
                config,
                args.host or config.ui.web_host,
                args.port or config.ui.web_port,
                args.debug or config.ui.web_debug
            )
        elif args.tui:
            run_terminal_ui(config)
        elif args.chat:
            run_console_chat(config)
        elif args.reply is not None:
            run_reply(config, args.reply)
        elif args.status:
            run_status_check(config)
        else:
            run_status_check(config)
            print("No mode specified. Use --tui, --web, --chat, or --help")

        return 0

    except CompanionError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 0
    except Exception as e:
        print(f"\nUnexpected error: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        clear_log_context()


if __name__ == "__main__":
    sys.exit(main())
