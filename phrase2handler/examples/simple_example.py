#!/usr/bin/env python3
"""
Simple Example: Show what the dispatcher does with recognized phrases

This demonstrates the complete flow without a speech engine: a scripted
recognizer emits the semantic meanings a grammar match would produce.
"""

import sys
import logging
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import create_config, configure_logging
from src.pipeline import PhraseDispatchPipeline
from src.dispatch.handlers import HandlerRegistry, NullaryHandler, UnaryHandler, TypedHandler, OverloadSet
from src.binding.result import meanings_from_pairs
from src.recognition.events import PhraseRecognizedEvent
from src.recognition.listener import GrammarListener
from src.recognition.recognizer import ScriptedRecognizer


class Robot:
    """A stand-in for the component the voice commands drive."""

    def __init__(self):
        self.position = 0.0

    def move(self, direction: str, distance: float):
        step = float(distance) if direction == "right" else -float(distance)
        self.position += step
        print(f"  -> move {direction} {distance} (position now {self.position:+.2f})")

    def move_default(self, direction: str):
        self.move(direction, 1.0)

    def stop(self):
        print("  -> stop")

    def select(self, colors: list):
        print(f"  -> select {colors}")


def main():
    data_dir = Path(__file__).parent / "data"
    config = create_config(
        grammar_root=str(data_dir),
        grammar_path="robot_commands.grxml",
        vocabulary_path=str(data_dir / "robot_commands.json"),
        start_behavior="manual",
        log_level="INFO",
    )
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    configure_logging(config)

    robot = Robot()
    handlers = HandlerRegistry([
        OverloadSet("move", [
            TypedHandler("move", robot.move, (str, float)),
            UnaryHandler("move", robot.move_default, str),
        ]),
        NullaryHandler("stop", robot.stop),
        NullaryHandler("log_stop", lambda: print("  -> stop logged")),
        UnaryHandler("select", robot.select, list),
    ])

    pipeline = PhraseDispatchPipeline(config=config, handlers=handlers)
    listener = GrammarListener(pipeline, recognizer_factory=ScriptedRecognizer)
    listener.activate()
    listener.start()

    phrases = [
        ("move left two and a half", [("action", "move"), ("direction", "left"), ("distance", "2.5")]),
        ("move right", [("action", "move"), ("direction", "right")]),
        ("select red green", [("action", "select"), ("colors", ["red", "green"])]),
        ("move left far", [("action", "move"), ("direction", "left"), ("distance", "far")]),
        ("dance", [("action", "dance")]),
        ("stop", [("action", "stop")]),
    ]

    print("=" * 60)
    print("PHRASE DISPATCH")
    print("=" * 60)
    for text, pairs in phrases:
        print(f"\n'{text}'")
        listener.recognizer.emit(
            PhraseRecognizedEvent(text=text, semantic_meanings=meanings_from_pairs(pairs))
        )
        result = listener.last_result
        print(f"  state={result.state.value} invoked={result.invoked}")
        if result.error_message:
            print(f"  error ({result.error_stage}): {result.error_message}")

    listener.stop()
    listener.teardown()


if __name__ == "__main__":
    main()
