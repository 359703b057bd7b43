"""
Integration Tests - Full Pipeline Tests

These tests verify the complete Phrase2Handler flow from a recognized
phrase (or its semantic meanings) to handler invocation.
"""

import json
import logging
import pytest
from pathlib import Path
from unittest.mock import MagicMock

from src.config import create_config
from src.pipeline import PhraseDispatchPipeline, create_pipeline
from src.vocabulary.vocabulary import ConfigError
from src.dispatch.handlers import HandlerRegistry, NullaryHandler, UnaryHandler, TypedHandler, OverloadSet
from src.binding.result import DispatchState, DispatchArity, meanings_from_pairs
from src.recognition.events import PhraseRecognizedEvent
from src.recognition.listener import GrammarListener
from src.recognition.recognizer import ScriptedRecognizer


DATA_DIR = Path(__file__).parent.parent / "examples" / "data"


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def robot():
    """Mock robot whose methods are the handlers."""
    return MagicMock()


@pytest.fixture
def handlers(robot):
    return HandlerRegistry([
        OverloadSet("move", [
            TypedHandler("move", robot.move, (str, float)),
            UnaryHandler("move", robot.move_default, str),
        ]),
        NullaryHandler("stop", robot.stop),
        NullaryHandler("log_stop", robot.log_stop),
        UnaryHandler("select", robot.select, list),
    ])


@pytest.fixture
def pipeline(handlers):
    return PhraseDispatchPipeline(
        vocabulary_path=str(DATA_DIR / "robot_commands.json"),
        handlers=handlers,
    )


def phrase(text, *pairs):
    return PhraseRecognizedEvent(text=text, semantic_meanings=meanings_from_pairs(pairs))


def move_vocabulary(handler):
    """Single 'move' action with direction and distance arguments."""
    return {
        "actions": [{
            "keyword": "move",
            "argument_precedence": ["direction", "distance"],
            "handlers": [handler],
        }],
        "arguments": [
            {"key": "direction", "type": "String"},
            {"key": "distance", "type": "Float"},
        ],
    }


# =============================================================================
# PIPELINE TESTS
# =============================================================================

class TestPipelineFromFile:
    """Pipeline built from the sample vocabulary file."""

    def test_available_keywords(self, pipeline):
        assert pipeline.get_available_keywords() == ["move", "stop", "select"]

    def test_move_with_direction_and_distance(self, pipeline, robot):
        result = pipeline.process(phrase(
            "move left two and a half",
            ("action", "move"), ("direction", "left"), ("distance", "2.5"),
        ))

        robot.move.assert_called_once()
        direction, distance = robot.move.call_args.args
        assert direction == "left"
        assert type(distance) is float and distance == 2.5
        robot.move_default.assert_not_called()
        assert result.arity is DispatchArity.NARY
        assert result.invoked == ["move"]
        assert result.error_stage is None

    def test_move_with_direction_only(self, pipeline, robot):
        pipeline.process(phrase("move right", ("action", "move"), ("direction", "right")))
        robot.move_default.assert_called_once_with("right")
        robot.move.assert_not_called()

    def test_handlers_invoked_in_declared_order(self, pipeline, robot):
        result = pipeline.process(phrase("stop", ("action", "stop")))
        assert result.invoked == ["stop", "log_stop"]
        assert [c[0] for c in robot.method_calls] == ["stop", "log_stop"]

    def test_first_trigger_keyword_wins(self, pipeline, robot):
        pipeline.process(phrase("stop then go", ("action", "stop"), ("action", "move")))
        robot.stop.assert_called_once_with()
        robot.move.assert_not_called()
        robot.move_default.assert_not_called()

    def test_collection_argument(self, pipeline, robot):
        pipeline.process(phrase("select red green", ("action", "select"), ("colors", ["red", "green"])))
        robot.select.assert_called_once_with(["red", "green"])

    def test_unknown_keyword_is_silent(self, pipeline, robot):
        result = pipeline.process(phrase("dance", ("action", "dance")))
        assert result.state is DispatchState.NO_ACTION
        assert result.error_stage is None
        assert robot.method_calls == []

    def test_coercion_failure_aborts_event(self, pipeline, robot):
        result = pipeline.process(phrase(
            "move left far",
            ("action", "move"), ("direction", "left"), ("distance", "far"),
        ))
        assert result.state is DispatchState.ABORTED
        assert result.error_stage == "binding"
        assert "distance" in result.error_message
        assert result.trigger_keyword == "move"
        assert result.action is pipeline.vocabulary.lookup_action("move")
        assert result.invoked == []
        assert robot.method_calls == []

    def test_process_accepts_meanings(self, pipeline, robot):
        pipeline.process(meanings_from_pairs([("action", "stop")]))
        robot.stop.assert_called_once_with()


class TestPipelineErrors:

    def test_missing_vocabulary(self, monkeypatch):
        monkeypatch.delenv("P2H_VOCABULARY_PATH", raising=False)
        with pytest.raises(ConfigError):
            PhraseDispatchPipeline()

    def test_vocabulary_path_from_config(self, handlers):
        config = create_config(vocabulary_path=str(DATA_DIR / "robot_commands.json"))
        pipeline = PhraseDispatchPipeline(config=config, handlers=handlers)
        assert "move" in pipeline.vocabulary

    def test_unregistered_handler_names(self):
        with pytest.raises(ConfigError, match="not registered"):
            PhraseDispatchPipeline(
                vocabulary_path=str(DATA_DIR / "robot_commands.json"),
                handlers=HandlerRegistry(),
            )

    def test_missing_vocabulary_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PhraseDispatchPipeline(vocabulary_path=str(tmp_path / "missing.json"))

    def test_float_argument_matches_float_handler(self):
        move = MagicMock()
        pipeline = create_pipeline(move_vocabulary(TypedHandler("move", move, (str, float))))
        result = pipeline.process(phrase(
            "move left",
            ("action", "move"), ("direction", "left"), ("distance", ["2.5"]),
        ))
        move.assert_called_once_with("left", 2.5)
        assert result.error_stage is None

    def test_resolution_error_reported(self, caplog):
        move = MagicMock()
        pipeline = create_pipeline(move_vocabulary(TypedHandler("move", move, (str, int))))
        with caplog.at_level(logging.WARNING):
            result = pipeline.process(phrase(
                "move left",
                ("action", "move"), ("direction", "left"), ("distance", "2.5"),
            ))
        move.assert_not_called()
        assert result.error_stage == "dispatch"
        assert "Did not find a call shape" in result.error_message
        assert result.state is DispatchState.IDLE

    def test_custom_primary_key(self):
        stop = MagicMock()
        pipeline = create_pipeline(
            {"actions": [{"keyword": "stop", "handlers": [NullaryHandler("stop", stop)]}]},
            primary_action_key="intent",
        )
        pipeline.process(phrase("stop", ("action", "stop")))
        stop.assert_not_called()
        pipeline.process(phrase("stop", ("intent", "stop")))
        stop.assert_called_once_with()


# =============================================================================
# END-TO-END TESTS
# =============================================================================

class TestListenerEndToEnd:

    def test_scripted_session(self, pipeline, robot):
        config = create_config(
            grammar_root=str(DATA_DIR),
            grammar_path="robot_commands.grxml",
            start_behavior="manual",
        )
        listener = GrammarListener(pipeline, recognizer_factory=ScriptedRecognizer, config=config)
        assert listener.activate()

        listener.recognizer.emit(phrase("stop", ("action", "stop")))
        robot.stop.assert_not_called()

        listener.start()
        listener.recognizer.emit(phrase("move left", ("action", "move"), ("direction", "left")))
        listener.recognizer.emit(phrase("move left far", ("action", "move"), ("distance", "far")))
        listener.recognizer.emit(phrase("stop", ("action", "stop")))

        robot.move_default.assert_called_once_with("left")
        robot.stop.assert_called_once_with()
        assert listener.last_result.invoked == ["stop", "log_stop"]

        listener.stop()
        listener.teardown()
        assert listener.recognizer is None

    def test_vocabulary_file_round_trip(self, tmp_path, handlers):
        data = json.loads((DATA_DIR / "robot_commands.json").read_text())
        data["actions"] = [a for a in data["actions"] if a["keyword"] != "select"]
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps(data))

        pipeline = PhraseDispatchPipeline(vocabulary_path=str(path), handlers=handlers)
        assert pipeline.get_available_keywords() == ["move", "stop"]
