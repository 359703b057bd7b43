"""
Tests for the Recognition module (recognizer boundary and listener).
"""

import logging
import pytest
from unittest.mock import MagicMock

from src.config import create_config, StartBehavior
from src.pipeline import PhraseDispatchPipeline, create_pipeline
from src.vocabulary.vocabulary import ActionVocabulary, ConfigError
from src.dispatch.handlers import NullaryHandler, UnaryHandler
from src.binding.result import DispatchState, meanings_from_pairs
from src.recognition.events import PhraseRecognizedEvent, ConfidenceLevel
from src.recognition.recognizer import ScriptedRecognizer
from src.recognition.listener import GrammarListener, ResourceUnavailableError


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def grammar_dir(tmp_path):
    (tmp_path / "commands.grxml").write_text("<grammar/>")
    return tmp_path


@pytest.fixture
def stop_handler():
    return MagicMock()


@pytest.fixture
def pipeline(stop_handler):
    return create_pipeline({
        "actions": [
            {"keyword": "stop", "handlers": [NullaryHandler("stop", stop_handler)]},
            {"keyword": "count", "handlers": [UnaryHandler("count", MagicMock())]},
        ],
        "arguments": [{"key": "n", "type": "Int32"}],
    })


def make_listener(pipeline, grammar_dir, start_behavior="auto", grammar_path="commands.grxml"):
    config = create_config(
        grammar_root=str(grammar_dir),
        grammar_path=grammar_path,
        start_behavior=start_behavior,
    )
    return GrammarListener(pipeline, recognizer_factory=ScriptedRecognizer, config=config)


def phrase(text, *pairs):
    return PhraseRecognizedEvent(text=text, semantic_meanings=meanings_from_pairs(pairs))


# =============================================================================
# EVENT AND RECOGNIZER TESTS
# =============================================================================

class TestPhraseRecognizedEvent:

    def test_defaults(self):
        event = PhraseRecognizedEvent(text="stop")
        assert event.semantic_meanings == []
        assert event.confidence is ConfidenceLevel.HIGH

    def test_str_includes_text_and_confidence(self):
        event = PhraseRecognizedEvent(text="stop", confidence=ConfidenceLevel.LOW)
        assert "text=stop" in str(event)
        assert "Confidence=low" in str(event)


class TestScriptedRecognizer:

    def test_delivers_only_while_running(self):
        recognizer = ScriptedRecognizer()
        callback = MagicMock()
        recognizer.subscribe(callback)
        event = phrase("stop", ("action", "stop"))

        assert not recognizer.emit(event)
        recognizer.start()
        assert recognizer.emit(event)
        callback.assert_called_once_with(event)

    def test_unsubscribe(self):
        recognizer = ScriptedRecognizer()
        callback = MagicMock()
        recognizer.subscribe(callback)
        recognizer.unsubscribe(callback)
        recognizer.unsubscribe(callback)
        recognizer.start()
        recognizer.emit(phrase("stop"))
        callback.assert_not_called()

    def test_dispose(self):
        recognizer = ScriptedRecognizer()
        recognizer.subscribe(MagicMock())
        recognizer.start()
        recognizer.dispose()
        assert not recognizer.is_running
        assert recognizer.subscriber_count == 0
        with pytest.raises(RuntimeError):
            recognizer.start()


# =============================================================================
# LISTENER TESTS
# =============================================================================

class TestActivation:

    def test_auto_start(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir, "auto")
        assert listener.activate()
        assert listener.is_running
        assert listener.recognizer.grammar_file == grammar_dir / "commands.grxml"

    def test_manual_start(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir, "manual")
        assert listener.activate()
        assert not listener.is_running
        listener.start()
        assert listener.is_running

    def test_start_behavior_override(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir, "auto")
        listener.activate(StartBehavior.MANUAL_START)
        assert not listener.is_running

    def test_activate_twice(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir)
        listener.activate()
        recognizer = listener.recognizer
        assert listener.activate()
        assert listener.recognizer is recognizer

    def test_missing_grammar_is_reported(self, pipeline, grammar_dir, caplog):
        listener = make_listener(pipeline, grammar_dir, grammar_path="missing.grxml")
        with caplog.at_level(logging.WARNING):
            assert not listener.activate()
        assert isinstance(listener.activation_error, ResourceUnavailableError)
        assert listener.activation_error.path == grammar_dir / "missing.grxml"
        assert listener.recognizer is None
        assert not listener.is_running
        assert "not found" in caplog.text

    def test_empty_vocabulary_is_fatal(self, grammar_dir):
        empty = ActionVocabulary({}, {})
        listener = make_listener(PhraseDispatchPipeline(vocabulary=empty), grammar_dir)
        with pytest.raises(ConfigError):
            listener.activate()
        assert listener.recognizer is None

    def test_recognizer_factory_receives_path(self, pipeline, grammar_dir):
        factory = MagicMock(return_value=ScriptedRecognizer())
        config = create_config(grammar_root=str(grammar_dir), grammar_path="commands.grxml")
        listener = GrammarListener(pipeline, recognizer_factory=factory, config=config)
        listener.activate()
        factory.assert_called_once_with(grammar_dir / "commands.grxml")


class TestStartStop:

    def test_start_is_idempotent(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir)
        listener.activate()
        listener.recognizer.start = MagicMock()
        listener.start()
        listener.recognizer.start.assert_not_called()

    def test_stop_is_idempotent(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir)
        listener.activate()
        listener.stop()
        listener.stop()
        assert not listener.is_running

    def test_start_stop_without_activation(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir)
        listener.start()
        listener.stop()
        assert not listener.is_running


class TestTeardown:

    def test_teardown_releases_recognizer(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir)
        listener.activate()
        recognizer = listener.recognizer
        listener.teardown()
        assert listener.recognizer is None
        assert recognizer.is_disposed
        assert recognizer.subscriber_count == 0

    def test_teardown_without_activation(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir)
        listener.teardown()
        listener.teardown()

    def test_teardown_after_failed_activation(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir, grammar_path="missing.grxml")
        listener.activate()
        listener.teardown()


class TestEventHandling:

    def test_event_dispatched(self, pipeline, grammar_dir, stop_handler):
        listener = make_listener(pipeline, grammar_dir)
        listener.activate()
        listener.recognizer.emit(phrase("stop", ("action", "stop")))
        stop_handler.assert_called_once_with()
        assert listener.last_result.invoked == ["stop"]

    def test_events_ignored_when_stopped(self, pipeline, grammar_dir, stop_handler):
        listener = make_listener(pipeline, grammar_dir, "manual")
        listener.activate()
        listener.recognizer.emit(phrase("stop", ("action", "stop")))
        stop_handler.assert_not_called()

    def test_coercion_failure_does_not_stop_listener(self, pipeline, grammar_dir, stop_handler):
        listener = make_listener(pipeline, grammar_dir)
        listener.activate()

        listener.recognizer.emit(phrase("count lots", ("action", "count"), ("n", "lots")))
        assert listener.last_result.state is DispatchState.ABORTED
        assert listener.is_running

        listener.recognizer.emit(phrase("stop", ("action", "stop")))
        stop_handler.assert_called_once_with()

    def test_no_semantic_meanings(self, pipeline, grammar_dir):
        listener = make_listener(pipeline, grammar_dir)
        listener.activate()
        listener.recognizer.emit(PhraseRecognizedEvent(text="mumble", semantic_meanings=None))
        assert listener.last_result.state is DispatchState.NO_ACTION

    def test_no_events_after_teardown(self, pipeline, grammar_dir, stop_handler):
        listener = make_listener(pipeline, grammar_dir)
        listener.activate()
        recognizer = listener.recognizer
        listener.teardown()
        recognizer.emit(phrase("stop", ("action", "stop")))
        stop_handler.assert_not_called()
