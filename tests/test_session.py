import asyncio

import pytest

from aidoc.application.disclaimer import DisclaimerGate
from aidoc.application.history import HistoryStore
from aidoc.application.session import ANALYSIS_ERROR_MESSAGE, SessionController, SessionStage
from aidoc.domain.errors import DiagnosisUnavailable
from aidoc.domain.models import DiagnosisResult
from aidoc.domain.rules import DISCLAIMER_KEY
from aidoc.infrastructure.storage.memory import InMemoryStorage


class FakeClient:
    """Replays a queue of results or exceptions."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def diagnose(self, symptoms):
        self.calls.append(symptoms)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class BlockingClient:
    def __init__(self, result, error=None):
        self.result = result
        self.error = error
        self.release = asyncio.Event()
        self.calls = 0

    async def diagnose(self, symptoms):
        self.calls += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def result(diagnosis_payload):
    return DiagnosisResult.model_validate(diagnosis_payload)


def make_controller(client, storage=None):
    storage = storage if storage is not None else InMemoryStorage()
    ids = iter(f"id-{i}" for i in range(1000))
    controller = SessionController(
        client=client,
        history=HistoryStore(storage),
        disclaimer=DisclaimerGate(storage),
        clock=lambda: 1700000000000,
        id_factory=lambda: next(ids),
    )
    controller.start()
    return controller


def test_successful_submit_becomes_ready(result):
    symptoms = "persistent dry cough, mild fever, fatigue for 3 days"
    client = FakeClient(result)
    controller = make_controller(client)
    assert controller.stage is SessionStage.IDLE

    returned = asyncio.run(controller.submit(symptoms))

    assert returned == result
    assert controller.stage is SessionStage.READY
    state = controller.view_state()
    assert state.result == result
    assert not state.is_loading
    assert state.history[0].symptoms == symptoms
    assert state.history[0].result == result
    assert state.history[0].id == "id-0"
    assert state.history[0].timestamp == 1700000000000


def test_untrimmed_text_is_sent_and_stored(result):
    client = FakeClient(result)
    controller = make_controller(client)
    asyncio.run(controller.submit("  headache  "))
    assert client.calls == ["  headache  "]
    assert controller.history.entries[0].symptoms == "  headache  "


@pytest.mark.parametrize("symptoms", ["", "   ", "\n\t"])
def test_blank_submit_is_noop(symptoms):
    client = FakeClient()
    controller = make_controller(client)

    assert asyncio.run(controller.submit(symptoms)) is None
    assert client.calls == []
    assert controller.stage is SessionStage.IDLE
    assert controller.history.entries == []


def test_loading_during_call(result):
    async def scenario():
        client = BlockingClient(result)
        controller = make_controller(client)
        task = asyncio.create_task(controller.submit("cough"))
        await asyncio.sleep(0)
        loading = controller.view_state().is_loading
        client.release.set()
        await task
        return loading, controller

    loading, controller = asyncio.run(scenario())
    assert loading
    assert controller.stage is SessionStage.READY


def test_second_submit_while_loading_is_ignored(result):
    async def scenario():
        client = BlockingClient(result)
        controller = make_controller(client)
        first = asyncio.create_task(controller.submit("cough"))
        await asyncio.sleep(0)
        second = await controller.submit("fever")
        client.release.set()
        return await first, second, client, controller

    first, second, client, controller = asyncio.run(scenario())
    assert first == result
    assert second is None
    assert client.calls == 1
    assert [e.symptoms for e in controller.history.entries] == ["cough"]


def test_failure_from_idle_returns_to_idle():
    controller = make_controller(FakeClient(DiagnosisUnavailable("boom")))

    assert asyncio.run(controller.submit("cough")) is None
    assert controller.stage is SessionStage.IDLE
    assert controller.view_state().notification == ANALYSIS_ERROR_MESSAGE
    assert controller.history.entries == []


def test_failure_keeps_previous_result(result):
    controller = make_controller(FakeClient(result, DiagnosisUnavailable("boom")))
    asyncio.run(controller.submit("cough"))
    asyncio.run(controller.submit("fever"))

    assert controller.stage is SessionStage.READY
    assert controller.result == result
    assert len(controller.history.entries) == 1

    controller.dismiss_notification()
    assert controller.view_state().notification is None


def test_history_keeps_ten_most_recent(result):
    controller = make_controller(FakeClient(*[result] * 13))
    for i in range(13):
        asyncio.run(controller.submit(f"symptom {i}"))

    entries = controller.history.entries
    assert len(entries) == 10
    assert [e.symptoms for e in entries] == [f"symptom {i}" for i in range(12, 2, -1)]


def test_select_from_history(result, diagnosis_payload):
    other_payload = dict(diagnosis_payload, severity="Emergency")
    other = DiagnosisResult.model_validate(other_payload)
    controller = make_controller(FakeClient(result, other))
    asyncio.run(controller.submit("cough"))
    asyncio.run(controller.submit("chest pain"))
    assert controller.result == other

    first_id = controller.history.entries[1].id
    assert controller.select_from_history(first_id)
    assert controller.result == result
    assert controller.result.model_dump(mode="json", by_alias=True) == diagnosis_payload


def test_select_missing_id_is_noop(result):
    controller = make_controller(FakeClient(result))
    asyncio.run(controller.submit("cough"))

    assert controller.select_from_history("nope") is False
    assert controller.result == result


def test_clear_history_keeps_displayed_result(result):
    storage = InMemoryStorage()
    controller = make_controller(FakeClient(result), storage)
    asyncio.run(controller.submit("cough"))
    controller.clear_history()

    assert controller.view_state().history == []
    assert controller.result == result
    assert HistoryStore(storage).load() == []


def test_history_survives_new_session(result):
    storage = InMemoryStorage()
    asyncio.run(make_controller(FakeClient(result), storage).submit("cough"))

    fresh = make_controller(FakeClient(), storage)
    assert [e.symptoms for e in fresh.view_state().history] == ["cough"]
    assert fresh.view_state().result is None


def test_disclaimer_flow():
    storage = InMemoryStorage()
    controller = make_controller(FakeClient(), storage)
    state = controller.view_state()
    assert state.show_disclaimer
    assert not state.has_accepted_disclaimer

    assert controller.dismiss_disclaimer() is False
    controller.accept_disclaimer()
    assert storage.get(DISCLAIMER_KEY) == "true"

    fresh = make_controller(FakeClient(), storage).view_state()
    assert not fresh.show_disclaimer
    assert fresh.has_accepted_disclaimer


def test_reopen_disclaimer():
    controller = make_controller(FakeClient(), InMemoryStorage({DISCLAIMER_KEY: "true"}))
    assert not controller.view_state().show_disclaimer
    controller.reopen_disclaimer()
    assert controller.view_state().show_disclaimer
    assert controller.dismiss_disclaimer() is True


def test_unexpected_client_error_does_not_stick_in_loading(result):
    controller = make_controller(FakeClient(ValueError("unexpected"), result))

    assert asyncio.run(controller.submit("cough")) is None
    assert controller.stage is SessionStage.IDLE
    assert not controller.view_state().is_loading
    assert controller.view_state().notification == ANALYSIS_ERROR_MESSAGE

    # The session can still submit afterwards
    assert asyncio.run(controller.submit("cough")) == result
    assert controller.stage is SessionStage.READY


def test_deeply_nested_response_fails_cleanly():
    from aidoc.application.diagnosis import DiagnosisClient

    class NestedLLM:
        def generate_json(self, prompt, schema):
            return '{"a": ' + '[' * 100000 + ']' * 100000 + '}'

    controller = make_controller(DiagnosisClient(NestedLLM()))

    assert asyncio.run(controller.submit("cough")) is None
    assert controller.stage is SessionStage.IDLE
    assert controller.view_state().notification == ANALYSIS_ERROR_MESSAGE


def test_select_from_history_while_loading(result, diagnosis_payload):
    selected = DiagnosisResult.model_validate(dict(diagnosis_payload, severity="Low"))
    storage = InMemoryStorage()
    asyncio.run(make_controller(FakeClient(selected), storage).submit("rash"))

    async def scenario():
        client = BlockingClient(result, error=DiagnosisUnavailable("boom"))
        controller = make_controller(client, storage)
        task = asyncio.create_task(controller.submit("cough"))
        await asyncio.sleep(0)

        entry_id = controller.history.entries[0].id
        assert controller.select_from_history(entry_id)
        state = controller.view_state()
        assert state.is_loading
        assert state.result == selected

        client.release.set()
        assert await task is None
        return controller

    controller = asyncio.run(scenario())
    assert controller.stage is SessionStage.READY
    assert controller.result == selected
    assert [e.symptoms for e in controller.history.entries] == ["rash"]
