"""
Tests for the render orchestrator: prompt resolution, caching, lineage and failures.
"""
from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from src.application.use_cases.render_output import RenderOutputUseCase
from src.domain.entities.generated_output import Resolution, SynthesizedImage
from src.domain.entities.render import PromptNeedsGeneration, PromptReady, RenderRequest, RenderStatus
from src.domain.entities.version_history import HistoryEventType
from src.domain.errors import (
    ContentFilteredError,
    MissingSceneError,
    PromptGenerationError,
    RateLimitError,
    SynthesisError,
)
from src.infrastructure.sessions.editing_session import EditingSession


def synthesized(artifact_id: str = "rf_1") -> SynthesizedImage:
    return SynthesizedImage(
        artifact_id=artifact_id,
        image_url="data:image/png;base64,AAAA",
        model="test-image-model",
        resolution="auto",
        created_at=datetime.now(UTC),
    )


@pytest.fixture
def session(scene):
    s = EditingSession(id="sess_test", image="data:image/png;base64,SRC", source_image_id="source_1")
    s.document = scene.snapshot()
    s.original = scene.snapshot()
    return s


@pytest.fixture
def collaborators():
    prompt = AsyncMock()
    prompt.generate_prompt.return_value = "A cafe terrace at noon"
    image = AsyncMock()
    image.synthesize.return_value = synthesized()
    return prompt, image


def run(coro):
    return asyncio.run(coro)


class TestRenderOutputUseCase:
    def test_generates_prompt_then_renders(self, session, collaborators):
        prompt, image = collaborators
        uc = RenderOutputUseCase(prompt, image)

        outcome = run(uc.execute(session))

        assert outcome.status == RenderStatus.COMPLETE
        assert outcome.prompt == "A cafe terrace at noon"
        assert session.prompt == PromptReady("A cafe terrace at noon")
        prompt.generate_prompt.assert_awaited_once()
        image.synthesize.assert_awaited_once()
        args = image.synthesize.call_args.args
        assert args[1] == "A cafe terrace at noon"
        assert args[2] == "data:image/png;base64,SRC"
        assert args[3] is None

    def test_output_is_linked_to_source(self, session, collaborators, scene):
        uc = RenderOutputUseCase(*collaborators)
        outcome = run(uc.execute(session, RenderRequest(resolution=Resolution.LARGE)))

        output = outcome.output
        assert output.source_image_id == "source_1"
        assert output.scene_snapshot == scene
        assert output.metadata.prompt_snapshot == "A cafe terrace at noon"
        assert output.metadata.model == "test-image-model"
        assert collaborators[1].synthesize.call_args.args[3] == Resolution.LARGE

    def test_snapshot_is_not_affected_by_later_edits(self, session, collaborators):
        uc = RenderOutputUseCase(*collaborators)
        outcome = run(uc.execute(session))
        session.document.global_context.time_of_day = "Night"
        assert outcome.output.scene_snapshot.global_context.time_of_day == "Day"

    def test_existing_prompt_is_used(self, session, collaborators):
        prompt, image = collaborators
        session.prompt = PromptReady("user prompt")
        run(RenderOutputUseCase(prompt, image).execute(session))
        prompt.generate_prompt.assert_not_awaited()
        assert image.synthesize.call_args.args[1] == "user prompt"

    def test_second_render_hits_cache(self, session, collaborators):
        prompt, image = collaborators
        uc = RenderOutputUseCase(prompt, image)

        first = run(uc.execute(session))
        second = run(uc.execute(session))

        assert image.synthesize.await_count == 1
        assert prompt.generate_prompt.await_count == 1
        assert second.status == RenderStatus.COMPLETE
        assert second.cached is True
        assert second.output.id == first.output.id
        generations = [e for e in session.lineage.all() if e.type == HistoryEventType.GENERATION]
        assert len(generations) == 1

    def test_changing_prompt_misses_cache(self, session, collaborators):
        prompt, image = collaborators
        image.synthesize.side_effect = [synthesized("rf_1"), synthesized("rf_2")]
        uc = RenderOutputUseCase(prompt, image)
        session.prompt = PromptReady("first")
        run(uc.execute(session))
        session.prompt = PromptReady("second")
        outcome = run(uc.execute(session))

        assert image.synthesize.await_count == 2
        assert outcome.output.id == "rf_2"
        assert len(session.cache) == 2

    def test_missing_scene_is_rejected_locally(self, collaborators):
        prompt, image = collaborators
        session = EditingSession(id="empty")
        outcome = run(RenderOutputUseCase(prompt, image).execute(session))

        assert outcome.status == RenderStatus.ERROR
        assert isinstance(outcome.error, MissingSceneError)
        assert session.render.status == RenderStatus.ERROR
        prompt.generate_prompt.assert_not_awaited()
        image.synthesize.assert_not_awaited()

    def test_prompt_failure_aborts_render(self, session, collaborators):
        prompt, image = collaborators
        prompt.generate_prompt.side_effect = PromptGenerationError("model down")
        outcome = run(RenderOutputUseCase(prompt, image).execute(session))

        assert isinstance(outcome.error, PromptGenerationError)
        assert session.render.error == "model down"
        assert isinstance(session.prompt, PromptNeedsGeneration)
        image.synthesize.assert_not_awaited()

    def test_empty_prompt_is_a_failure(self, session, collaborators):
        prompt, image = collaborators
        prompt.generate_prompt.return_value = "   "
        outcome = run(RenderOutputUseCase(prompt, image).execute(session))
        assert isinstance(outcome.error, PromptGenerationError)
        image.synthesize.assert_not_awaited()

    @pytest.mark.parametrize(
        "error",
        [SynthesisError("boom"), RateLimitError(), ContentFilteredError(), RuntimeError("socket closed")],
    )
    def test_synthesis_failure_leaves_cache_and_log_untouched(self, session, collaborators, error):
        prompt, image = collaborators
        image.synthesize.side_effect = error
        cache_size, log_size = len(session.cache), len(session.lineage)

        outcome = run(RenderOutputUseCase(prompt, image).execute(session))

        assert outcome.status == RenderStatus.ERROR
        assert isinstance(outcome.error, SynthesisError)
        assert len(session.cache) == cache_size
        assert len(session.lineage) == log_size
        assert session.render.status == RenderStatus.ERROR

    def test_failure_subtypes_are_preserved(self, session, collaborators):
        prompt, image = collaborators
        image.synthesize.side_effect = RateLimitError()
        outcome = run(RenderOutputUseCase(prompt, image).execute(session))
        assert isinstance(outcome.error, RateLimitError)
        assert "wait" in outcome.error.message

    def test_no_image_is_a_failure(self, session, collaborators):
        prompt, image = collaborators
        image.synthesize.return_value = None
        outcome = run(RenderOutputUseCase(prompt, image).execute(session))
        assert type(outcome.error) is SynthesisError
        assert len(session.cache) == 0

    def test_retry_after_failure_calls_model_again(self, session, collaborators):
        prompt, image = collaborators
        image.synthesize.side_effect = [SynthesisError("boom"), synthesized("rf_ok")]
        uc = RenderOutputUseCase(prompt, image)

        assert run(uc.execute(session)).status == RenderStatus.ERROR
        outcome = run(uc.execute(session))

        assert outcome.status == RenderStatus.COMPLETE
        assert outcome.output.id == "rf_ok"
        assert image.synthesize.await_count == 2

    def test_concurrent_identical_renders_share_one_call(self, session, collaborators):
        prompt, _ = collaborators
        calls = 0

        class SlowSynthesizer:
            async def synthesize(self, document, prompt, reference_image=None, resolution=None):
                nonlocal calls
                calls += 1
                await asyncio.sleep(0.01)
                return synthesized("rf_shared")

        uc = RenderOutputUseCase(prompt, SlowSynthesizer())

        async def both():
            return await asyncio.gather(uc.execute(session), uc.execute(session))

        first, second = run(both())

        assert calls == 1
        assert prompt.generate_prompt.await_count == 1
        assert first.output.id == second.output.id == "rf_shared"
        assert len(session.lineage) == 1
        assert session.in_flight == {}

    def test_render_superseded_by_upload_is_dropped(self, session, collaborators):
        prompt, _ = collaborators

        class UploadDuringRender:
            async def synthesize(self, document, prompt, reference_image=None, resolution=None):
                session.reset_for_upload("data:image/png;base64,NEW", "source_2")
                return synthesized()

        outcome = run(RenderOutputUseCase(prompt, UploadDuringRender()).execute(session))

        assert outcome.status == RenderStatus.ERROR
        assert len(session.cache) == 0
        assert len(session.lineage) == 0

    def test_failure_after_new_upload_keeps_new_render_state(self, session, collaborators):
        prompt, _ = collaborators

        class UploadThenFail:
            async def synthesize(self, document, prompt, reference_image=None, resolution=None):
                session.reset_for_upload("data:image/png;base64,NEW", "source_2")
                raise SynthesisError("boom")

        outcome = run(RenderOutputUseCase(prompt, UploadThenFail()).execute(session))

        assert outcome.status == RenderStatus.ERROR
        assert isinstance(outcome.error, SynthesisError)
        assert session.render.status == RenderStatus.IDLE
        assert session.render.error is None
        assert len(session.lineage) == 0

    def test_prompt_failure_after_new_upload_keeps_new_render_state(self, session, collaborators):
        _, image = collaborators

        class UploadThenFailPrompt:
            async def generate_prompt(self, document):
                session.reset_for_upload("data:image/png;base64,NEW", "source_2")
                raise PromptGenerationError("model down")

        outcome = run(RenderOutputUseCase(UploadThenFailPrompt(), image).execute(session))

        assert isinstance(outcome.error, PromptGenerationError)
        assert session.render.status == RenderStatus.IDLE
        image.synthesize.assert_not_awaited()


class TestResolvePrompt:
    def test_generated_prompt_is_stored(self, session, collaborators):
        prompt, image = collaborators
        uc = RenderOutputUseCase(prompt, image)

        text = run(uc.resolve_prompt(session, session.document.snapshot()))

        assert text == "A cafe terrace at noon"
        assert session.prompt == PromptReady("A cafe terrace at noon")
        assert session.prompts_in_flight == {}

    def test_concurrent_prompt_requests_share_one_call(self, session, collaborators):
        _, image = collaborators
        calls = 0

        class SlowPrompt:
            async def generate_prompt(self, document):
                nonlocal calls
                calls += 1
                await asyncio.sleep(0.01)
                return "shared prompt"

        uc = RenderOutputUseCase(SlowPrompt(), image)
        document = session.document.snapshot()

        async def both():
            return await asyncio.gather(
                uc.resolve_prompt(session, document), uc.resolve_prompt(session, document)
            )

        assert run(both()) == ["shared prompt", "shared prompt"]
        assert calls == 1

    def test_shared_prompt_failure_reaches_every_waiter(self, session, collaborators):
        _, image = collaborators
        calls = 0

        class FailingPrompt:
            async def generate_prompt(self, document):
                nonlocal calls
                calls += 1
                await asyncio.sleep(0.01)
                raise PromptGenerationError("model down")

        uc = RenderOutputUseCase(FailingPrompt(), image)

        async def both():
            return await asyncio.gather(uc.execute(session), uc.execute(session))

        first, second = run(both())

        assert calls == 1
        assert isinstance(first.error, PromptGenerationError)
        assert isinstance(second.error, PromptGenerationError)
        assert not first.ok and not second.ok
        assert session.prompts_in_flight == {}
        image.synthesize.assert_not_awaited()

    def test_prompt_for_edited_document_is_not_stored(self, session, collaborators):
        _, image = collaborators

        class EditDuringPrompt:
            async def generate_prompt(self, document):
                edited = session.document.snapshot()
                edited.composition.focal_point = "The awning"
                session.document = edited
                session.invalidate_prompt()
                return "prompt for the old scene"

        outcome = run(RenderOutputUseCase(EditDuringPrompt(), image).execute(session))

        assert outcome.ok
        assert outcome.prompt == "prompt for the old scene"
        assert isinstance(session.prompt, PromptNeedsGeneration)
