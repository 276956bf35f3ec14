from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from src.domain.entities.generated_output import GeneratedOutput
from src.domain.entities.render import (
    PromptReady,
    RenderOutcome,
    RenderRequest,
    RenderStatus,
)
from src.domain.entities.scene import SceneDocument
from src.domain.errors import (
    MissingSceneError,
    PromptGenerationError,
    ReframeError,
    SynthesisError,
)
from src.domain.services.collaborators import ImageSynthesizer, PromptSynthesizer
from src.domain.services.fingerprint import scene_fingerprint
from src.infrastructure.sessions.editing_session import EditingSession

logger = logging.getLogger(__name__)


@dataclass
class RenderOutputUseCase:
    prompt_synthesizer: PromptSynthesizer
    image_synthesizer: ImageSynthesizer

    async def execute(
        self, session: EditingSession, request: RenderRequest | None = None
    ) -> RenderOutcome:
        """
        Render the session's current scene into a new image.

        WORKFLOW:
        1. Resolve the prompt (generate one when the session has none)
        2. Look up (scene, prompt) in the session's generation cache
        3. On a miss, call the image model, link the result to its source,
           cache it and record it in the lineage log

        A cache hit never calls the image model and never adds a lineage entry.
        Concurrent requests for the same fingerprint share one model call.

        Failures never raise: the outcome carries the error, the session's
        render state is set to ERROR, and the cache and log are left untouched.
        A render overtaken by a new upload leaves the render state alone too.
        """
        request = request or RenderRequest()
        epoch = session.epoch
        if session.document is None:
            return self._fail(session, MissingSceneError(), epoch)

        document = session.document.snapshot()

        try:
            prompt = await self.resolve_prompt(session, document)
        except PromptGenerationError as exc:
            return self._fail(session, exc, epoch)

        key = session.cache.key(document, prompt)
        cached = session.cache.get(key)
        if cached is not None:
            session.render.complete(cached)
            return RenderOutcome(RenderStatus.COMPLETE, output=cached, prompt=prompt, cached=True)

        pending = session.in_flight.get(key)
        if pending is not None:
            logger.debug("Joining in-flight render for %s", key)
            return await asyncio.shield(pending)

        future: asyncio.Future[RenderOutcome] = asyncio.get_running_loop().create_future()
        session.in_flight[key] = future
        session.render.start()
        logger.info("Rendering session %s (%s)", session.id, key)
        try:
            outcome = await self._synthesize(session, document, prompt, key, request, epoch)
            future.set_result(outcome)
            return outcome
        finally:
            session.in_flight.pop(key, None)
            if not future.done():
                future.cancel()

    async def resolve_prompt(self, session: EditingSession, document: SceneDocument) -> str:
        """Return the session's prompt, generating it first when there is none.

        Raises:
            PromptGenerationError: If the prompt model fails or returns nothing.
        """
        if isinstance(session.prompt, PromptReady):
            return session.prompt.text

        key = scene_fingerprint(document, "")
        pending = session.prompts_in_flight.get(key)
        if pending is not None:
            result = await asyncio.shield(pending)
            if isinstance(result, ReframeError):
                raise result
            return result

        future: asyncio.Future[str | ReframeError] = asyncio.get_running_loop().create_future()
        session.prompts_in_flight[key] = future
        try:
            text = await self._generate_prompt(document)
        except PromptGenerationError as exc:
            logger.warning("Prompt generation failed for session %s: %s", session.id, exc.message)
            future.set_result(exc)
            raise
        else:
            future.set_result(text)
        finally:
            session.prompts_in_flight.pop(key, None)
            if not future.done():
                future.cancel()

        # An edit made while we waited invalidated this prompt
        if session.document == document:
            session.prompt = PromptReady(text)
        return text

    async def _generate_prompt(self, document: SceneDocument) -> str:
        try:
            text = await self.prompt_synthesizer.generate_prompt(document)
        except PromptGenerationError:
            raise
        except Exception as exc:
            logger.exception("Prompt synthesizer raised unexpectedly")
            raise PromptGenerationError(str(exc) or None) from exc
        if not text or not text.strip():
            raise PromptGenerationError("Prompt model returned no text")
        return text.strip()

    async def _synthesize(
        self,
        session: EditingSession,
        document: SceneDocument,
        prompt: str,
        key: str,
        request: RenderRequest,
        epoch: int,
    ) -> RenderOutcome:
        try:
            result = await self.image_synthesizer.synthesize(
                document, prompt, session.image, request.resolution
            )
        except SynthesisError as exc:
            return self._fail(session, exc, epoch)
        except Exception as exc:
            logger.exception("Image synthesizer raised unexpectedly")
            return self._fail(session, SynthesisError(str(exc) or None), epoch)

        if result is None or not result.image_url:
            return self._fail(session, SynthesisError(), epoch)

        if session.epoch != epoch:
            # A new upload replaced the scene while the model was working
            logger.warning("Dropping render %s: session %s was re-uploaded", key, session.id)
            return RenderOutcome(
                RenderStatus.ERROR,
                error=SynthesisError("Render superseded by a new upload"),
                prompt=prompt,
            )

        output = GeneratedOutput.from_synthesis(result, prompt).with_lineage(
            session.source_image_id, document
        )
        session.cache.put(key, output)
        session.lineage.record_generation(output)
        session.render.complete(output)
        logger.info("Rendered %s for session %s", output.id, session.id)
        return RenderOutcome(RenderStatus.COMPLETE, output=output, prompt=prompt)

    @staticmethod
    def _fail(session: EditingSession, error: ReframeError, epoch: int) -> RenderOutcome:
        if session.epoch != epoch:
            # Render state belongs to the newer upload now
            logger.warning("Dropping failed render for session %s: %s", session.id, error.message)
            return RenderOutcome(RenderStatus.ERROR, error=error)
        logger.warning("Render failed for session %s: %s", session.id, error.message)
        session.render.fail(error.message)
        prompt = session.prompt.text if isinstance(session.prompt, PromptReady) else None
        return RenderOutcome(RenderStatus.ERROR, error=error, prompt=prompt)
