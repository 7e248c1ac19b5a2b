"""Design → HTML → JSS component → Sitecore fields conversion pipeline.

One run is strictly sequential:

1. validate the request
2. fetch the Figma design (when a URL was given)
3. allocate a result id and store the "Processing..." placeholder
4. generate HTML; a failure here stores error sentinels and aborts
5. generate the Next.js JSS component (failure is recorded, run continues)
6. generate Sitecore field definitions (failure is recorded)
7. return every field's best value

The store is written after every stage so pollers see progress. Store
writes are best-effort; the returned outcome is authoritative.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from . import settings
from .envelopes import (
    COMPONENT_ERROR,
    COMPONENT_KEY,
    FIELDS_ERROR,
    FIELDS_KEY,
    HTML_ERROR,
    HTML_FAILED_DOWNSTREAM,
    HTML_KEY,
    PROCESSING,
    make_envelope,
)
from .errors import (
    ConversionError,
    GenerationError,
    PartialGenerationError,
    UpstreamFetchError,
    ValidationError,
)
from .integrations.figma_client import FigmaClient, FigmaClientError
from .integrations.llm_client import (
    LLMClient,
    LLMClientError,
    build_user_message,
    image_data_url,
)
from .nodes.figma_keys import extract_file_key, extract_node_id
from .nodes.figma_utils import describe_snapshot
from .nodes.llm_utils import clean_generated_code, strip_component_chatter
from .prompts import (
    component_prompt,
    fields_prompt,
    html_from_figma_prompt,
    html_from_image_prompt,
)

if TYPE_CHECKING:
    from app.repositories.base import ResultStore

logger = logging.getLogger("converter.pipeline")

FIGMA_ACCESS_ERROR = (
    "Failed to access Figma file. Please check the URL and ensure proper access permissions."
)


@dataclass
class ConversionRequest:
    """Form input of one conversion."""

    component_name: str = ""
    prompt: str = ""
    figma_url: Optional[str] = None
    image: Optional[bytes] = None
    image_content_type: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return bool(self.image)


@dataclass
class ConversionOutcome:
    """Final values of one successful (possibly partial) run."""

    result_id: str
    component_name: str
    html: str
    sitecore_fields: str
    component: str
    partial_errors: List[PartialGenerationError] = field(default_factory=list)

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": True,
            "resultId": self.result_id,
            "results": {
                "html": {"componentName": self.component_name, "html": self.html},
                "sitecoreFields": {
                    "componentName": self.component_name,
                    "sitecoreFields": self.sitecore_fields,
                },
                "component": {
                    "componentName": self.component_name,
                    "componentData": self.component,
                },
            },
        }


class ConversionPipeline:
    """Runs one conversion against a result store.

    Args:
        store: Result store receiving the staged writes.
        llm: Completion client; None when no OpenAI key is configured.
        figma_factory: Builds a FigmaClient; raises FigmaClientError when
            no token is configured. Called only for Figma requests.
    """

    def __init__(
        self,
        store: "ResultStore",
        llm: Optional[LLMClient],
        figma_factory: Optional[Callable[[], FigmaClient]] = None,
    ):
        self.store = store
        self.llm = llm
        self.figma_factory = figma_factory or FigmaClient

    # ------------------------------------------------------------------
    # Stage 1: validation
    # ------------------------------------------------------------------

    @staticmethod
    def validate(request: ConversionRequest) -> Optional[str]:
        """Check required input; returns the Figma file key when a URL was given."""
        if not (request.component_name or "").strip():
            raise ValidationError("Component name is required")

        has_url = bool((request.figma_url or "").strip())
        if not has_url and not request.has_image:
            raise ValidationError("Either Figma URL or image file is required")
        if has_url and request.has_image:
            raise ValidationError("Provide either a Figma URL or an image file, not both")

        if not has_url:
            return None
        file_key = extract_file_key(request.figma_url.strip())
        if not file_key:
            raise ValidationError("Invalid Figma URL format")
        return file_key

    # ------------------------------------------------------------------
    # Stage 2: design context
    # ------------------------------------------------------------------

    async def fetch_design(self, figma_url: str, file_key: str) -> Dict[str, Any]:
        node_id = extract_node_id(figma_url)
        try:
            client = self.figma_factory()
        except FigmaClientError as e:
            logger.error(f"Figma client unavailable: {e}")
            raise ConversionError("Figma access token is not configured") from e

        try:
            snapshot = await client.fetch_design_snapshot(file_key)
        except FigmaClientError as e:
            logger.error(f"Figma fetch failed for file={file_key}: {e}")
            raise UpstreamFetchError(FIGMA_ACCESS_ERROR) from e
        finally:
            await client.close()

        logger.info(
            f"Figma design loaded: file={file_key}, name={snapshot.get('name')!r}, "
            f"url node-id={node_id}"
        )
        return snapshot

    # ------------------------------------------------------------------
    # Stages 4-6: generation
    # ------------------------------------------------------------------

    async def generate_html(
        self,
        request: ConversionRequest,
        snapshot: Optional[Dict[str, Any]],
    ) -> str:
        if request.has_image:
            url = image_data_url(request.image, request.image_content_type or "image/jpeg")
            message = build_user_message(html_from_image_prompt(request.prompt), image_urls=[url])
            model = settings.OPENAI_VISION_MODEL
        else:
            reference = (request.figma_url or "").strip()
            description = describe_snapshot(snapshot) if snapshot else reference
            message = build_user_message(
                html_from_figma_prompt(description, request.prompt),
                extra_texts=[f"Figma URL: {reference}"] if reference else (),
            )
            model = settings.OPENAI_TEXT_MODEL

        raw = await self.llm.complete(
            model=model,
            messages=[message],
            max_tokens=settings.HTML_MAX_TOKENS,
            caller="HTML",
        )
        html = clean_generated_code(raw)
        if not html:
            raise LLMClientError("Generated HTML is empty")
        return html

    async def generate_component(self, component_name: str, html: str) -> str:
        raw = await self.llm.complete(
            model=settings.OPENAI_TEXT_MODEL,
            messages=[build_user_message(component_prompt(component_name, html))],
            max_tokens=settings.COMPONENT_MAX_TOKENS,
            caller="Component",
        )
        code = strip_component_chatter(clean_generated_code(raw)).strip()
        if not code:
            raise LLMClientError("Generated component is empty")
        return code

    async def generate_fields(self, component_name: str, html: str) -> str:
        raw = await self.llm.complete(
            model=settings.OPENAI_TEXT_MODEL,
            messages=[build_user_message(fields_prompt(component_name, html))],
            max_tokens=settings.FIELDS_MAX_TOKENS,
            caller="SitecoreFields",
        )
        fields_json = clean_generated_code(raw)
        if not fields_json:
            raise LLMClientError("Generated Sitecore fields are empty")
        return fields_json

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    async def _save(self, result_id: str, html: str, sitecore_fields: str, component: str) -> None:
        write = await self.store.put(result_id, {
            "html": html,
            "sitecoreFields": sitecore_fields,
            "component": component,
        })
        if not write.ok:
            logger.warning(f"[{result_id}] result not persisted, continuing: {write.error}")

    async def run(self, request: ConversionRequest) -> ConversionOutcome:
        """Execute all stages.

        Raises:
            ConversionError: missing OpenAI key or Figma token (500)
            ValidationError: bad input (400), nothing stored
            UpstreamFetchError: Figma fetch failed (500), nothing stored
            GenerationError: HTML generation failed (500), error sentinels stored
        """
        if self.llm is None:
            raise ConversionError("OpenAI API key is not configured")

        file_key = self.validate(request)
        name = request.component_name.strip()
        logger.info(
            f"Conversion requested: component={name!r}, figma={bool(file_key)}, "
            f"image={request.has_image}, prompt_len={len(request.prompt or '')}"
        )

        snapshot = None
        if file_key:
            snapshot = await self.fetch_design(request.figma_url.strip(), file_key)

        result_id = self.store.generate_id()
        await self._save(result_id, PROCESSING, PROCESSING, PROCESSING)

        # --- Stage 4: HTML ---
        try:
            html = await self.generate_html(request, snapshot)
        except LLMClientError as e:
            logger.error(f"[{result_id}] HTML generation failed: {e}")
            await self._save(
                result_id,
                make_envelope(name, HTML_KEY, HTML_ERROR),
                make_envelope(name, FIELDS_KEY, HTML_FAILED_DOWNSTREAM),
                make_envelope(name, COMPONENT_KEY, HTML_FAILED_DOWNSTREAM),
            )
            raise GenerationError(f"Failed to generate HTML: {e}", result_id=result_id) from e

        html_envelope = make_envelope(name, HTML_KEY, html)
        await self._save(result_id, html_envelope, PROCESSING, PROCESSING)
        logger.info(f"[{result_id}] HTML generated ({len(html)} chars)")

        partial_errors: List[PartialGenerationError] = []

        # --- Stage 5: component ---
        try:
            component = await self.generate_component(name, html)
            logger.info(f"[{result_id}] component generated ({len(component)} chars)")
        except LLMClientError as e:
            logger.error(f"[{result_id}] component generation failed: {e}")
            partial_errors.append(PartialGenerationError(str(e), result_id=result_id))
            component = COMPONENT_ERROR
        component_envelope = make_envelope(name, COMPONENT_KEY, component)
        await self._save(result_id, html_envelope, PROCESSING, component_envelope)

        # --- Stage 6: Sitecore fields ---
        try:
            sitecore_fields = await self.generate_fields(name, html)
            logger.info(f"[{result_id}] Sitecore fields generated ({len(sitecore_fields)} chars)")
        except LLMClientError as e:
            logger.error(f"[{result_id}] Sitecore fields generation failed: {e}")
            partial_errors.append(PartialGenerationError(str(e), result_id=result_id))
            sitecore_fields = FIELDS_ERROR
        await self._save(
            result_id,
            html_envelope,
            make_envelope(name, FIELDS_KEY, sitecore_fields),
            component_envelope,
        )

        logger.info(
            f"[{result_id}] conversion finished with {len(partial_errors)} partial failure(s)"
        )
        return ConversionOutcome(
            result_id=result_id,
            component_name=name,
            html=html,
            sitecore_fields=sitecore_fields,
            component=component,
            partial_errors=partial_errors,
        )
