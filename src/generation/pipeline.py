"""
Generation pipeline: describe -> generate -> fetch -> persist.

One pipeline serves every generation flavour. A PipelineSpec carries what
differs between avatar creation and clothing try-on (prompts, bucket, file
role, table, write mode); the steps themselves are shared.

Steps run strictly in order and any failure aborts the request. When the
row write fails after blobs were uploaded, the blobs uploaded by this run
are removed unless compensation is disabled, in which case they stay
behind as orphans.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from config.constants import BUCKETS
from core.logging import LoggerMixin, bind_context, log_stage, unbind_context
from core.utils import first_row
from generation.errors import PersistenceError, StorageError
from generation.models import GenerationRequest, ImagePayload, StoredBlob
from integrations.generation_client import GenerationClient
from integrations.storage import BlobStorage


@dataclass(frozen=True)
class PipelineSpec:
    """
    What one generation flavour produces and where it is stored.

    Attributes:
        name: Flavour name used in logs ("avatar", "try_on")
        describe_prompt: Fixed prompt sent with the source image
        render_template: Image prompt; `{description}` plus request template values
        bucket: Storage bucket for the generated image
        role: File name prefix for the generated image
        table: Table receiving the record
        image_field: Column holding the generated image URL
        upsert_on: Conflict column for upserts; None inserts a new row
        original_field: Column for the source photo URL; None skips storing it
        original_bucket: Bucket for the source photo
    """
    name: str
    describe_prompt: str
    render_template: str
    bucket: str
    role: str
    table: str
    image_field: str
    upsert_on: Optional[str] = None
    original_field: Optional[str] = None
    original_bucket: str = BUCKETS.ORIGINAL_PHOTOS


def blob_path(user_id: str, role: str, extension: str) -> str:
    """Storage key `{user_id}/{role}_{random id}.{ext}`."""
    return f"{user_id}/{role}_{uuid.uuid4()}.{extension}"


class GenerationPipeline(LoggerMixin):
    """Runs a PipelineSpec for one request. Stateless between runs."""

    def __init__(
        self,
        client: GenerationClient,
        storage: BlobStorage,
        supabase: Any,
        compensate_failed_writes: bool = True,
    ) -> None:
        self._client = client
        self._storage = storage
        self._supabase = supabase
        self._compensate = compensate_failed_writes

    def run(self, spec: PipelineSpec, request: GenerationRequest) -> Dict[str, Any]:
        """
        Produce, store and record one generated image.

        Returns:
            The persisted row as returned by the database

        Raises:
            GenerationError: describe / generate / fetch failed (nothing stored)
            StorageError: an upload failed
            PersistenceError: the row write failed
        """
        bind_context(pipeline=spec.name, user_id=request.user_id)
        try:
            return self._run(spec, request)
        finally:
            unbind_context("pipeline", "user_id")

    def _run(self, spec: PipelineSpec, request: GenerationRequest) -> Dict[str, Any]:
        with log_stage(self.logger, "describe", image_bytes=request.image.size):
            description = self._client.describe(request.image, spec.describe_prompt)

        prompt = spec.render_template.format(description=description, **request.template_values)
        with log_stage(self.logger, "generate"):
            image_url = self._client.generate(prompt)

        with log_stage(self.logger, "fetch"):
            generated = self._client.fetch(image_url)

        uploaded: List[StoredBlob] = []
        try:
            record: Dict[str, Any] = {"user_id": request.user_id, **request.record_fields}

            if spec.original_field:
                original = self._upload(spec.original_bucket, "original", request.user_id, request.image)
                uploaded.append(original)
                record[spec.original_field] = original.public_url

            stored = self._upload(spec.bucket, spec.role, request.user_id, generated)
            uploaded.append(stored)
            record[spec.image_field] = stored.public_url

            with log_stage(self.logger, "persist", table=spec.table):
                row = self._write(spec, record)
        except (StorageError, PersistenceError):
            self._cleanup(uploaded)
            raise

        self.logger.info("Generation completed", record_id=row.get("id"), table=spec.table)
        return row

    def _upload(self, bucket: str, role: str, user_id: str, image: ImagePayload) -> StoredBlob:
        path = blob_path(user_id, role, image.extension)
        with log_stage(self.logger, "upload", bucket=bucket, path=path):
            return self._storage.upload(bucket, path, image.data, image.content_type)

    def _write(self, spec: PipelineSpec, record: Dict[str, Any]) -> Dict[str, Any]:
        table = self._supabase.table(spec.table)
        try:
            if spec.upsert_on:
                result = table.upsert(record, on_conflict=spec.upsert_on).execute()
            else:
                result = table.insert(record).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to save {spec.name}: {e}", table=spec.table) from e

        row = first_row(result)
        if row is None:
            raise PersistenceError(f"Failed to save {spec.name}: no row returned", table=spec.table)
        return row

    def _cleanup(self, uploaded: List[StoredBlob]) -> None:
        if not uploaded:
            return
        if not self._compensate:
            self.logger.warning(
                "Leaving orphaned blobs after failed write",
                blobs=[f"{b.bucket}/{b.path}" for b in uploaded],
            )
            return

        by_bucket: Dict[str, List[str]] = {}
        for blob in uploaded:
            by_bucket.setdefault(blob.bucket, []).append(blob.path)
        for bucket, paths in by_bucket.items():
            try:
                self._storage.remove(bucket, paths)
            except StorageError as e:
                # The original failure is what the caller sees
                self.logger.error("Compensating delete failed", bucket=bucket, paths=paths, error=str(e))
