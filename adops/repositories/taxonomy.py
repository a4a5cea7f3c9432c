"""Template, shortcode and custom-code reads over the document store."""

from adops.models.taxonomy import CustomCode, Shortcode, TaxonomyTemplate
from adops.repositories.documents import DocumentRepository
from adops.repositories.paths import (
    custom_codes_collection,
    shortcode_path,
    taxonomy_path,
)
from adops.taxonomy.lookups import LookupSource, TemplateSource


class TaxonomyLookupRepository(LookupSource, TemplateSource):
    def __init__(self, documents: DocumentRepository) -> None:
        self._documents = documents

    async def get_shortcode(self, shortcode_id: str) -> Shortcode | None:
        data = await self._documents.get(shortcode_path(shortcode_id))
        return Shortcode.model_validate(data) if data is not None else None

    async def get_custom_code(self, client_id: str, shortcode_id: str) -> str | None:
        matches = await self._documents.list_collection(
            custom_codes_collection(client_id), shortcodeId=shortcode_id,
        )
        if not matches:
            return None
        return CustomCode.model_validate(matches[0]).custom_code or None

    async def get_template(
        self, client_id: str, taxonomy_id: str,
    ) -> TaxonomyTemplate | None:
        data = await self._documents.get(taxonomy_path(client_id, taxonomy_id))
        return TaxonomyTemplate.model_validate(data) if data is not None else None
