from typing import Sequence
import logging
import httpx
import aiohttp
from ..base_api import EntityBaseApi, ApiConfig
from hypothesisapi.entities.annotation import Annotation, InputAnnotation, SearchResult, DeletedAnnotation
from hypothesisapi.entities.query import SearchQuery, Order, to_query_params

_LOGGER = logging.getLogger(__name__)


class AnnotationsApi(EntityBaseApi[Annotation]):
    """API handler for annotation-related endpoints."""

    def __init__(self, config: ApiConfig, client: httpx.Client | None = None) -> None:
        """Initialize the annotations API handler.

        Args:
            config: API configuration containing base URL, credentials, etc.
            client: Optional HTTP client instance. If None, a new one will be created.
        """
        super().__init__(config, Annotation, 'annotations', client)

    def create(self, annotation: InputAnnotation) -> Annotation:
        """Create and upload an annotation.

        Args:
            annotation: The annotation to create. Only non-default fields are sent.

        Returns:
            The annotation as stored by the service.

        Raises:
            APIError: If the service rejects the annotation.

        Example:
            .. code-block:: python

                api.annotations.create(InputAnnotation(uri='https://www.example.com',
                                                       text='My new annotation'))
        """
        return self._create(annotation)

    def update(self, annotation_id: str, annotation: InputAnnotation | Annotation) -> Annotation:
        """Update an existing annotation.

        Args:
            annotation_id: The annotation unique id.
            annotation: A partial (:class:`InputAnnotation`) or full (:class:`Annotation`) representation.

        Returns:
            The updated annotation.
        """
        return self._update(annotation_id, annotation)

    def search(self, query: SearchQuery | None = None) -> list[Annotation]:
        """Search for annotations with optional filters.

        Args:
            query: Filters and sort options. Fields left at their default are not sent.

        Returns:
            The annotations of the requested page (``rows`` of the response).
        """
        params = to_query_params(query or SearchQuery())
        result: SearchResult = self._request_model('GET', '/search', SearchResult, params=params)
        return result.rows

    def search_all(self, query: SearchQuery | None = None) -> list[Annotation]:
        """Retrieve every annotation matching `query`, one page after another.

        The ``search_after`` cursor of each request is set to the ``updated`` timestamp
        of the last annotation of the previous page, until an empty page is returned.
        `query.order` must be :attr:`Order.ASC`, otherwise pages may be skipped or repeated.

        Args:
            query: Filters and sort options.

        Returns:
            All matching annotations.
        """
        query = (query or SearchQuery()).model_copy()
        if query.order != Order.ASC:
            _LOGGER.warning("search_all expects order='asc'. Results may be incomplete.")

        annotations = []
        while True:
            rows = self.search(query)
            if not rows:
                break
            annotations.extend(rows)
            query.search_after = rows[-1].updated.isoformat()
            _LOGGER.debug(f"Fetched {len(annotations)} annotations. Next page after {query.search_after}")
        return annotations

    def get_by_id(self, annotation_id: str) -> Annotation:
        """Fetch an annotation by its unique id.

        Raises:
            APIError: If the annotation does not exist or is not readable.
        """
        return super().get_by_id(annotation_id)

    def delete(self, annotation_id: str) -> bool:
        """Delete an annotation by its unique id.

        Returns:
            Whether the service reports the annotation as deleted.
        """
        result: DeletedAnnotation = self._request_model('DELETE', self._entity_endpoint(annotation_id),
                                                        DeletedAnnotation)
        return result.deleted

    def flag(self, annotation_id: str) -> None:
        """Flag an annotation for review (moderation).

        The moderator of the group containing the annotation will be notified of the flag and
        can decide whether or not to hide the annotation.
        Flags persist and cannot be removed once they are set.
        """
        self._request_empty('PUT', self._entity_endpoint(annotation_id, 'flag'))

    def hide(self, annotation_id: str) -> None:
        """Hide an annotation.

        The authenticated user needs the moderate permission for the group that contains the
        annotation, which is granted to the user who created the group.
        """
        self._request_empty('PUT', self._entity_endpoint(annotation_id, 'hide'))

    def show(self, annotation_id: str) -> None:
        """Show ("un-hide") an annotation. Requires the same permission as :meth:`hide`."""
        self._request_empty('DELETE', self._entity_endpoint(annotation_id, 'hide'))

    async def delete_async(self, annotation_id: str,
                           session: aiohttp.ClientSession | None = None) -> bool:
        result: DeletedAnnotation = await self._request_model_async('DELETE',
                                                                    self._entity_endpoint(annotation_id),
                                                                    DeletedAnnotation,
                                                                    session=session)
        return result.deleted

    async def create_many_async(self, annotations: Sequence[InputAnnotation]) -> list[Annotation]:
        return await self._run_concurrently(
            [lambda s, a=a: self._create_async(a, session=s) for a in annotations]
        )

    def create_many(self, annotations: Sequence[InputAnnotation]) -> list[Annotation]:
        """Create several annotations concurrently.

        Returns:
            The created annotations, in the same order as `annotations`.

        Raises:
            HypothesisException: The first failure, if any call failed. No partial result is returned.
        """
        return self._run_sync(self.create_many_async(annotations))

    async def update_many_async(self,
                                annotation_ids: Sequence[str],
                                annotations: Sequence[InputAnnotation | Annotation]) -> list[Annotation]:
        if len(annotation_ids) != len(annotations):
            raise ValueError("annotation_ids and annotations must have the same length.")
        return await self._run_concurrently(
            [lambda s, i=i, a=a: self._update_async(i, a, session=s)
             for i, a in zip(annotation_ids, annotations)]
        )

    def update_many(self,
                    annotation_ids: Sequence[str],
                    annotations: Sequence[InputAnnotation | Annotation]) -> list[Annotation]:
        """Update several annotations concurrently. See :meth:`create_many`."""
        return self._run_sync(self.update_many_async(annotation_ids, annotations))

    async def get_many_async(self, annotation_ids: Sequence[str]) -> list[Annotation]:
        return await self._run_concurrently(
            [lambda s, i=i: self.get_by_id_async(i, session=s) for i in annotation_ids]
        )

    def get_many(self, annotation_ids: Sequence[str]) -> list[Annotation]:
        """Fetch several annotations concurrently. See :meth:`create_many`."""
        return self._run_sync(self.get_many_async(annotation_ids))

    async def delete_many_async(self, annotation_ids: Sequence[str]) -> list[bool]:
        return await self._run_concurrently(
            [lambda s, i=i: self.delete_async(i, session=s) for i in annotation_ids]
        )

    def delete_many(self, annotation_ids: Sequence[str]) -> list[bool]:
        """Delete several annotations concurrently. See :meth:`create_many`."""
        return self._run_sync(self.delete_many_async(annotation_ids))
