"""Post lifecycle service: create, list, get, update and delete feed posts.

Each mutation runs as an ordered chain of independent units of work
(post record, then the creator's owned-set), followed by image cleanup and a
notification broadcast. Validation and ownership checks always happen before
the first write; a failure after a write has been committed is surfaced as
:class:`InternalError` and the earlier write is kept.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from feed.models.post import Post
from feed.repositories.post import PostRepository
from feed.services._shared.base import BaseService, ServiceContext
from feed.services._shared.dto import UNSET, PageMeta, PaginationIn
from feed.services._shared.errors import (
    InternalError,
    NotFoundError,
    Violation,
    ValidationFailedError,
    ViolationCollector,
)
from feed.services._shared.ports.image_store import (
    ImageFile,
    ImageStore,
    UnsupportedImageError,
)
from feed.services._shared.ports.notification_channel import (
    NotificationChannel,
    PostEvent,
)

from ._converters import post_payload, post_to_out
from .dto import PostCreateIn, PostListOut, PostOut, PostUpdateIn

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 5
DEFAULT_PAGE_SIZE = 10


class PostService(BaseService):
    """
    Orchestrate the post lifecycle for the caller in ``ctx``.

    :param ctx: Request-scoped context carrying the caller identity.
    :param images: Image store used for uploads and cleanup.
    :param channel: Notification channel receiving lifecycle events.
    :param page_size: Number of posts per feed page.
    """

    def __init__(
        self,
        *,
        ctx: ServiceContext | None = None,
        images: ImageStore,
        channel: NotificationChannel,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        super().__init__(ctx=ctx)
        self.images = images
        self.channel = channel
        self.page_size = page_size

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def list(self, pagination: PaginationIn | None = None) -> PostListOut:
        """Return one feed page, newest first. Anonymous callers are allowed."""
        page = (pagination or PaginationIn()).normalized_page
        with self.ro_uow() as uow:
            repo: PostRepository = uow.posts
            result = repo.feed_page(page=page, limit=self.page_size)
            posts = [post_to_out(p) for p in result.items]
        return PostListOut(
            posts=posts,
            total_count=result.total,
            meta=PageMeta.build(page=page, limit=self.page_size, total=result.total),
        )

    def get(self, post_id: int) -> PostOut:
        """
        Fetch a single post.

        :raises UnauthenticatedError: Anonymous caller.
        :raises NotFoundError: No post with ``post_id``.
        """
        self.require_authenticated()
        with self.ro_uow() as uow:
            post = uow.posts.get(post_id)
            if post is None:
                raise NotFoundError("Post", post_id)
            return post_to_out(post)

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def create(self, dto: PostCreateIn, *, image: ImageFile | None = None) -> PostOut:
        """
        Create a post authored by the caller.

        The image is either an already stored reference (``dto.image_url``) or
        an uploaded ``image`` file, stored only once validation has passed and
        discarded again if the post cannot be saved.

        :param dto: Title, content and optional image reference.
        :param image: Optional uploaded file taking precedence over the reference.
        :returns: The created post.
        :raises UnauthenticatedError: Anonymous caller.
        :raises ValidationFailedError: Every invalid field is listed.
        :raises NotFoundError: The caller's user record does not exist.
        :raises InternalError: The owned-set update or broadcast failed.
        """
        actor_id = self.require_authenticated()

        errors = self._validate_text(dto.title, dto.content)
        if image is None:
            errors.not_blank("image", dto.image_url)
        errors.raise_if_any()

        stored: str | None = None
        try:
            with self.rw_uow() as uow:
                creator = uow.users.get(actor_id)
                if creator is None:
                    raise NotFoundError("User", actor_id)
                if image is not None:
                    stored = self._store_image(image)
                post = Post(
                    title=dto.title,
                    content=dto.content,
                    image_url=stored or dto.image_url,
                    creator=creator,
                )
                uow.posts.add(post)
                out = post_to_out(post)
        except Exception:
            if stored is not None:
                self._discard_image(stored)
            raise

        logger.info("Post created", extra={"post_id": out.id, "user_id": actor_id})

        try:
            with self.rw_uow() as uow:
                creator = uow.users.get(actor_id)
                if creator is None:
                    raise InternalError(f"Creator {actor_id} vanished while recording post {out.id}.")
                uow.users.add_post_ref(creator, out.id)
        except SQLAlchemyError as exc:
            logger.error(
                "Owned-set update failed after post creation",
                extra={"post_id": out.id, "user_id": actor_id},
            )
            raise InternalError("Could not record the post for its creator.") from exc

        self._publish({"action": "create", "post": post_payload(out)})
        return out

    def update(self, dto: PostUpdateIn, *, image: ImageFile | None = None) -> PostOut:
        """
        Update title, content and optionally the image of a post.

        A superseded image is removed from the image store once the new
        reference has been committed, unless another post still uses it.

        :raises UnauthenticatedError: Anonymous caller.
        :raises ValidationFailedError: Every invalid field is listed.
        :raises NotFoundError: No post with ``dto.post_id``.
        :raises AuthorizationError: The caller is not the creator.
        """
        actor_id = self.require_authenticated()

        errors = self._validate_text(dto.title, dto.content)
        if image is None and dto.image_url is not UNSET:
            errors.not_blank("image", dto.image_url)
        errors.raise_if_any()

        stored: str | None = None
        try:
            with self.rw_uow() as uow:
                repo: PostRepository = uow.posts
                post = repo.get(dto.post_id)
                if post is None:
                    raise NotFoundError("Post", dto.post_id)
                self.ensure_owner(actor_id, post.creator_id)

                previous_image = post.image_url
                if image is not None:
                    stored = self._store_image(image)
                    new_image = stored
                elif dto.image_url is UNSET:
                    new_image = previous_image
                else:
                    new_image = dto.image_url

                repo.update(post, title=dto.title, content=dto.content, image_url=new_image)
                orphaned = new_image != previous_image and not repo.is_image_referenced(previous_image)
                out = post_to_out(post)
        except Exception:
            if stored is not None:
                self._discard_image(stored)
            raise

        if orphaned:
            self._discard_image(previous_image)

        logger.info("Post updated", extra={"post_id": out.id, "user_id": actor_id})
        self._publish({"action": "update", "post": post_payload(out)})
        return out

    def delete(self, post_id: int) -> None:
        """
        Delete a post, its owned-set entry and its image.

        The image is kept while any other post still references it.

        :raises UnauthenticatedError: Anonymous caller.
        :raises NotFoundError: No post with ``post_id``.
        :raises AuthorizationError: The caller is not the creator.
        :raises InternalError: A step after the record deletion failed.
        """
        actor_id = self.require_authenticated()

        with self.rw_uow() as uow:
            repo: PostRepository = uow.posts
            post = repo.get(post_id)
            if post is None:
                raise NotFoundError("Post", post_id)
            self.ensure_owner(actor_id, post.creator_id)
            image_url = post.image_url
            creator_id = post.creator_id
            repo.delete(post)
            orphaned = not repo.is_image_referenced(image_url)

        logger.info("Post deleted", extra={"post_id": post_id, "user_id": actor_id})

        try:
            with self.rw_uow() as uow:
                creator = uow.users.get(creator_id)
                if creator is None:
                    raise InternalError(f"Creator {creator_id} vanished while deleting post {post_id}.")
                uow.users.remove_post_ref(creator, post_id)
        except SQLAlchemyError as exc:
            logger.error(
                "Owned-set update failed after post deletion",
                extra={"post_id": post_id, "user_id": creator_id},
            )
            raise InternalError("Could not detach the post from its creator.") from exc

        if orphaned:
            self._discard_image(image_url)
        self._publish({"action": "delete", "post_id": post_id})

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_text(title: str | None, content: str | None) -> ViolationCollector:
        errors = ViolationCollector()
        errors.min_length("title", title, MIN_TEXT_LENGTH)
        errors.min_length("content", content, MIN_TEXT_LENGTH)
        return errors

    def _store_image(self, image: ImageFile) -> str:
        try:
            return self.images.store(image)
        except UnsupportedImageError as exc:
            raise ValidationFailedError([Violation(field="image", reason=str(exc))]) from exc

    def _discard_image(self, reference: str) -> None:
        """Remove ``reference`` from the image store; failures are logged only."""
        try:
            self.images.delete(reference)
        except Exception:
            logger.warning("Image cleanup failed", extra={"image_url": reference}, exc_info=True)

    def _publish(self, event: PostEvent) -> None:
        try:
            self.channel.publish(event)
        except Exception as exc:
            logger.error("Notification publish failed", extra={"action": event.get("action")})
            raise InternalError("Could not broadcast the post event.") from exc
