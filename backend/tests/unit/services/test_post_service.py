import pytest

from feed.models.post import Post
from feed.models.user import User
from feed.services._shared.base import ServiceContext
from feed.services._shared.dto import PaginationIn
from feed.services._shared.errors import (
    AuthorizationError,
    InternalError,
    NotFoundError,
    UnauthenticatedError,
    ValidationFailedError,
)
from feed.services._shared.identity import ANONYMOUS, Authenticated
from feed.services._shared.ports import InMemoryImageStore, InMemoryNotificationChannel
from feed.services.posts.dto import PostCreateIn, PostUpdateIn
from feed.services.posts.service import PostService
from tests.factories.post import PostFactory
from tests.factories.user import UserFactory


class _Upload:
    """Minimal stand-in for ``werkzeug.FileStorage``."""

    def __init__(self, filename: str, mimetype: str = "image/png", data: bytes = b"png") -> None:
        import io

        self.filename = filename
        self.mimetype = mimetype
        self.stream = io.BytesIO(data)

    def save(self, dst: str) -> None:  # pragma: no cover - not used by the memory store
        raise AssertionError("unexpected save")


class _FailingDeleteStore(InMemoryImageStore):
    def delete(self, reference: str) -> None:
        raise RuntimeError("image backend unavailable")


class TestPostService:
    """Validate the post lifecycle orchestration."""

    @pytest.fixture()
    def images(self) -> InMemoryImageStore:
        return InMemoryImageStore()

    @pytest.fixture()
    def channel(self) -> InMemoryNotificationChannel:
        return InMemoryNotificationChannel()

    @pytest.fixture()
    def make_service(self, db, images, channel):
        def _make(identity=ANONYMOUS) -> PostService:
            return PostService(ctx=ServiceContext(identity=identity), images=images, channel=channel)

        return _make

    @pytest.fixture()
    def author(self, session) -> User:
        return UserFactory(name="Alice")

    # ------------------------------------------------------------------ #
    # create
    # ------------------------------------------------------------------ #

    def test_create_records_creator_and_owned_set(self, make_service, author, session):
        """Given a valid post, the creator is the caller and owns the new id."""
        service = make_service(Authenticated(user_id=author.id))

        out = service.create(
            PostCreateIn(title="Hello world", content="Some content", image_url="images/a.png")
        )

        assert out.creator.id == author.id
        assert out.creator.name == "Alice"
        stored = session.get(User, author.id)
        session.refresh(stored)
        assert out.id in stored.post_ids

    def test_create_publishes_event_with_creator_summary(self, make_service, author, channel):
        """Given a created post, a create event embeds creator id and name only."""
        service = make_service(Authenticated(user_id=author.id))

        out = service.create(
            PostCreateIn(title="Hello world", content="Some content", image_url="images/a.png")
        )

        assert len(channel.events) == 1
        event = channel.events[0]
        assert event["action"] == "create"
        assert event["post"]["id"] == out.id
        assert event["post"]["creator"] == {"id": author.id, "name": "Alice"}

    def test_create_requires_authentication(self, make_service, channel):
        """Given an anonymous caller, creation is rejected before any write."""
        with pytest.raises(UnauthenticatedError):
            make_service().create(
                PostCreateIn(title="Hello world", content="Some content", image_url="images/a.png")
            )
        assert channel.events == []

    def test_create_lists_every_violation(self, make_service, author, session):
        """Given short title and content, both fields are reported together."""
        service = make_service(Authenticated(user_id=author.id))

        with pytest.raises(ValidationFailedError) as excinfo:
            service.create(PostCreateIn(title="Hi", content=" abc ", image_url=""))

        assert excinfo.value.fields == ["title", "content", "image"]
        assert session.query(Post).count() == 0

    def test_create_with_unknown_creator_raises_not_found(self, make_service, channel):
        """Given a token for a deleted user, creation fails with NotFound."""
        service = make_service(Authenticated(user_id=999))

        with pytest.raises(NotFoundError):
            service.create(
                PostCreateIn(title="Hello world", content="Some content", image_url="images/a.png")
            )
        assert channel.events == []

    def test_create_stores_uploaded_image(self, make_service, author, images):
        """Given an uploaded file, its stored reference becomes the image_url."""
        service = make_service(Authenticated(user_id=author.id))

        out = service.create(
            PostCreateIn(title="Hello world", content="Some content"),
            image=_Upload("photo.png"),
        )

        assert out.image_url in images.files

    def test_create_keeps_post_when_owned_set_update_fails(
        self, make_service, author, session, channel, monkeypatch
    ):
        """Given a failing owned-set write, the post stays and nothing is published."""
        from sqlalchemy.exc import OperationalError

        from feed.repositories.user import UserRepository

        def _boom(self, user, post_id):
            raise OperationalError("UPDATE users", {}, Exception("disk I/O error"))

        monkeypatch.setattr(UserRepository, "add_post_ref", _boom)
        service = make_service(Authenticated(user_id=author.id))

        with pytest.raises(InternalError):
            service.create(
                PostCreateIn(title="Hello world", content="Some content", image_url="images/a.png")
            )

        assert session.query(Post).count() == 1
        assert channel.events == []

    # ------------------------------------------------------------------ #
    # list / get
    # ------------------------------------------------------------------ #

    def test_list_paginates_newest_first(self, make_service, author):
        """Given 15 posts, page 2 returns the 5 oldest and the full count."""
        posts = [PostFactory(creator=author) for _ in range(15)]

        result = make_service().list(PaginationIn(page=2))

        assert result.total_count == 15
        assert [p.id for p in result.posts] == [p.id for p in reversed(posts[:5])]
        assert result.meta.has_prev is True
        assert result.meta.has_next is False

    @pytest.mark.parametrize("page", [None, 0, -3])
    def test_list_defaults_to_first_page(self, make_service, author, page):
        """Given a missing or non-positive page, the first page is returned."""
        for _ in range(12):
            PostFactory(creator=author)

        result = make_service().list(PaginationIn(page=page))

        assert len(result.posts) == 10
        assert result.meta.page == 1

    def test_get_requires_authentication(self, make_service, author):
        post = PostFactory(creator=author)

        with pytest.raises(UnauthenticatedError):
            make_service().get(post.id)

    def test_get_missing_post_raises_not_found(self, make_service, author):
        with pytest.raises(NotFoundError):
            make_service(Authenticated(user_id=author.id)).get(12345)

    def test_get_returns_supplied_values(self, make_service, author):
        """Given a created post, fetching it returns the same values."""
        service = make_service(Authenticated(user_id=author.id))
        created = service.create(
            PostCreateIn(title="  Padded title ", content="Body text", image_url="images/b.png")
        )

        fetched = service.get(created.id)

        assert fetched.title == "  Padded title "
        assert fetched.content == "Body text"
        assert fetched.image_url == "images/b.png"
        assert fetched.creator.id == author.id

    # ------------------------------------------------------------------ #
    # update
    # ------------------------------------------------------------------ #

    def test_update_without_image_keeps_reference(self, make_service, author, images, channel):
        """Given no new image, the stored reference stays and nothing is deleted."""
        post = PostFactory(creator=author, image_url="images/keep.png")
        service = make_service(Authenticated(user_id=author.id))

        out = service.update(PostUpdateIn(post_id=post.id, title="New title", content="New content"))

        assert out.image_url == "images/keep.png"
        assert out.title == "New title"
        assert images.deleted == []
        assert channel.events[-1]["action"] == "update"

    def test_update_with_new_image_deletes_previous(self, make_service, author, images):
        """Given a new image reference, the superseded image is deleted once."""
        post = PostFactory(creator=author, image_url="images/old.png")
        service = make_service(Authenticated(user_id=author.id))

        out = service.update(
            PostUpdateIn(post_id=post.id, title="New title", content="New content", image_url="images/new.png")
        )

        assert out.image_url == "images/new.png"
        assert images.deleted == ["images/old.png"]

    def test_update_with_same_image_does_not_delete(self, make_service, author, images):
        post = PostFactory(creator=author, image_url="images/same.png")
        service = make_service(Authenticated(user_id=author.id))

        service.update(
            PostUpdateIn(post_id=post.id, title="New title", content="New content", image_url="images/same.png")
        )

        assert images.deleted == []

    def test_update_by_non_creator_is_forbidden(self, make_service, author, session, images, channel):
        """Given another user's post, update is forbidden and nothing changes."""
        post = PostFactory(creator=author, title="Original title")
        intruder = UserFactory()
        service = make_service(Authenticated(user_id=intruder.id))

        with pytest.raises(AuthorizationError):
            service.update(
                PostUpdateIn(post_id=post.id, title="Hacked title", content="Hacked body", image_url="images/x.png")
            )

        session.expire_all()
        assert session.get(Post, post.id).title == "Original title"
        assert images.deleted == []
        assert channel.events == []

    def test_update_validates_before_lookup(self, make_service, author):
        """Given invalid fields for a missing post, validation is reported first."""
        service = make_service(Authenticated(user_id=author.id))

        with pytest.raises(ValidationFailedError) as excinfo:
            service.update(PostUpdateIn(post_id=999, title="x", content="y", image_url="  "))

        assert excinfo.value.fields == ["title", "content", "image"]

    def test_update_missing_post_raises_not_found(self, make_service, author):
        service = make_service(Authenticated(user_id=author.id))

        with pytest.raises(NotFoundError):
            service.update(PostUpdateIn(post_id=999, title="Valid title", content="Valid body"))

    # ------------------------------------------------------------------ #
    # delete
    # ------------------------------------------------------------------ #

    def test_delete_removes_post_image_and_owned_entry(
        self, make_service, author, session, images, channel
    ):
        """Given the creator, deletion removes record, owned id and image."""
        post = PostFactory(creator=author, image_url="images/x.png")
        post_id = post.id
        service = make_service(Authenticated(user_id=author.id))

        service.delete(post_id)

        assert images.deleted == ["images/x.png"]
        assert channel.events[-1] == {"action": "delete", "post_id": post_id}
        session.expire_all()
        assert session.get(Post, post_id) is None
        assert post_id not in session.get(User, author.id).post_ids
        with pytest.raises(NotFoundError):
            service.get(post_id)
        assert service.list().total_count == 0

    def test_delete_by_non_creator_is_forbidden(self, make_service, author, session, images):
        post = PostFactory(creator=author)
        intruder = UserFactory()

        with pytest.raises(AuthorizationError):
            make_service(Authenticated(user_id=intruder.id)).delete(post.id)

        session.expire_all()
        assert session.get(Post, post.id) is not None
        assert images.deleted == []

    def test_delete_requires_authentication(self, make_service, author):
        post = PostFactory(creator=author)

        with pytest.raises(UnauthenticatedError):
            make_service().delete(post.id)

    def test_delete_missing_post_raises_not_found(self, make_service, author):
        with pytest.raises(NotFoundError):
            make_service(Authenticated(user_id=author.id)).delete(404)

    def test_delete_reports_owned_set_failure_after_record_removed(
        self, make_service, author, session, images, channel, monkeypatch
    ):
        """Given a failing owned-set write, the record stays deleted and nothing is published."""
        from sqlalchemy.exc import OperationalError

        from feed.repositories.user import UserRepository

        def _boom(self, user, post_id):
            raise OperationalError("UPDATE users", {}, Exception("disk I/O error"))

        post = PostFactory(creator=author, owned=True)
        post_id = post.id
        monkeypatch.setattr(UserRepository, "remove_post_ref", _boom)

        with pytest.raises(InternalError):
            make_service(Authenticated(user_id=author.id)).delete(post_id)

        session.expire_all()
        assert session.get(Post, post_id) is None
        assert images.deleted == []
        assert channel.events == []

    def test_delete_succeeds_when_image_cleanup_fails(self, db, author, session, channel):
        """Given an image store that cannot delete, the post is still removed and announced."""
        post = PostFactory(creator=author)
        post_id = post.id
        service = PostService(
            ctx=ServiceContext(identity=Authenticated(user_id=author.id)),
            images=_FailingDeleteStore(),
            channel=channel,
        )

        service.delete(post_id)

        session.expire_all()
        assert session.get(Post, post_id) is None
        assert channel.events == [{"action": "delete", "post_id": post_id}]

    def test_delete_keeps_image_still_used_by_another_post(self, make_service, author, images):
        """Given two posts sharing an image, deleting one leaves the file in place."""
        PostFactory(creator=author, image_url="images/shared.png")
        other = UserFactory()
        borrowed = PostFactory(creator=other, image_url="images/shared.png")

        make_service(Authenticated(user_id=other.id)).delete(borrowed.id)

        assert images.deleted == []

    def test_update_keeps_superseded_image_still_used_by_another_post(self, make_service, author, images):
        PostFactory(creator=author, image_url="images/shared.png")
        other = UserFactory()
        borrowed = PostFactory(creator=other, image_url="images/shared.png")

        make_service(Authenticated(user_id=other.id)).update(
            PostUpdateIn(post_id=borrowed.id, title="New title", content="New content", image_url="images/own.png")
        )

        assert images.deleted == []

    def test_create_discards_uploaded_image_when_save_fails(
        self, make_service, author, session, images, channel, monkeypatch
    ):
        """Given a failing insert, the freshly stored upload is removed again."""
        from sqlalchemy.exc import OperationalError

        from feed.repositories.post import PostRepository

        def _boom(self, instance):
            raise OperationalError("INSERT INTO posts", {}, Exception("disk I/O error"))

        monkeypatch.setattr(PostRepository, "add", _boom)
        service = make_service(Authenticated(user_id=author.id))

        with pytest.raises(OperationalError):
            service.create(PostCreateIn(title="Hello world", content="Some content"), image=_Upload("photo.png"))

        assert len(images.deleted) == 1
        assert images.files == {}
        assert session.query(Post).count() == 0
        assert channel.events == []

    def test_publish_failure_is_internal_but_post_is_kept(
        self, make_service, author, session, channel, monkeypatch
    ):
        """Given a broken channel, creation reports InternalError and the post stays committed."""

        def _down(event):
            raise ConnectionError("broker unreachable")

        monkeypatch.setattr(channel, "publish", _down)
        service = make_service(Authenticated(user_id=author.id))

        with pytest.raises(InternalError):
            service.create(
                PostCreateIn(title="Hello world", content="Some content", image_url="images/a.png")
            )

        session.expire_all()
        assert session.query(Post).count() == 1
        assert len(session.get(User, author.id).post_ids) == 1
