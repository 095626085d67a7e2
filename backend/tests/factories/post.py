"""Factory Boy definition for :class:`feed.models.post.Post`."""

from __future__ import annotations

import factory

from feed.models.post import Post
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class PostFactory(BaseFactory):
    class Meta:
        model = Post

    id = None
    title = factory.Sequence(lambda n: f"Post title {n}")
    content = factory.Faker("paragraph", nb_sentences=2)
    image_url = factory.Sequence(lambda n: f"images/seed-{n}.png")
    creator = factory.SubFactory(UserFactory)

    @factory.post_generation
    def owned(obj, create, extracted, **kwargs):
        """Record the post in its creator's owned-set, as the service does."""
        if not create:
            return
        obj.creator.add_post_ref(obj.id)
