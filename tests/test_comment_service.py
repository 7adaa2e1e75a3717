"""
Tests for incident comment threads.
"""

import threading

import pytest

from app.core.errors import InvalidArgument, NotFound, Unauthenticated
from app.services.comment_service import get_comment_service


@pytest.fixture
def comments(db):
    return get_comment_service()


class TestAddComment:

    def test_appends_comment_with_author_snapshot(self, alice, official, make_incident, comments, incidents):
        incident = make_incident(alice)

        comment = comments.add_comment(official, incident.id, "  Crew dispatched  ")

        assert comment.content == "Crew dispatched"
        assert comment.author.email == "olga@transit.gov"
        assert comment.author.name == "Olga Official"
        stored = incidents.get_incident(alice, incident.id)
        assert [c.id for c in stored.comments] == [comment.id]
        assert stored.updated_at == comment.created_at

    def test_comments_keep_insertion_order(self, alice, bob, make_incident, comments):
        incident = make_incident(alice)
        first = comments.add_comment(alice, incident.id, "first")
        second = comments.add_comment(bob, incident.id, "second")

        thread = comments.get_comments(bob, incident.id)

        assert [c.id for c in thread] == [first.id, second.id]

    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_blank_content_rejected(self, alice, make_incident, comments, content):
        incident = make_incident(alice)
        with pytest.raises(InvalidArgument):
            comments.add_comment(alice, incident.id, content)
        assert comments.get_comments(alice, incident.id) == []

    def test_missing_incident(self, alice, comments):
        with pytest.raises(NotFound):
            comments.add_comment(alice, "does-not-exist", "hello")

    def test_requires_principal(self, alice, make_incident, comments):
        incident = make_incident(alice)
        with pytest.raises(Unauthenticated):
            comments.add_comment(None, incident.id, "hello")

    def test_concurrent_comments_are_all_kept(self, alice, make_incident, comments):
        incident = make_incident(alice)

        threads = [
            threading.Thread(target=comments.add_comment, args=(alice, incident.id, f"comment {i}"))
            for i in range(20)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(comments.get_comments(alice, incident.id)) == 20


class TestGetComments:

    def test_missing_incident(self, alice, comments):
        with pytest.raises(NotFound):
            comments.get_comments(alice, "does-not-exist")
