"""
Tests for the in-memory Firestore used in development and tests.
"""

from datetime import datetime, timezone

import pytest
from firebase_admin import firestore
from google.api_core import exceptions as gcloud_exceptions

from app.config.mock_firestore import MockFirestore


@pytest.fixture
def store():
    return MockFirestore()


class TestDocuments:

    def test_set_get_roundtrip_is_a_copy(self, store):
        ref = store.collection("things").document("a")
        ref.set({"nested": {"n": 1}})

        data = ref.get().to_dict()
        data["nested"]["n"] = 2

        assert ref.get().to_dict() == {"nested": {"n": 1}}

    def test_missing_document(self, store):
        snapshot = store.collection("things").document("nope").get()
        assert snapshot.exists is False
        assert snapshot.to_dict() is None

    def test_create_conflicts_on_existing(self, store):
        ref = store.collection("things").document("a")
        ref.create({"v": 1})
        with pytest.raises(gcloud_exceptions.AlreadyExists):
            ref.create({"v": 2})
        assert ref.get().to_dict() == {"v": 1}

    def test_update_missing_document(self, store):
        with pytest.raises(gcloud_exceptions.NotFound):
            store.collection("things").document("nope").update({"v": 1})

    def test_update_dotted_path_and_array_union(self, store):
        ref = store.collection("things").document("a")
        ref.set({"meta": {"count": 1, "keep": True}, "tags": ["x"]})

        ref.update({
            "meta.count": 3,
            "tags": firestore.ArrayUnion(["x", "y"]),
        })

        assert ref.get().to_dict() == {"meta": {"count": 3, "keep": True}, "tags": ["x", "y"]}

    def test_set_merge_keeps_other_fields(self, store):
        ref = store.collection("things").document("a")
        ref.set({"a": 1, "b": 2})
        ref.set({"b": 3}, merge=True)
        assert ref.get().to_dict() == {"a": 1, "b": 3}


class TestQueries:

    def test_where_filters_are_combined(self, store):
        things = store.collection("things")
        for i, kind in enumerate(["bus", "tram", "bus", "bus"]):
            things.document(f"t{i}").set({"kind": kind, "rank": i})

        query = things.where("kind", "==", "bus").where("rank", ">", 0)

        assert sorted(d.id for d in query.stream()) == ["t2", "t3"]
        assert things.where("kind", "==", "ferry").get() == []

    def test_where_on_nested_field(self, store):
        things = store.collection("things")
        things.document("a").set({"owner": {"email": "a@x"}})
        things.document("b").set({"owner": {"email": "b@x"}})
        assert [d.id for d in things.where("owner.email", "==", "b@x").stream()] == ["b"]


class TestBatch:

    def test_batch_is_all_or_nothing(self, store):
        things = store.collection("things")
        things.document("exists").set({"v": 1})

        batch = store.batch()
        batch.set(things.document("new"), {"v": 1})
        batch.update(things.document("missing"), {"v": 2})

        with pytest.raises(gcloud_exceptions.NotFound):
            batch.commit()
        assert things.document("new").get().exists is False


class TestPersistence:

    def test_reloads_with_datetimes(self, tmp_path):
        path = str(tmp_path / "mock_db.json")
        when = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

        MockFirestore(path).collection("things").document("a").set({"at": when})

        reloaded = MockFirestore(path).collection("things").document("a").get().to_dict()
        assert reloaded == {"at": when}
