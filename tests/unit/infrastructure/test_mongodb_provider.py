"""Unit tests for MongoDB document database provider."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo import ReturnDocument

from src.commons.infrastructure.documentdb.mongodb_provider import normalize_document

VIDEO_ID = "65a1f0c2e4b0a1b2c3d4e5f7"
OWNER_ID = "65a1f0c2e4b0a1b2c3d4e5f6"


class TestNormalizeDocument:
    """Tests for BSON to plain value conversion."""

    def test_renames_id_and_stringifies_object_ids(self):
        doc = {"_id": ObjectId(VIDEO_ID), "owner": ObjectId(OWNER_ID), "views": 3}

        assert normalize_document(doc) == {
            "id": VIDEO_ID,
            "owner": OWNER_ID,
            "views": 3,
        }

    def test_nested_documents_and_lists(self):
        doc = {
            "_id": ObjectId(VIDEO_ID),
            "owner": {"_id": ObjectId(OWNER_ID), "username": "ana"},
            "likes": [{"_id": ObjectId(OWNER_ID)}],
        }

        result = normalize_document(doc)

        assert result["owner"] == {"id": OWNER_ID, "username": "ana"}
        assert result["likes"] == [{"id": OWNER_ID}]

    def test_scalars_pass_through(self):
        assert normalize_document("x") == "x"
        assert normalize_document(None) is None


class TestMongoDBDocumentDB:
    """Tests for MongoDBDocumentDB provider.

    These tests verify the mapping between ObjectId primary keys and the
    string ids used by the rest of the application.
    """

    @pytest.fixture
    def mock_motor_client(self):
        """Create a mock Motor client."""
        with patch(
            "src.commons.infrastructure.documentdb.mongodb_provider.AsyncIOMotorClient"
        ) as mock_client_class:
            mock_client = MagicMock()
            mock_db = MagicMock()
            mock_collection = MagicMock()

            mock_client.__getitem__ = MagicMock(return_value=mock_db)
            mock_db.__getitem__ = MagicMock(return_value=mock_collection)

            mock_client_class.return_value = mock_client

            yield {
                "client_class": mock_client_class,
                "client": mock_client,
                "db": mock_db,
                "collection": mock_collection,
            }

    @pytest.fixture
    def mongodb_provider(self, mock_motor_client):
        """Create MongoDB provider with mocked client."""
        from src.commons.infrastructure.documentdb.mongodb_provider import (
            MongoDBDocumentDB,
        )

        return MongoDBDocumentDB(
            connection_string="mongodb://localhost:27017",
            database_name="test_db",
        )

    # =========================================================================
    # Insert Tests
    # =========================================================================

    async def test_insert_returns_generated_id(
        self, mongodb_provider, mock_motor_client
    ):
        """Test that insert returns the store-generated id as a string."""
        collection = mock_motor_client["collection"]
        collection.insert_one = AsyncMock(
            return_value=MagicMock(inserted_id=ObjectId(VIDEO_ID))
        )

        result = await mongodb_provider.insert("videos", {"title": "Intro"})

        assert result == VIDEO_ID
        assert "_id" not in collection.insert_one.call_args.args[0]

    async def test_insert_maps_explicit_id(self, mongodb_provider, mock_motor_client):
        """Test that an explicit 'id' becomes an ObjectId '_id'."""
        collection = mock_motor_client["collection"]
        collection.insert_one = AsyncMock(
            return_value=MagicMock(inserted_id=ObjectId(VIDEO_ID))
        )
        document = {"id": VIDEO_ID, "title": "Intro"}

        await mongodb_provider.insert("videos", document)

        stored = collection.insert_one.call_args.args[0]
        assert stored["_id"] == ObjectId(VIDEO_ID)
        assert "id" not in stored
        # Original document untouched
        assert document == {"id": VIDEO_ID, "title": "Intro"}

    # =========================================================================
    # Find Tests
    # =========================================================================

    async def test_find_by_id(self, mongodb_provider, mock_motor_client):
        """Test that find_by_id queries by ObjectId and normalizes."""
        collection = mock_motor_client["collection"]
        collection.find_one = AsyncMock(
            return_value={"_id": ObjectId(VIDEO_ID), "owner": ObjectId(OWNER_ID)}
        )

        result = await mongodb_provider.find_by_id("videos", VIDEO_ID)

        collection.find_one.assert_called_once_with({"_id": ObjectId(VIDEO_ID)})
        assert result == {"id": VIDEO_ID, "owner": OWNER_ID}

    async def test_find_by_id_not_found(self, mongodb_provider, mock_motor_client):
        """Test find_by_id when the document does not exist."""
        mock_motor_client["collection"].find_one = AsyncMock(return_value=None)

        assert await mongodb_provider.find_by_id("videos", VIDEO_ID) is None

    # =========================================================================
    # Update Tests
    # =========================================================================

    async def test_find_one_and_update_returns_after_image(
        self, mongodb_provider, mock_motor_client
    ):
        """Test that updates are applied atomically and return the new doc."""
        collection = mock_motor_client["collection"]
        collection.find_one_and_update = AsyncMock(
            return_value={"_id": ObjectId(VIDEO_ID), "views": 4}
        )
        update = {"$inc": {"views": 1}}

        result = await mongodb_provider.find_one_and_update("videos", VIDEO_ID, update)

        collection.find_one_and_update.assert_called_once_with(
            {"_id": ObjectId(VIDEO_ID)},
            update,
            return_document=ReturnDocument.AFTER,
        )
        assert result == {"id": VIDEO_ID, "views": 4}

    async def test_find_one_and_update_can_return_before_image(
        self, mongodb_provider, mock_motor_client
    ):
        """Test that the replaced document can be requested instead."""
        collection = mock_motor_client["collection"]
        collection.find_one_and_update = AsyncMock(
            return_value={"_id": ObjectId(VIDEO_ID), "thumbnail": "old.jpg"}
        )
        update = {"$set": {"thumbnail": "new.jpg"}}

        result = await mongodb_provider.find_one_and_update(
            "videos", VIDEO_ID, update, return_before=True
        )

        collection.find_one_and_update.assert_called_once_with(
            {"_id": ObjectId(VIDEO_ID)},
            update,
            return_document=ReturnDocument.BEFORE,
        )
        assert result == {"id": VIDEO_ID, "thumbnail": "old.jpg"}

    async def test_find_one_and_update_accepts_pipeline(
        self, mongodb_provider, mock_motor_client
    ):
        """Test that pipeline-style updates are passed through."""
        collection = mock_motor_client["collection"]
        collection.find_one_and_update = AsyncMock(return_value=None)
        pipeline = [{"$set": {"isPublished": {"$not": ["$isPublished"]}}}]

        result = await mongodb_provider.find_one_and_update(
            "videos", VIDEO_ID, pipeline
        )

        assert result is None
        assert collection.find_one_and_update.call_args.args[1] == pipeline

    # =========================================================================
    # Delete Tests
    # =========================================================================

    async def test_find_one_and_delete_returns_removed_document(
        self, mongodb_provider, mock_motor_client
    ):
        """Test that delete hands back the document it removed."""
        collection = mock_motor_client["collection"]
        collection.find_one_and_delete = AsyncMock(
            return_value={"_id": ObjectId(VIDEO_ID), "thumbnail": "t.jpg"}
        )

        result = await mongodb_provider.find_one_and_delete("videos", VIDEO_ID)

        collection.find_one_and_delete.assert_called_once_with(
            {"_id": ObjectId(VIDEO_ID)}
        )
        assert result == {"id": VIDEO_ID, "thumbnail": "t.jpg"}

    async def test_find_one_and_delete_not_found(
        self, mongodb_provider, mock_motor_client
    ):
        """Test delete when nothing matched."""
        collection = mock_motor_client["collection"]
        collection.find_one_and_delete = AsyncMock(return_value=None)

        assert await mongodb_provider.find_one_and_delete("videos", VIDEO_ID) is None

    # =========================================================================
    # Aggregate Tests
    # =========================================================================

    async def test_aggregate_normalizes_results(
        self, mongodb_provider, mock_motor_client
    ):
        """Test that aggregation results are collected and normalized."""
        collection = mock_motor_client["collection"]

        async def mock_cursor():
            yield {"_id": ObjectId(VIDEO_ID), "owner": {"_id": ObjectId(OWNER_ID)}}

        cursor_mock = MagicMock()
        cursor_mock.__aiter__ = lambda self: mock_cursor()
        collection.aggregate = MagicMock(return_value=cursor_mock)
        pipeline = [{"$match": {"isPublished": True}}]

        results = await mongodb_provider.aggregate("videos", pipeline)

        collection.aggregate.assert_called_once_with(pipeline)
        assert results == [{"id": VIDEO_ID, "owner": {"id": OWNER_ID}}]

    async def test_aggregate_reraises(self, mongodb_provider, mock_motor_client):
        """Test that aggregation errors propagate to the caller."""
        collection = mock_motor_client["collection"]
        collection.aggregate = MagicMock(side_effect=RuntimeError("bad stage"))

        with pytest.raises(RuntimeError, match="bad stage"):
            await mongodb_provider.aggregate("videos", [{"$bogus": {}}])

    # =========================================================================
    # Index / Health Tests
    # =========================================================================

    async def test_create_text_index(self, mongodb_provider, mock_motor_client):
        """Test index creation passes keys and name through."""
        collection = mock_motor_client["collection"]
        collection.create_index = AsyncMock(return_value="video_text")
        keys = [("title", "text"), ("description", "text")]

        name = await mongodb_provider.create_index("videos", keys, name="video_text")

        assert name == "video_text"
        collection.create_index.assert_called_once_with(
            keys, unique=False, name="video_text"
        )

    async def test_health_check_healthy(self, mongodb_provider, mock_motor_client):
        """Test health check when ping succeeds."""
        mock_motor_client["client"].admin.command = AsyncMock(return_value={"ok": 1})

        status = await mongodb_provider.health_check()

        assert status.healthy is True
        assert status.details == {"database": "test_db"}

    async def test_health_check_unhealthy(self, mongodb_provider, mock_motor_client):
        """Test health check when ping fails."""
        mock_motor_client["client"].admin.command = AsyncMock(
            side_effect=RuntimeError("no route")
        )

        status = await mongodb_provider.health_check()

        assert status.healthy is False
        assert "no route" in status.message
