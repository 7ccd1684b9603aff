"""Unit tests for video catalog models."""

from datetime import UTC, datetime

import pytest
from bson import ObjectId
from pydantic import ValidationError

from src.domain.models.video import (
    OwnerProfile,
    OwnerSummary,
    PagedResult,
    Video,
    VideoDetail,
    VideoSummary,
)

OWNER_ID = "65a1f0c2e4b0a1b2c3d4e5f6"
VIDEO_ID = "65a1f0c2e4b0a1b2c3d4e5f7"


def _owner():
    return OwnerSummary(id=OWNER_ID, username="ana")


@pytest.fixture
def stored_document():
    """A normalized video document as returned by the store."""
    now = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
    return {
        "id": VIDEO_ID,
        "videoFile": "http://blob/catalog-videos/a.mp4",
        "thumbnail": "http://blob/catalog-thumbnails/a.jpg",
        "title": "Intro",
        "description": "First video",
        "duration": 12.5,
        "views": 3,
        "isPublished": True,
        "owner": OWNER_ID,
        "createdAt": now,
        "updatedAt": now,
    }


class TestVideo:
    """Tests for the Video entity."""

    def test_from_store_document(self, stored_document):
        video = Video(**stored_document)
        assert video.id == VIDEO_ID
        assert video.video_file.endswith("a.mp4")
        assert video.is_published is True
        assert video.owner == OWNER_ID

    def test_object_ids_are_stringified(self, stored_document):
        stored_document["id"] = ObjectId(VIDEO_ID)
        stored_document["owner"] = ObjectId(OWNER_ID)
        video = Video(**stored_document)
        assert video.id == VIDEO_ID
        assert video.owner == OWNER_ID

    def test_snake_case_names_accepted(self):
        video = Video(
            id=VIDEO_ID,
            video_file="v",
            thumbnail="t",
            title="x",
            description="y",
            duration=1,
            owner=OWNER_ID,
        )
        assert video.views == 0
        assert video.is_published is True

    def test_empty_title_rejected(self, stored_document):
        stored_document["title"] = ""
        with pytest.raises(ValidationError):
            Video(**stored_document)

    def test_negative_views_rejected(self, stored_document):
        stored_document["views"] = -1
        with pytest.raises(ValidationError):
            Video(**stored_document)

    def test_to_wire_uses_camel_case(self, stored_document):
        wire = Video(**stored_document).to_wire()
        assert wire["videoFile"] == stored_document["videoFile"]
        assert wire["isPublished"] is True
        assert "createdAt" in wire
        assert "video_file" not in wire

    def test_new_builds_insert_document(self):
        doc = Video.new(
            title="Intro",
            description="First video",
            video_file="v",
            thumbnail="t",
            duration=4.2,
            owner=OWNER_ID,
            is_published=False,
        )
        assert doc["owner"] == ObjectId(OWNER_ID)
        assert doc["views"] == 0
        assert doc["isPublished"] is False
        assert doc["createdAt"] == doc["updatedAt"]
        assert "id" not in doc


class TestReadModels:
    """Tests for listing and detail read models."""

    def test_summary_with_owner_and_score(self, stored_document):
        summary = VideoSummary(
            **{
                **stored_document,
                "owner": {"_id": OWNER_ID, "id": OWNER_ID, "username": "ana"},
                "score": 1.2,
            }
        )
        assert summary.owner.username == "ana"
        assert summary.owner.full_name == ""
        assert summary.score == 1.2

    def test_summary_without_owner(self, stored_document):
        stored_document.pop("owner")
        summary = VideoSummary(**stored_document)
        assert summary.owner is None
        assert summary.score is None

    def test_detail_wire_format(self, stored_document):
        detail = VideoDetail(
            **{
                **stored_document,
                "owner": {
                    "id": OWNER_ID,
                    "username": "ana",
                    "fullName": "Ana B",
                    "avatar": "http://img/a.png",
                    "subscribersCount": 7,
                    "isSubscribed": True,
                },
                "totalLikes": 2,
                "isLiked": False,
            }
        )
        wire = detail.to_wire()
        assert wire["totalLikes"] == 2
        assert wire["isLiked"] is False
        assert wire["owner"]["fullName"] == "Ana B"
        assert wire["owner"]["subscribersCount"] == 7
        assert wire["owner"]["isSubscribed"] is True

    def test_owner_profile_defaults(self):
        profile = OwnerProfile(id=ObjectId(OWNER_ID))
        assert profile.id == OWNER_ID
        assert profile.subscribers_count == 0
        assert profile.is_subscribed is False


class TestPagedResult:
    """Tests for PagedResult page metadata."""

    def test_middle_page(self):
        page = PagedResult.build([_owner(), _owner()], total_docs=25, page=2, limit=10)
        assert page.total_pages == 3
        assert page.paging_counter == 11
        assert page.has_prev_page is True
        assert page.has_next_page is True
        assert page.prev_page == 1
        assert page.next_page == 3

    def test_last_page(self):
        page = PagedResult.build([_owner()], total_docs=21, page=3, limit=10)
        assert page.has_next_page is False
        assert page.next_page is None

    def test_empty_result(self):
        page = PagedResult.build([], total_docs=0, page=1, limit=10)
        assert page.docs == []
        assert page.total_pages == 0
        assert page.has_prev_page is False
        assert page.has_next_page is False

    def test_page_past_the_end(self):
        page = PagedResult.build([], total_docs=5, page=4, limit=10)
        assert page.docs == []
        assert page.has_prev_page is True
        assert page.has_next_page is False

    def test_wire_keys(self):
        wire = PagedResult.build([], total_docs=0, page=1, limit=10).to_wire()
        assert set(wire) == {
            "docs",
            "totalDocs",
            "limit",
            "page",
            "totalPages",
            "pagingCounter",
            "hasPrevPage",
            "hasNextPage",
            "prevPage",
            "nextPage",
        }
