"""
Comment aggregation for galleries and single comments.

Comments are stored with a bare author identity. Before they reach a client
each one is joined to an author summary ``{id, first_name, last_name}``. Two
join strategies produce identical output:

- ``aggregate_comments`` (batch): one identity lookup per photo, whatever the
  number of comments. This is what the API uses.
- ``aggregate_comments_per_comment``: one identity lookup per comment. Kept as
  the reference the batch strategy is checked against.

Authors without an identity record are shown as "Unknown User" instead of
failing the request. Comment order is never changed; galleries are sorted by
photo timestamp, oldest first.
"""
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from dao.comment_dao import CommentDAO
from dao.user_dao import UserDAO
from models.photo import Comment, Photo
from models.user import User
from schemas.photo import CommentOut, PhotoOut
from schemas.user import UserSummary

logger = logging.getLogger(__name__)

UNKNOWN_FIRST_NAME = "Unknown"
UNKNOWN_LAST_NAME = "User"


def summarize_user(user: User) -> UserSummary:
    return UserSummary(id=user.id, first_name=user.first_name, last_name=user.last_name)


def unknown_author(author_id: str) -> UserSummary:
    return UserSummary(id=author_id, first_name=UNKNOWN_FIRST_NAME, last_name=UNKNOWN_LAST_NAME)


def build_comment(comment: Comment, author: UserSummary) -> CommentOut:
    return CommentOut(
        id=comment.id,
        photo_id=comment.photo_id,
        comment=comment.comment,
        date_time=comment.date_time,
        user=author
    )


def _author_for(comment: Comment, authors: Dict[str, UserSummary]) -> UserSummary:
    author = authors.get(comment.user_id)
    if author is None:
        logger.warning(f"Comment {comment.id} references unknown author {comment.user_id}")
        return unknown_author(comment.user_id)
    return author


async def aggregate_comments(comments: Sequence[Comment], user_dao: UserDAO) -> List[CommentOut]:
    """Batch join: fetch every distinct author once, then map over the comments."""
    author_ids = {comment.user_id for comment in comments}
    authors = {user.id: summarize_user(user) for user in await user_dao.get_by_ids(author_ids)}
    return [build_comment(comment, _author_for(comment, authors)) for comment in comments]


async def aggregate_comments_per_comment(comments: Sequence[Comment],
                                         user_dao: UserDAO) -> List[CommentOut]:
    """Per-comment join: one author lookup for every comment."""
    aggregated = []
    for comment in comments:
        found = await user_dao.get_by_ids([comment.user_id])
        authors = {user.id: summarize_user(user) for user in found}
        aggregated.append(build_comment(comment, _author_for(comment, authors)))
    return aggregated


async def aggregate_comment(comment: Comment, user_dao: UserDAO) -> CommentOut:
    """Aggregate a single comment, as returned by post and edit."""
    return (await aggregate_comments([comment], user_dao))[0]


def sort_gallery(photos: Iterable[Photo]) -> List[Photo]:
    """Oldest photo first; photos with equal timestamps keep their stored order."""
    return sorted(photos, key=lambda photo: photo.date_time)


async def build_gallery(photos: Iterable[Photo], comment_dao: CommentDAO, user_dao: UserDAO,
                        owner: Optional[User] = None) -> List[PhotoOut]:
    """
    Attach the aggregated comment thread to every photo of a gallery.

    Store round-trips are bounded by the number of photos: one comment query
    and one author query each.
    """
    owner_summary = summarize_user(owner) if owner is not None else None
    gallery = []
    for photo in sort_gallery(photos):
        comments = await comment_dao.list_by_photo(photo.id)
        gallery.append(PhotoOut(
            id=photo.id,
            user_id=photo.user_id,
            file_name=photo.file_name,
            date_time=photo.date_time,
            owner=owner_summary,
            comments=await aggregate_comments(comments, user_dao)
        ))
    return gallery
