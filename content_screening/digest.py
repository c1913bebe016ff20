"""
Weekly digest assembly.

A run goes gather -> render -> publish -> flip_visibility -> notify:

- gather: pending bookmarks grouped by category, "Other" moved to the end
- render: one heading and link list per category
- publish: store the digest as a draft post
- flip_visibility: mark every gathered bookmark as published
- notify: tell the admin where to review the draft

If publish fails nothing is flipped and nobody is notified, so the
bookmarks are picked up again by the next run. Runs must not overlap; the
scheduler is responsible for that.
"""

import html
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from content_screening.bookmarks import (
    get_pending_bookmarks_by_category,
    insert_digest_post,
    list_categories,
    mark_published,
)
from content_screening.constants import DIGEST_TITLE_PREFIX, UNKNOWN_CATEGORY
from content_screening.models import Bookmark, DigestPost
from content_screening.notifier import Notifier
from content_screening.schedule import week_date_string
from util.config import DigestConfig
from util.constants import OTHER_CATEGORY
from util.logging_util import log_pipeline_step, setup_logger

logger = setup_logger(__name__)

EMAIL_BODY = (
    "Hi,\r\n\r\na new {status} post has been created for news of the week. "
    "Please review it, you can do so at:\r\n\r\n{edit_link}\r\n\r\nThanks,\r\n\r\nSocratesAI"
)

GroupedBookmarks = Dict[int, List[Bookmark]]


class DigestAssembler:
    """Builds one digest draft from the pending bookmarks.

    Args:
        config: Digest settings.
        notifier: Used for the admin email. No notification is sent without one.
        today: Reference date for the week the digest covers. Defaults to today.
        show_descriptions: Whether each link item includes its description.
    """

    post_status = "draft"

    def __init__(
        self,
        config: DigestConfig,
        notifier: Optional[Notifier] = None,
        today: Optional[date] = None,
        show_descriptions: bool = True,
    ):
        self.config = config
        self.notifier = notifier
        self.today = today
        self.show_descriptions = show_descriptions
        self.category_names: Dict[int, str] = {}

    @property
    def week_date(self) -> str:
        return week_date_string(self.today)

    @property
    def title(self) -> str:
        return f"{DIGEST_TITLE_PREFIX} {self.week_date}"

    @property
    def excerpt(self) -> str:
        return f"Links for the week: {self.week_date}"

    def gather(self) -> GroupedBookmarks:
        """Pending bookmarks by category id, with "Other" (when included) last."""
        categories = list_categories()
        self.category_names = {category.id: category.name for category in categories}

        other_id = None
        category_ids = []
        for category in categories:
            if category.name == OTHER_CATEGORY:
                if not self.config.include_other_category:
                    continue
                other_id = category.id
            category_ids.append(category.id)

        grouped = get_pending_bookmarks_by_category(category_ids)

        if other_id is not None and other_id in grouped:
            grouped[other_id] = grouped.pop(other_id)

        log_pipeline_step(logger, "gather", sum(len(b) for b in grouped.values()))
        return grouped

    def category_name(self, category_id: int) -> str:
        return self.category_names.get(category_id, UNKNOWN_CATEGORY)

    def render_link(self, bookmark: Bookmark) -> str:
        item = f"<a href='{html.escape(bookmark.url, quote=True)}'>{html.escape(bookmark.title)}</a>"
        if self.show_descriptions and bookmark.excerpt:
            item += f"<br />{html.escape(bookmark.excerpt)}"
        return f"<li>{item}</li>"

    def render_category(self, category_id: int, bookmarks: List[Bookmark]) -> str:
        heading = html.escape(self.category_name(category_id))
        items = "".join(self.render_link(bookmark) for bookmark in bookmarks)
        return f"<h2>{heading}</h2><ul>{items}</ul>"

    def render(self, grouped: GroupedBookmarks) -> str:
        """The post body: one section per category in gathered order."""
        return "".join(
            self.render_category(category_id, bookmarks)
            for category_id, bookmarks in grouped.items()
        )

    def publish(self, content: str) -> Optional[int]:
        """Store the draft. Returns the post id, or None if the store rejected it."""
        post = DigestPost(
            title=self.title,
            excerpt=self.excerpt,
            content=content,
            author_id=self.config.admin_author_id,
            category_id=self.config.post_category_id or 1,
            status=self.post_status,
        )
        try:
            post_id = insert_digest_post(post)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create digest post '{post.title}': {e}")
            return None

        logger.info(f"Created digest draft {post_id}: {post.title}")
        return post_id

    def flip_visibility(self, grouped: GroupedBookmarks) -> int:
        bookmark_ids = [bookmark.id for bookmarks in grouped.values() for bookmark in bookmarks]
        changed = mark_published(bookmark_ids)
        logger.info(f"Marked {changed} bookmark(s) as published")
        return changed

    def email_subject(self) -> str:
        return f'[Action Required] : Review newly created post for "{self.title}"'

    def email_body(self, post_id: int) -> str:
        edit_link = self.config.edit_url_template.format(post_id=post_id)
        return EMAIL_BODY.format(status=self.post_status, edit_link=edit_link)

    def notify(self, post_id: Optional[int]) -> bool:
        if post_id is None:
            return False
        if self.notifier is None:
            logger.info("No notifier configured, skipping admin notification")
            return False
        return self.notifier.notify(self.config.admin_email, self.email_subject(), self.email_body(post_id))

    def run(self) -> Optional[int]:
        """
        Assemble and store this week's digest.

        Returns:
            The new post id, or None if there was nothing to publish or the
            post could not be stored.
        """
        grouped = self.gather()
        if not grouped:
            logger.info("No pending bookmarks, no digest created")
            return None

        content = self.render(grouped)

        post_id = self.publish(content)
        if post_id is None:
            return None

        self.flip_visibility(grouped)
        self.notify(post_id)
        return post_id
